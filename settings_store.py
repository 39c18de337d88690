from typing import Any, Dict, Tuple

from pymongo import ReturnDocument
from pymongo.database import Database

from database import doc_to_dict
from schemas import DEFAULT_ADMIN_EMAIL, DEFAULT_STORE_NAME, Settings

COLLECTION = "settings"


def _defaults() -> Dict[str, Any]:
    return Settings().model_dump(exclude={"id"})


def get_settings(db: Database) -> Dict[str, Any]:
    """Return the settings document, inserting the defaults on first read."""
    doc = db[COLLECTION].find_one_and_update(
        {},
        {"$setOnInsert": _defaults()},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return doc_to_dict(doc)


def update_settings(db: Database, update: Dict[str, Any]) -> Dict[str, Any]:
    """Upsert the singleton. Null values are skipped so a stored field is never blanked to None."""
    fields = {k: v for k, v in update.items() if v is not None and k not in ("id", "_id")}
    on_insert = {k: v for k, v in _defaults().items() if k not in fields}

    operation: Dict[str, Any] = {}
    if fields:
        operation["$set"] = fields
    if on_insert:
        operation["$setOnInsert"] = on_insert

    doc = db[COLLECTION].find_one_and_update(
        {},
        operation,
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return doc_to_dict(doc)


def get_store_contact(db: Database) -> Tuple[str, str]:
    """Return (store name, admin email) for notifications without creating the document."""
    doc = db[COLLECTION].find_one({}, {"store_name": 1, "email": 1}) or {}
    return doc.get("store_name") or DEFAULT_STORE_NAME, doc.get("email") or DEFAULT_ADMIN_EMAIL
