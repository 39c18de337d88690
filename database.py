"""
MongoDB access

One client is created at import time from DATABASE_URL / DATABASE_NAME and handed
to request handlers through the ``get_db`` dependency.
"""

import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import ConfigurationError, PyMongoError

from logging_config import get_logger

logger = get_logger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "cookieshop")

db: Optional[Database] = None

try:
    # MongoClient connects lazily, so this never blocks on an unreachable server
    _client = MongoClient(DATABASE_URL, serverSelectionTimeoutMS=5000, tz_aware=True)
    db = _client[DATABASE_NAME]
except ConfigurationError as e:
    logger.error("database_configuration_error", error=str(e))


def get_db() -> Database:
    if db is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return db


def check_connection() -> bool:
    """Ping the server once; failures are logged and the app keeps running."""
    if db is None:
        return False
    try:
        db.client.admin.command("ping")
        logger.info("database_connected", database=db.name)
        return True
    except PyMongoError as e:
        logger.error("database_unreachable", error=str(e))
        return False


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse an id string, returning None when it is not a valid ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def create_document(database: Database, collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Insert ``data`` with created_at/updated_at stamps and return the stored document."""
    now = utcnow()
    doc = {**data, "created_at": now, "updated_at": now}
    result = database[collection].insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


def get_documents(database: Database, collection: str, filter_dict: Optional[Dict[str, Any]] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    cursor = database[collection].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def doc_to_dict(doc: dict) -> dict:
    out = {}
    for k, v in doc.items():
        if isinstance(v, ObjectId):
            out[k] = str(v)
        else:
            out[k] = v
    if "_id" in out:
        out["id"] = out.pop("_id")
    return out
