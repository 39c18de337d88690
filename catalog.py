"""Product catalog: CRUD plus the stock reservation used by order placement."""

from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database

from database import create_document, doc_to_dict, get_documents, to_object_id, utcnow
from errors import InsufficientStock, NotFound
from logging_config import get_logger
from schemas import ProductIn, ProductUpdate

logger = get_logger(__name__)

COLLECTION = "product"


def _main_image(images: List[str]) -> str:
    return images[0] if images else ""


def list_products(db: Database, category: Optional[str] = None) -> List[Dict[str, Any]]:
    query = {"category": category} if category else {}
    return [doc_to_dict(d) for d in get_documents(db, COLLECTION, query)]


def get_product(db: Database, product_id: str) -> Dict[str, Any]:
    oid = to_object_id(product_id)
    doc = db[COLLECTION].find_one({"_id": oid}) if oid else None
    if not doc:
        raise NotFound("Product not found")
    return doc_to_dict(doc)


def create_product(db: Database, product: ProductIn) -> Dict[str, Any]:
    data = product.model_dump()
    data["image"] = _main_image(product.images)
    doc = create_document(db, COLLECTION, data)
    logger.info("product_created", product_id=str(doc["_id"]), name=product.name)
    return doc_to_dict(doc)


def update_product(db: Database, product_id: str, update: ProductUpdate) -> Dict[str, Any]:
    """Apply a partial update.

    Text fields and price are only replaced by truthy values, so an empty name or
    a zero price leaves the stored value alone. Stock is the exception: any value
    that is sent, zero included, replaces it. Images replace the list whenever sent.
    """
    oid = to_object_id(product_id)
    if oid is None:
        raise NotFound("Product not found")

    changes: Dict[str, Any] = {}
    for field in ("name", "price", "description", "category"):
        value = getattr(update, field)
        if value:
            changes[field] = value
    if update.stock is not None:
        changes["stock"] = update.stock
    if update.images is not None:
        changes["images"] = update.images
        changes["image"] = _main_image(update.images)
    changes["updated_at"] = utcnow()

    doc = db[COLLECTION].find_one_and_update(
        {"_id": oid},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    if not doc:
        raise NotFound("Product not found")
    return doc_to_dict(doc)


def delete_product(db: Database, product_id: str) -> None:
    oid = to_object_id(product_id)
    result = db[COLLECTION].delete_one({"_id": oid}) if oid else None
    if result is None or result.deleted_count == 0:
        raise NotFound("Product not found")
    logger.info("product_deleted", product_id=product_id)


def reserve_stock(db: Database, product_id: str, quantity: int, name: str) -> Dict[str, Any]:
    """Atomically take ``quantity`` units, only if that many are available.

    ``name`` is the name the caller knows the product by; error messages use it.
    """
    oid = to_object_id(product_id)
    if oid is None:
        raise NotFound(f"Product {name} not found")

    doc = db[COLLECTION].find_one_and_update(
        {"_id": oid, "stock": {"$gte": quantity}},
        {"$inc": {"stock": -quantity}, "$set": {"updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if doc:
        return doc_to_dict(doc)

    current = db[COLLECTION].find_one({"_id": oid}, {"stock": 1})
    if not current:
        raise NotFound(f"Product {name} not found")
    raise InsufficientStock(name, current.get("stock", 0))


def release_stock(db: Database, product_id: str, quantity: int) -> None:
    oid = to_object_id(product_id)
    db[COLLECTION].update_one(
        {"_id": oid},
        {"$inc": {"stock": quantity}, "$set": {"updated_at": utcnow()}},
    )
    logger.info("stock_released", product_id=product_id, quantity=quantity)
