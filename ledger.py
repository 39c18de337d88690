from typing import Any, Dict, List

from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database

from database import create_document, doc_to_dict, to_object_id, utcnow
from errors import NotFound
from schemas import ORDER_STATUS_PENDING, Customer, OrderItem

COLLECTION = "order"


def create_order(db: Database, customer: Customer, items: List[OrderItem], total: float) -> Dict[str, Any]:
    doc = create_document(db, COLLECTION, {
        "customer": customer.model_dump(),
        "items": [i.model_dump() for i in items],
        "total_amount": total,
        "status": ORDER_STATUS_PENDING,
    })
    return doc_to_dict(doc)


def list_orders(db: Database) -> List[Dict[str, Any]]:
    """All orders, newest first."""
    docs = db[COLLECTION].find().sort([("created_at", DESCENDING), ("_id", DESCENDING)])
    return [doc_to_dict(d) for d in docs]


def get_order(db: Database, order_id: str) -> Dict[str, Any]:
    oid = to_object_id(order_id)
    doc = db[COLLECTION].find_one({"_id": oid}) if oid else None
    if not doc:
        raise NotFound("Order not found")
    return doc_to_dict(doc)


def set_status(db: Database, order_id: str, status: str) -> Dict[str, Any]:
    oid = to_object_id(order_id)
    doc = None
    if oid:
        doc = db[COLLECTION].find_one_and_update(
            {"_id": oid},
            {"$set": {"status": status, "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
    if not doc:
        raise NotFound("Order not found")
    return doc_to_dict(doc)
