"""
Order placement and status changes

``place_order`` reserves stock item by item with an atomic conditional decrement,
so two concurrent orders can never drive a product below zero. If any item fails,
or the order cannot be written, every reservation already taken by this call is
given back before the error is reported. Emails are handed to ``schedule`` (a
BackgroundTasks.add_task in the API) and never affect the result.
"""

from typing import Any, Callable, Dict, List, Tuple

from pymongo.database import Database
from pymongo.errors import PyMongoError

import catalog
import ledger
from errors import OrderFailed, StoreError
from logging_config import get_logger
from notifications import EmailSender, notify_order_placed, notify_status_change
from schemas import DEFAULT_ADMIN_EMAIL, DEFAULT_STORE_NAME, OrderIn
from settings_store import get_store_contact

logger = get_logger(__name__)

Schedule = Callable[..., None]


def _release(db: Database, reserved: List[Tuple[str, int]]) -> None:
    for product_id, quantity in reversed(reserved):
        try:
            catalog.release_stock(db, product_id, quantity)
        except PyMongoError:
            logger.exception("stock_release_failed", product_id=product_id, quantity=quantity)


def place_order(db: Database, payload: OrderIn, sender: EmailSender, schedule: Schedule) -> Dict[str, Any]:
    reserved: List[Tuple[str, int]] = []
    try:
        for item in payload.items:
            catalog.reserve_stock(db, item.product_id, item.quantity, item.name)
            reserved.append((item.product_id, item.quantity))

        order = ledger.create_order(db, payload.customer, payload.items, payload.total)
    except StoreError as e:
        logger.warning("order_rejected", reason=e.message, released=len(reserved))
        _release(db, reserved)
        raise OrderFailed(e.message) from e
    except PyMongoError as e:
        logger.exception("order_processing_error", released=len(reserved))
        _release(db, reserved)
        raise OrderFailed("Order failed") from e

    logger.info("order_placed", order_id=order["id"], items=len(order["items"]), total=order["total_amount"])

    store_name, admin_email = _store_contact(db, order["id"])
    schedule(notify_order_placed, sender, order, admin_email, store_name)

    return order


def _store_contact(db: Database, order_id: str) -> Tuple[str, str]:
    try:
        return get_store_contact(db)
    except PyMongoError:
        logger.exception("store_contact_lookup_failed", order_id=order_id)
        return DEFAULT_STORE_NAME, DEFAULT_ADMIN_EMAIL


def update_order_status(db: Database, order_id: str, status: str, sender: EmailSender, schedule: Schedule) -> Dict[str, Any]:
    order = ledger.set_status(db, order_id, status)
    logger.info("order_status_updated", order_id=order_id, status=status)
    store_name, _ = _store_contact(db, order_id)
    schedule(notify_status_change, sender, order, store_name)
    return order
