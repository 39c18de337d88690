import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

import catalog
import database
import ledger
import settings_store
import workflow
from database import check_connection, get_db
from errors import StoreError
from logging_config import configure_logging, get_logger
from notifications import EmailSender, get_email_sender
from schemas import (
    OrderIn,
    OrderOut,
    ProductIn,
    ProductOut,
    ProductUpdate,
    Settings,
    SettingsUpdate,
    StatusUpdate,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    check_connection()
    yield


app = FastAPI(title="CookieShop API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Error handlers ----------

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error("database_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"detail": "Server error"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", path=request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Server error"})


# ---------- Basic Routes ----------

@app.get("/")
def read_root():
    return {"message": "Cookie Shop API is running..."}


# ---------- Settings Routes ----------

@app.get("/api/settings", response_model=Settings)
def read_settings(db: Database = Depends(get_db)):
    return settings_store.get_settings(db)


@app.put("/api/settings", response_model=Settings)
def write_settings(update: SettingsUpdate, db: Database = Depends(get_db)):
    return settings_store.update_settings(db, update.model_dump(exclude_unset=True))


# ---------- Product Routes ----------

@app.get("/api/products", response_model=List[ProductOut])
def list_products(category: Optional[str] = None, db: Database = Depends(get_db)):
    return catalog.list_products(db, category)


@app.get("/api/products/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: Database = Depends(get_db)):
    return catalog.get_product(db, product_id)


@app.post("/api/products", response_model=ProductOut, status_code=201)
def create_product(product: ProductIn, db: Database = Depends(get_db)):
    return catalog.create_product(db, product)


@app.put("/api/products/{product_id}", response_model=ProductOut)
def update_product(product_id: str, update: ProductUpdate, db: Database = Depends(get_db)):
    return catalog.update_product(db, product_id, update)


@app.delete("/api/products/{product_id}")
def delete_product(product_id: str, db: Database = Depends(get_db)):
    catalog.delete_product(db, product_id)
    return {"message": "Product removed"}


# ---------- Order Routes ----------

@app.post("/api/orders", response_model=OrderOut, status_code=201)
def create_order(
    order: OrderIn,
    background_tasks: BackgroundTasks,
    db: Database = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
):
    return workflow.place_order(db, order, sender, background_tasks.add_task)


@app.get("/api/orders", response_model=List[OrderOut])
def list_orders(db: Database = Depends(get_db)):
    return ledger.list_orders(db)


@app.get("/api/orders/{order_id}", response_model=OrderOut)
def get_order(order_id: str, db: Database = Depends(get_db)):
    return ledger.get_order(db, order_id)


@app.put("/api/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: str,
    update: StatusUpdate,
    background_tasks: BackgroundTasks,
    db: Database = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
):
    return workflow.update_order_status(db, order_id, update.status, sender, background_tasks.add_task)


# ---------- Diagnostics ----------

@app.get("/test")
def test_database(sender: EmailSender = Depends(get_email_sender)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }

    db = database.db
    if db is not None:
        response["database_name"] = db.name
        try:
            response["collections"] = db.list_collection_names()[:10]
            response["connection_status"] = "Connected"
            response["database"] = "✅ Connected & Working"
        except PyMongoError as e:
            response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    else:
        response["database"] = "⚠️  Available but not initialized"

    response["database_url"] = "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set"
    response["email"] = "✅ Configured" if sender.configured else "⚠️  Mock mode"

    return response


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
