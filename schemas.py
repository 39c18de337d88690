"""
API and document schemas

Documents are stored with snake_case keys; the API speaks camelCase
(``storeName``, ``totalAmount``, ``productId``) and accepts either form on input.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

DEFAULT_STORE_NAME = "CookieShop"
DEFAULT_ADMIN_EMAIL = "admin@cookieshop.com"
DEFAULT_CURRENCY = "LKR (Rs)"

ORDER_STATUS_PENDING = "Pending"


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Collection: settings

class Settings(ApiModel):
    """Singleton store configuration; unknown keys are kept as extension fields."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: Optional[str] = None
    store_name: str = DEFAULT_STORE_NAME
    email: str = DEFAULT_ADMIN_EMAIL
    phone: str = ""
    currency: str = DEFAULT_CURRENCY


class SettingsUpdate(ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    store_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    currency: Optional[str] = None


# Collection: product

class ProductIn(ApiModel):
    name: str = Field(..., min_length=1, description="Product name")
    price: float = Field(..., ge=0, description="Unit price")
    description: str = ""
    images: List[str] = Field(default_factory=list, description="Image URLs, first one is the main image")
    category: str = ""
    stock: int = Field(0, ge=0, description="Units available")


class ProductUpdate(ApiModel):
    name: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    images: Optional[List[str]] = None
    category: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)


class ProductOut(ProductIn):
    id: str
    image: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Collection: order

class Customer(ApiModel):
    name: str
    address: str
    phone: str = ""
    email: EmailStr


class OrderItem(ApiModel):
    product_id: str
    name: str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0, description="Unit price at time of purchase")


class OrderIn(ApiModel):
    customer: Customer
    items: List[OrderItem] = Field(..., min_length=1)
    total: float = Field(..., ge=0)


class OrderOut(ApiModel):
    id: str
    customer: Customer
    items: List[OrderItem]
    total_amount: float
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StatusUpdate(ApiModel):
    status: str = Field(..., min_length=1)
