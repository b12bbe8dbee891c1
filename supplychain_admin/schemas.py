# Request payload schemas.
# Wire format is camelCase; attributes are snake_case on the Python side.

from typing import ClassVar, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StrictInt,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .models import OrderStatus, StockStatus


class Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    # Optional fields where an empty form value means "not provided" (wire names)
    blank_as_none: ClassVar[tuple] = ()

    @model_validator(mode="before")
    @classmethod
    def drop_blank_values(cls, data):
        if not isinstance(data, dict) or not cls.blank_as_none:
            return data
        return {
            key: None if key in cls.blank_as_none and isinstance(value, str) and not value.strip() else value
            for key, value in data.items()
        }


# ==================== CATEGORIES ====================

class CategoryCreate(Payload):
    blank_as_none: ClassVar[tuple] = ("id",)

    id: Optional[str] = Field(default=None, max_length=64)
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=255)


class CategoryUpdate(Payload):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=255)


# ==================== PRODUCTS ====================

class ProductCreate(Payload):
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None
    sku: str = Field(min_length=1, max_length=64)
    price: float = Field(ge=0)
    cost: float = Field(ge=0)
    category_id: str = Field(min_length=1, max_length=64)
    # Accepts numeric ids and placeholder strings like "default-user"
    user_id: Optional[Union[StrictInt, str]] = None
    initial_quantity: Optional[int] = Field(default=None, ge=0)
    min_quantity: Optional[int] = Field(default=None, ge=0)
    max_quantity: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = Field(default=None, max_length=120)

    @model_validator(mode="after")
    def check_quantity_bounds(self):
        minimum = self.min_quantity if self.min_quantity is not None else 10
        if self.max_quantity is not None and self.max_quantity < minimum:
            raise ValueError("maxQuantity must not be lower than minQuantity")
        return self


class ProductUpdate(Payload):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    sku: Optional[str] = Field(default=None, min_length=1, max_length=64)
    price: Optional[float] = Field(default=None, ge=0)
    cost: Optional[float] = Field(default=None, ge=0)
    category_id: Optional[str] = Field(default=None, min_length=1, max_length=64)


# ==================== INVENTORY ====================

class InventoryUpdate(Payload):
    quantity: Optional[int] = Field(default=None, ge=0)
    min_quantity: Optional[int] = Field(default=None, ge=0)
    max_quantity: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = Field(default=None, max_length=120)


class InventoryQuery(Payload):
    blank_as_none: ClassVar[tuple] = ("status",)

    status: Optional[StockStatus] = None


# ==================== CUSTOMERS ====================

class CustomerCreate(Payload):
    """
    Customer payload. The add-customer form posts firstName/lastName and a
    street line; those are folded into name and address.
    """
    blank_as_none: ClassVar[tuple] = ("email", "phone", "address")

    name: str = Field(min_length=1, max_length=120)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=40)
    address: Optional[str] = Field(default=None, max_length=255)

    @model_validator(mode="before")
    @classmethod
    def fold_form_fields(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("name") and (data.get("firstName") or data.get("lastName")):
            data["name"] = f"{data.get('firstName') or ''} {data.get('lastName') or ''}".strip()
        if not data.get("address") and data.get("street"):
            data["address"] = data["street"]
        return data


class CustomerUpdate(Payload):
    blank_as_none: ClassVar[tuple] = ("email", "phone", "address")

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=40)
    address: Optional[str] = Field(default=None, max_length=255)


# ==================== SUPPLIERS ====================

class SupplierCreate(Payload):
    blank_as_none: ClassVar[tuple] = ("email", "phone", "address", "contactName", "notes")

    name: str = Field(min_length=1, max_length=120)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=40)
    address: Optional[str] = Field(default=None, max_length=255)
    contact_name: Optional[str] = Field(default=None, max_length=120)
    notes: Optional[str] = None
    user_id: Optional[Union[StrictInt, str]] = None


class SupplierUpdate(Payload):
    blank_as_none: ClassVar[tuple] = ("email", "phone", "address", "contactName", "notes")

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=40)
    address: Optional[str] = Field(default=None, max_length=255)
    contact_name: Optional[str] = Field(default=None, max_length=120)
    notes: Optional[str] = None


class SupplierProductCreate(Payload):
    product_id: StrictInt
    cost: Optional[float] = Field(default=None, gt=0)
    lead_time: Optional[int] = Field(default=None, ge=0)


class SupplierProductLink(SupplierProductCreate):
    """Body of POST /supplier-products, where the supplier id travels in the payload."""
    supplier_id: StrictInt


# ==================== ORDERS ====================

class OrderCreate(Payload):
    customer_id: Optional[StrictInt] = None
    supplier_id: Optional[StrictInt] = None
    status: OrderStatus = OrderStatus.PENDING
    total: float = Field(default=0.0, ge=0)
    notes: Optional[str] = None


class OrderUpdate(Payload):
    customer_id: Optional[StrictInt] = None
    supplier_id: Optional[StrictInt] = None
    status: Optional[OrderStatus] = None
    total: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class OrderQuery(Payload):
    blank_as_none: ClassVar[tuple] = ("status",)

    status: Optional[OrderStatus] = None
