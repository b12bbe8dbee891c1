# Data access layer.
#
# Validated CRUD for every entity. Functions take plain dicts (decoded JSON
# bodies), validate them against the payload schemas and return model
# instances. They need an application context but no request, and they
# signal failures with the exceptions from errors.py.

import logging
import math
from collections import namedtuple
from contextlib import contextmanager

import pydantic
from flask import current_app
from pydantic.alias_generators import to_camel
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from . import schemas
from .bootstrap import ResolveStatus, resolve_category, resolve_user, slugify
from .errors import (
    ConflictError,
    ConstraintError,
    NotFoundError,
    ValidationError,
    schema_error_details,
)
from .extensions import db
from .models import (
    Category,
    Customer,
    Inventory,
    Order,
    Product,
    MAX_DB_INTEGER,
    StockStatus,
    Supplier,
    SupplierProduct,
    fits_integer_column,
)

logger = logging.getLogger(__name__)

REFERENCED_MESSAGE = "Cannot delete {} because it is referenced by other records"


# ==================== HELPERS ====================

def load(schema_cls, data):
    """Validate a decoded JSON body against a payload schema."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return schema_cls.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ValidationError("Validation error", details=schema_error_details(exc)) from exc


def _changes(payload, required=()):
    """
    Fields explicitly sent in a partial update, as plain JSON values.
    Explicit nulls are refused for columns that cannot be empty.
    """
    changes = payload.model_dump(mode="json", exclude_unset=True)
    nulls = [field for field in required if field in changes and changes[field] is None]
    if nulls:
        raise ValidationError(
            "Validation error",
            details=[{"field": to_camel(field), "message": "Field cannot be null"} for field in nulls],
        )
    return changes


@contextmanager
def transaction():
    """
    Run a block as one unit of work: commit on success, roll back and
    re-raise on any error.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def _storable_id(pk):
    """False for ids no row can have (None, or ints past the INTEGER range)."""
    if pk is None:
        return False
    return not isinstance(pk, int) or fits_integer_column(pk)


def _get_or_404(model, pk, label):
    instance = db.session.get(model, pk) if _storable_id(pk) else None
    if instance is None:
        raise NotFoundError(f"{label} not found")
    return instance


def _search(term, *columns):
    """Case-insensitive substring match over any of the columns."""
    return or_(*[column.icontains(term, autoescape=True) for column in columns])


class Page(namedtuple("Page", "items total page limit pages")):
    __slots__ = ()

    def to_dict(self, **item_kwargs):
        return {
            "items": [item.to_dict(**item_kwargs) for item in self.items],
            "pagination": {
                "total": self.total,
                "page": self.page,
                "limit": self.limit,
                "pages": self.pages,
            },
        }


def paginate(query, page=1, limit=None):
    """
    Offset pagination: offset = (page - 1) * limit, pages = ceil(total / limit).
    The query must already carry a deterministic ORDER BY.
    """
    if limit is None:
        limit = current_app.config.get("DEFAULT_PAGE_SIZE", 10)
    if page < 1:
        raise ValidationError("Validation error", details=[{"field": "page", "message": "page must be at least 1"}])
    if limit < 1:
        raise ValidationError("Validation error", details=[{"field": "limit", "message": "limit must be at least 1"}])
    limit = min(limit, current_app.config.get("MAX_PAGE_SIZE", 100))
    offset = (page - 1) * limit
    if offset > MAX_DB_INTEGER:
        raise ValidationError("Validation error", details=[{"field": "page", "message": "page is out of range"}])

    total = query.order_by(None).count()
    items = query.offset(offset).limit(limit).all()
    return Page(items, total, page, limit, math.ceil(total / limit))


# ==================== CATEGORIES ====================

def list_categories(page=1, limit=None, search=""):
    query = Category.query
    if search:
        query = query.filter(_search(search, Category.name, Category.description))
    return paginate(query.order_by(Category.name.asc()), page, limit)


def get_category(category_id):
    return _get_or_404(Category, category_id, "Category")


def create_category(data):
    payload = load(schemas.CategoryCreate, data)
    category_id = payload.id or slugify(payload.name)
    if not category_id:
        raise ValidationError("Validation error", details=[{"field": "id", "message": "Cannot derive an id from name"}])

    if db.session.get(Category, category_id) is not None:
        raise ConflictError("Category id already exists.")
    if Category.query.filter_by(name=payload.name).first():
        raise ConflictError("Category name already exists.")

    category = Category(id=category_id, name=payload.name, description=payload.description)
    try:
        with transaction() as session:
            session.add(category)
    except IntegrityError as exc:
        raise ConflictError("Category already exists.") from exc
    return category


def update_category(category_id, data):
    category = get_category(category_id)
    changes = _changes(load(schemas.CategoryUpdate, data), required=("name",))

    name = changes.get("name")
    if name and Category.query.filter(Category.name == name, Category.id != category.id).first():
        raise ConflictError("Another category with that name already exists.")

    with transaction():
        for field, value in changes.items():
            setattr(category, field, value)
    return category


def delete_category(category_id):
    category = get_category(category_id)
    # Products must be moved or removed first
    if db.session.query(Product.id).filter_by(category_id=category.id).first():
        raise ConstraintError(REFERENCED_MESSAGE.format("category"))
    try:
        with transaction() as session:
            session.delete(category)
    except IntegrityError as exc:
        raise ConstraintError(REFERENCED_MESSAGE.format("category")) from exc


# ==================== PRODUCTS ====================

def list_products(page=1, limit=None, search="", category=""):
    query = Product.query
    if search:
        query = query.filter(_search(search, Product.name, Product.description, Product.sku))
    if category:
        query = query.filter(Product.category_id == category)
    query = query.order_by(Product.created_at.desc(), Product.id.desc())
    return paginate(query, page, limit)


def get_product(product_id):
    return _get_or_404(Product, product_id, "Product")


def create_product(data):
    """
    Create a product together with its inventory row.

    The acting user and the category are resolved first (see bootstrap.py);
    any user/category rows created on the way share the product's
    transaction, so a rejected category or a failed insert leaves no rows
    behind.
    """
    payload = load(schemas.ProductCreate, data)

    try:
        with transaction() as session:
            user = resolve_user(payload.user_id).entity

            category_res = resolve_category(payload.category_id)
            if category_res.status is ResolveStatus.REJECTED:
                raise ValidationError(category_res.reason)

            if Product.query.filter_by(sku=payload.sku).first():
                raise ConflictError("A product with this SKU already exists.")

            product = Product(
                name=payload.name,
                description=payload.description,
                sku=payload.sku,
                price=payload.price,
                cost=payload.cost,
                category_id=category_res.entity.id,
                created_by_id=user.id,
            )
            product.inventory = Inventory(
                quantity=payload.initial_quantity if payload.initial_quantity is not None else 0,  # Opening stock
                min_quantity=payload.min_quantity if payload.min_quantity is not None else 10,  # Default restock threshold
                max_quantity=payload.max_quantity,
                location=payload.location,
            )
            session.add(product)
    except IntegrityError as exc:
        raise ConflictError("A product with this SKU already exists.") from exc

    logger.info("Created product %s (sku=%s)", product.id, product.sku)
    return product


def update_product(product_id, data):
    product = get_product(product_id)
    changes = _changes(
        load(schemas.ProductUpdate, data),
        required=("name", "sku", "price", "cost", "category_id"),
    )

    sku = changes.get("sku")
    if sku and Product.query.filter(Product.sku == sku, Product.id != product.id).first():
        raise ConflictError("A product with this SKU already exists.")

    try:
        with transaction():
            if "category_id" in changes:
                category_res = resolve_category(changes["category_id"])
                if category_res.status is ResolveStatus.REJECTED:
                    raise ValidationError(category_res.reason)
                changes["category_id"] = category_res.entity.id
            for field, value in changes.items():
                setattr(product, field, value)
    except IntegrityError as exc:
        raise ConflictError("A product with this SKU already exists.") from exc
    return product


def delete_product(product_id):
    """Delete a product and its inventory row; refused while suppliers list it."""
    product = get_product(product_id)
    if db.session.query(SupplierProduct.id).filter_by(product_id=product.id).first():
        raise ConstraintError(REFERENCED_MESSAGE.format("product"))
    try:
        with transaction() as session:
            session.delete(product)
    except IntegrityError as exc:
        raise ConstraintError(REFERENCED_MESSAGE.format("product")) from exc


# ==================== INVENTORY ====================

def list_inventory(page=1, limit=None, search="", status=""):
    query_args = load(schemas.InventoryQuery, {"status": status})
    query = Inventory.query.join(Inventory.product)
    if search:
        query = query.filter(_search(search, Product.name, Product.sku))

    if query_args.status is StockStatus.OUT_OF_STOCK:
        query = query.filter(Inventory.quantity <= 0)
    elif query_args.status is StockStatus.LOW_STOCK:
        query = query.filter(Inventory.quantity > 0, Inventory.quantity < Inventory.min_quantity)
    elif query_args.status is StockStatus.IN_STOCK:
        query = query.filter(Inventory.quantity > 0, Inventory.quantity >= Inventory.min_quantity)

    query = query.order_by(Product.created_at.desc(), Product.id.desc())
    return paginate(query, page, limit)


def get_inventory(product_id):
    inventory = None
    if _storable_id(product_id):
        inventory = Inventory.query.filter_by(product_id=product_id).first()
    if inventory is None:
        raise NotFoundError("Inventory record not found")
    return inventory


def update_inventory(product_id, data):
    inventory = get_inventory(product_id)
    changes = _changes(load(schemas.InventoryUpdate, data), required=("quantity", "min_quantity"))

    min_quantity = changes.get("min_quantity", inventory.min_quantity)
    max_quantity = changes.get("max_quantity", inventory.max_quantity)
    if max_quantity is not None and max_quantity < min_quantity:
        raise ValidationError(
            "Validation error",
            details=[{"field": "maxQuantity", "message": "maxQuantity must not be lower than minQuantity"}],
        )

    with transaction():
        for field, value in changes.items():
            setattr(inventory, field, value)
    return inventory


# ==================== CUSTOMERS ====================

def list_customers(page=1, limit=None, search=""):
    query = Customer.query
    if search:
        query = query.filter(_search(search, Customer.name, Customer.email))
    query = query.order_by(Customer.created_at.desc(), Customer.id.desc())
    return paginate(query, page, limit)


def get_customer(customer_id):
    return _get_or_404(Customer, customer_id, "Customer")


def create_customer(data):
    payload = load(schemas.CustomerCreate, data)
    customer = Customer(**payload.model_dump(mode="json"))
    with transaction() as session:
        session.add(customer)
    return customer


def update_customer(customer_id, data):
    customer = get_customer(customer_id)
    changes = _changes(load(schemas.CustomerUpdate, data), required=("name",))
    with transaction():
        for field, value in changes.items():
            setattr(customer, field, value)
    return customer


def delete_customer(customer_id):
    customer = get_customer(customer_id)
    if db.session.query(Order.id).filter_by(customer_id=customer.id).first():
        raise ConstraintError(REFERENCED_MESSAGE.format("customer"))
    try:
        with transaction() as session:
            session.delete(customer)
    except IntegrityError as exc:
        raise ConstraintError(REFERENCED_MESSAGE.format("customer")) from exc


# ==================== SUPPLIERS ====================

def list_suppliers(page=1, limit=None, search=""):
    query = Supplier.query
    if search:
        query = query.filter(_search(search, Supplier.name, Supplier.email, Supplier.contact_name))
    query = query.order_by(Supplier.created_at.desc(), Supplier.id.desc())
    return paginate(query, page, limit)


def get_supplier(supplier_id):
    return _get_or_404(Supplier, supplier_id, "Supplier")


def create_supplier(data):
    payload = load(schemas.SupplierCreate, data)
    fields = payload.model_dump(mode="json", exclude={"user_id"})
    with transaction() as session:
        user = resolve_user(payload.user_id).entity
        supplier = Supplier(created_by_id=user.id, **fields)
        session.add(supplier)
    return supplier


def update_supplier(supplier_id, data):
    supplier = get_supplier(supplier_id)
    changes = _changes(load(schemas.SupplierUpdate, data), required=("name",))
    with transaction():
        for field, value in changes.items():
            setattr(supplier, field, value)
    return supplier


def delete_supplier(supplier_id):
    """Refused while product links or orders still point at the supplier."""
    supplier = get_supplier(supplier_id)
    linked = db.session.query(SupplierProduct.id).filter_by(supplier_id=supplier.id).first()
    ordered = db.session.query(Order.id).filter_by(supplier_id=supplier.id).first()
    if linked or ordered:
        raise ConstraintError(REFERENCED_MESSAGE.format("supplier"))
    try:
        with transaction() as session:
            session.delete(supplier)
    except IntegrityError as exc:
        raise ConstraintError(REFERENCED_MESSAGE.format("supplier")) from exc


# ==================== SUPPLIER / PRODUCT LINKS ====================

def list_supplier_products(supplier_id):
    supplier = get_supplier(supplier_id)
    return (
        SupplierProduct.query.filter_by(supplier_id=supplier.id)
        .order_by(SupplierProduct.created_at.desc(), SupplierProduct.id.desc())
        .all()
    )


def link_supplier_product(supplier_id, data):
    """
    Associate an existing supplier with an existing product.
    Each (supplier, product) pair may exist once.
    """
    payload = load(schemas.SupplierProductCreate, data)
    supplier = get_supplier(supplier_id)
    product = get_product(payload.product_id)

    existing = SupplierProduct.query.filter_by(supplier_id=supplier.id, product_id=product.id).first()
    if existing is not None:
        raise ConflictError("This product is already associated with this supplier")

    link = SupplierProduct(
        supplier_id=supplier.id,
        product_id=product.id,
        cost=payload.cost,
        lead_time=payload.lead_time,
    )
    try:
        with transaction() as session:
            session.add(link)
    except IntegrityError as exc:
        raise ConflictError("This product is already associated with this supplier") from exc
    return link


def link_from_payload(data):
    """Variant of link_supplier_product() taking supplierId from the body."""
    payload = load(schemas.SupplierProductLink, data)
    return link_supplier_product(payload.supplier_id, payload.model_dump(by_alias=True, exclude={"supplier_id"}))


def unlink_supplier_product(supplier_id, product_id):
    link = None
    if _storable_id(supplier_id) and _storable_id(product_id):
        link = SupplierProduct.query.filter_by(supplier_id=supplier_id, product_id=product_id).first()
    if link is None:
        raise NotFoundError("Supplier product relationship not found")
    with transaction() as session:
        session.delete(link)


# ==================== ORDERS ====================

def _check_order_parties(customer_id, supplier_id):
    if customer_id is not None:
        get_customer(customer_id)
    if supplier_id is not None:
        get_supplier(supplier_id)


def list_orders(page=1, limit=None, status=""):
    query_args = load(schemas.OrderQuery, {"status": status})
    query = Order.query
    if query_args.status is not None:
        query = query.filter(Order.status == query_args.status.value)
    query = query.order_by(Order.created_at.desc(), Order.id.desc())
    return paginate(query, page, limit)


def get_order(order_id):
    return _get_or_404(Order, order_id, "Order")


def create_order(data):
    payload = load(schemas.OrderCreate, data)
    _check_order_parties(payload.customer_id, payload.supplier_id)
    order = Order(**payload.model_dump(mode="json"))
    with transaction() as session:
        session.add(order)
    return order


def update_order(order_id, data):
    order = get_order(order_id)
    changes = _changes(load(schemas.OrderUpdate, data), required=("status", "total"))
    _check_order_parties(changes.get("customer_id"), changes.get("supplier_id"))
    with transaction():
        for field, value in changes.items():
            setattr(order, field, value)
    return order


def delete_order(order_id):
    order = get_order(order_id)
    with transaction() as session:
        session.delete(order)


# ==================== DASHBOARD ====================

def dashboard_summary():
    """Headline counts and the inventory valuation at cost."""
    inventory_value = (
        db.session.query(db.func.coalesce(db.func.sum(Inventory.quantity * Product.cost), 0.0))
        .select_from(Inventory)
        .join(Product, Inventory.product_id == Product.id)
        .scalar()
    )
    low_stock = Inventory.query.filter(
        Inventory.quantity > 0, Inventory.quantity < Inventory.min_quantity
    ).count()
    out_of_stock = Inventory.query.filter(Inventory.quantity <= 0).count()

    return {
        "totalProducts": Product.query.count(),
        "totalCustomers": Customer.query.count(),
        "totalSuppliers": Supplier.query.count(),
        "totalOrders": Order.query.count(),
        "inventoryValue": float(inventory_value or 0.0),
        "lowStock": low_stock,
        "outOfStock": out_of_stock,
    }
