# Supply Chain Admin - database models
# Relational schema for users, categories, products, inventory, suppliers,
# supplier/product links, customers and orders.

import enum

from .extensions import db


# Largest value an INTEGER column can hold (signed 64-bit, as in SQLite)
MAX_DB_INTEGER = 2 ** 63 - 1


def fits_integer_column(value):
    """True when an int id can be bound to an INTEGER column without overflowing."""
    return -MAX_DB_INTEGER - 1 <= value <= MAX_DB_INTEGER


def _iso(value):
    """Render a datetime column for JSON output (None stays None)."""
    return value.isoformat() if value is not None else None


class StockStatus(str, enum.Enum):
    """Three-way stock level classification for an inventory row."""
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


def classify_stock(quantity, min_quantity):
    """
    Classify a stock level against its restock threshold.

    Empty shelves win over the threshold check, so a row with quantity 0 is
    out of stock even when min_quantity is 0 as well.
    """
    if (quantity or 0) <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity < (min_quantity or 0):
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


# ==================== DATABASE MODELS ====================

class User(db.Model):
    """
    Actor recorded as the creator of products and suppliers.
    There is no login; rows are created by the bootstrap policy or seeding.
    """
    id = db.Column(db.Integer, primary_key=True)  # Unique identifier for each user
    name = db.Column(db.String(120), nullable=False)  # Display name
    email = db.Column(db.String(255), unique=True, nullable=False)  # Login email (must be unique)
    role = db.Column(db.String(30), nullable=False, default="USER")  # ADMIN or USER
    created_at = db.Column(db.DateTime, server_default=db.func.now())  # Account creation time

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "createdAt": _iso(self.created_at),
        }


class Category(db.Model):
    """
    Product category. The primary key is a readable slug ("electronics",
    "home-office") so the known categories can be created on demand under a
    stable id.
    """
    id = db.Column(db.String(64), primary_key=True)  # Slug identifier (electronics, home-office, ...)
    name = db.Column(db.String(120), unique=True, nullable=False)  # Category name (must be unique)
    description = db.Column(db.String(255), nullable=True)  # Optional category description

    products = db.relationship("Product", back_populates="category", passive_deletes="all")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
        }


class Product(db.Model):
    id = db.Column(db.Integer, primary_key=True)  # Unique product identifier
    name = db.Column(db.String(120), nullable=False)  # Product name
    description = db.Column(db.Text, nullable=True)
    sku = db.Column(db.String(64), unique=True, nullable=False, index=True)  # Stock keeping unit (must be unique)
    price = db.Column(db.Float, nullable=False, default=0.0)  # Selling price per unit
    cost = db.Column(db.Float, nullable=False, default=0.0)  # Purchase cost per unit
    category_id = db.Column(db.String(64), db.ForeignKey("category.id"), nullable=False)  # Link to Category
    created_by_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)  # User who added the product
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    category = db.relationship("Category", back_populates="products", lazy="joined")
    created_by = db.relationship("User")
    # One-to-one: the inventory row lives and dies with its product
    inventory = db.relationship(
        "Inventory",
        back_populates="product",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="joined",
    )
    supplier_links = db.relationship("SupplierProduct", back_populates="product", passive_deletes="all")

    def to_dict(self, include_suppliers=False):
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "sku": self.sku,
            "price": self.price,
            "cost": self.cost,
            "categoryId": self.category_id,
            "createdById": self.created_by_id,
            "createdAt": _iso(self.created_at),
            "category": self.category.to_dict() if self.category else None,
            "inventory": self.inventory.to_dict() if self.inventory else None,
        }
        if include_suppliers:
            data["suppliers"] = [link.to_dict(include_supplier=True) for link in self.supplier_links]
        return data


class Inventory(db.Model):
    """
    Stock counts for a single product.
    min_quantity is the restock threshold used by classify_stock().
    """
    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("product.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    quantity = db.Column(db.Integer, nullable=False, default=0)  # Current stock quantity
    min_quantity = db.Column(db.Integer, nullable=False, default=10)  # Restock threshold
    max_quantity = db.Column(db.Integer, nullable=True)  # Optional shelf capacity
    location = db.Column(db.String(120), nullable=True)  # Aisle / bin label

    product = db.relationship("Product", back_populates="inventory")

    @property
    def stock_status(self):
        return classify_stock(self.quantity, self.min_quantity)

    def to_dict(self, include_product=False):
        data = {
            "productId": self.product_id,
            "quantity": self.quantity,
            "minQuantity": self.min_quantity,
            "maxQuantity": self.max_quantity,
            "location": self.location,
            "stockStatus": self.stock_status.value,
        }
        if include_product and self.product is not None:
            data["product"] = {
                "id": self.product.id,
                "name": self.product.name,
                "sku": self.product.sku,
                "categoryId": self.product.category_id,
            }
        return data


class Supplier(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(40), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    contact_name = db.Column(db.String(120), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_by_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    created_by = db.relationship("User")
    product_links = db.relationship("SupplierProduct", back_populates="supplier", passive_deletes="all")
    orders = db.relationship("Order", back_populates="supplier", passive_deletes="all")

    def to_dict(self, include_products=False):
        data = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "contactName": self.contact_name,
            "notes": self.notes,
            "createdById": self.created_by_id,
            "createdAt": _iso(self.created_at),
        }
        if include_products:
            data["products"] = [link.to_dict(include_product=True) for link in self.product_links]
        return data


class SupplierProduct(db.Model):
    """Join row between a supplier and a product it can deliver."""
    __table_args__ = (
        db.UniqueConstraint("supplier_id", "product_id", name="uq_supplier_product_pair"),
    )

    id = db.Column(db.Integer, primary_key=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("supplier.id"), nullable=False)  # Link to supplier
    product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=False)  # Link to product supplied
    cost = db.Column(db.Float, nullable=True)  # Supplier's price per unit
    lead_time = db.Column(db.Integer, nullable=True)  # days
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    supplier = db.relationship("Supplier", back_populates="product_links")
    product = db.relationship("Product", back_populates="supplier_links")

    def to_dict(self, include_product=False, include_supplier=False):
        data = {
            "id": self.id,
            "supplierId": self.supplier_id,
            "productId": self.product_id,
            "cost": self.cost,
            "leadTime": self.lead_time,
            "createdAt": _iso(self.created_at),
        }
        if include_product and self.product is not None:
            data["product"] = {
                "id": self.product.id,
                "name": self.product.name,
                "sku": self.product.sku,
                "price": self.product.price,
            }
        if include_supplier and self.supplier is not None:
            data["supplier"] = {"id": self.supplier.id, "name": self.supplier.name}
        return data


class Customer(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(40), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    orders = db.relationship("Order", back_populates="customer", passive_deletes="all")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "createdAt": _iso(self.created_at),
        }


class Order(db.Model):
    """
    Order header linked to a customer and/or a supplier.
    Line items are not modelled; total is stored as entered.
    """
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customer.id"), nullable=True)  # Buying customer, if any
    supplier_id = db.Column(db.Integer, db.ForeignKey("supplier.id"), nullable=True)  # Fulfilling supplier, if any
    status = db.Column(db.String(20), nullable=False, default=OrderStatus.PENDING.value)  # One of OrderStatus values
    total = db.Column(db.Float, nullable=False, default=0.0)  # Order total as entered
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    customer = db.relationship("Customer", back_populates="orders")
    supplier = db.relationship("Supplier", back_populates="orders")

    def to_dict(self):
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "supplierId": self.supplier_id,
            "customerName": self.customer.name if self.customer else None,
            "supplierName": self.supplier.name if self.supplier else None,
            "status": self.status,
            "total": self.total,
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
        }
