# Entity bootstrapping policy.
#
# Product (and supplier) creation never fails because the acting user is
# unknown, and a small closed set of well-known categories is created on
# first use. Both lookups return a tagged Resolution so callers and tests
# can tell which branch fired.
#
# Nothing here commits: rows are added and flushed into the caller's
# transaction, which decides whether they survive.

import enum
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from flask import current_app

from .extensions import db
from .models import Category, User, fits_integer_column

logger = logging.getLogger(__name__)

# Category slugs that may be created on demand, with their display names
KNOWN_CATEGORIES = {
    "electronics": "Electronics",
    "accessories": "Accessories",
    "home-office": "Home Office",
    "clothing": "Clothing",
}

# Rows inserted by the seed routine on an empty category table
INITIAL_CATEGORIES = [
    {"name": "Electronics", "description": "Electronic devices and gadgets"},
    {"name": "Accessories", "description": "Various accessories for products"},
    {"name": "Home Office", "description": "Products for home and office use"},
    {"name": "Clothing", "description": "Apparel and wearable items"},
    {"name": "Food & Beverages", "description": "Consumable products"},
]


class ResolveStatus(enum.Enum):
    FOUND = "found"
    CREATED = "created"
    REJECTED = "rejected"


@dataclass
class Resolution:
    status: ResolveStatus
    entity: Any = None
    reason: Optional[str] = None

    @property
    def ok(self):
        return self.status is not ResolveStatus.REJECTED


def slugify(name):
    """'Home Office' -> 'home-office', 'Food & Beverages' -> 'food-beverages'."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower())
    return slug.strip("-")


def _admin_defaults():
    config = current_app.config
    return (
        config.get("ADMIN_EMAIL", "admin@example.com"),
        config.get("ADMIN_NAME", "Admin User"),
        config.get("ADMIN_ROLE", "ADMIN"),
    )


def _lookup_user(user_id):
    # Ids arrive as ints or as opaque strings ("default-user"); only
    # integer-like values can match a row.
    if user_id is None or isinstance(user_id, bool):
        return None
    try:
        pk = int(user_id)
    except (TypeError, ValueError):
        return None
    if not fits_integer_column(pk):
        return None  # No row can have an id the column cannot store
    return db.session.get(User, pk)


# ==================== USERS ====================

def resolve_user(user_id=None):
    """
    Resolve the acting user for a create operation.

    Fallback chain:
      1. the given id, when it exists            -> FOUND
      2. the admin account looked up by email    -> FOUND
      3. a freshly created admin account         -> CREATED

    Never returns REJECTED.
    """
    user = _lookup_user(user_id)
    if user is not None:
        return Resolution(ResolveStatus.FOUND, user)

    email, name, role = _admin_defaults()
    admin = User.query.filter_by(email=email).first()
    if admin is not None:
        return Resolution(ResolveStatus.FOUND, admin)

    admin = User(name=name, email=email, role=role)
    db.session.add(admin)
    db.session.flush()
    logger.info("Created default admin user %s (id=%s)", email, admin.id)
    return Resolution(ResolveStatus.CREATED, admin)


# ==================== CATEGORIES ====================

def resolve_category(category_id):
    """
    Resolve a category id, creating one of the KNOWN_CATEGORIES on demand.
    Unknown ids with no existing row are REJECTED.
    """
    category = db.session.get(Category, category_id) if category_id else None
    if category is not None:
        return Resolution(ResolveStatus.FOUND, category)

    display_name = KNOWN_CATEGORIES.get(category_id)
    if display_name is None:
        return Resolution(
            ResolveStatus.REJECTED,
            reason="Category not found. Please select a valid category.",
        )

    # A category with the display name may already exist under another id
    existing = Category.query.filter_by(name=display_name).first()
    if existing is not None:
        return Resolution(ResolveStatus.FOUND, existing)

    category = Category(
        id=category_id,
        name=display_name,
        description=f"{display_name} category",
    )
    db.session.add(category)
    db.session.flush()
    logger.info("Bootstrapped category %r", category_id)
    return Resolution(ResolveStatus.CREATED, category)


# ==================== SEEDING ====================

def seed_categories():
    """
    Insert INITIAL_CATEGORIES when the category table is empty.
    Returns a summary dict; commits on success.
    """
    existing_count = Category.query.count()
    if existing_count > 0:
        return {
            "message": f"Database already has {existing_count} categories.",
            "seeded": False,
        }

    categories = [
        Category(id=slugify(item["name"]), name=item["name"], description=item["description"])
        for item in INITIAL_CATEGORIES
    ]
    db.session.add_all(categories)
    db.session.commit()
    logger.info("Seeded %d categories", len(categories))
    return {
        "message": f"Successfully seeded {len(categories)} categories.",
        "categories": [c.to_dict() for c in categories],
        "seeded": True,
    }


def seed_users():
    """Create the default admin account unless it already exists."""
    email, _, _ = _admin_defaults()
    existing = User.query.filter_by(email=email).first()
    if existing is not None:
        return {
            "message": "Default user already exists",
            "user": existing.to_dict(),
            "seeded": False,
        }

    resolution = resolve_user(None)
    db.session.commit()
    return {
        "message": "Successfully created default user",
        "user": resolution.entity.to_dict(),
        "seeded": True,
    }
