"""Inventory and supply-chain administration backend (Flask + SQLAlchemy)."""

from .app import close_db, create_app
from .extensions import db

__all__ = ["create_app", "close_db", "db"]
