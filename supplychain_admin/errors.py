# Error taxonomy and the JSON error handlers that convert it at the
# request boundary.

import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import db

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto a JSON response."""
    status_code = 500

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Malformed or missing input."""
    status_code = 400


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Duplicate value for a unique key (e.g. a supplier/product pair)."""
    status_code = 400


class ConstraintError(AppError):
    """Row cannot be deleted because other records still reference it."""
    status_code = 400


def schema_error_details(exc):
    """
    Flatten a pydantic ValidationError into field-level detail entries.
    Each entry is {"field": "a.b", "message": "..."}.
    """
    details = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()))
        details.append({"field": field or None, "message": err.get("msg")})
    return details


# ==================== ERROR HANDLERS ====================

def register_error_handlers(app):
    """Attach JSON error handlers for the taxonomy above to the app."""

    @app.errorhandler(AppError)
    def handle_app_error(exc):
        logger.warning("%s: %s", type(exc).__name__, exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc):
        # Unknown routes, wrong methods and abort() calls
        return jsonify({"error": exc.description}), exc.code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(exc):
        db.session.rollback()
        logger.exception("Unhandled database error")
        return jsonify({"error": f"Database error: {exc}"}), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        logger.exception("Unhandled error")
        return jsonify({"error": str(exc) or type(exc).__name__}), 500
