# Shared Flask extension instances.
# Created once at import time and bound to an application in create_app().

import sqlite3

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

# Process-wide database handle (engine + scoped session per app context)
db = SQLAlchemy()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """
    SQLite ignores FOREIGN KEY clauses unless asked.
    Turn enforcement on for every new SQLite connection so deletes of
    referenced rows fail instead of leaving dangling ids behind.
    """
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
