# Supply Chain Admin - Flask application factory
# Builds the app: configuration, database handle, REST blueprint, JSON
# error handlers and the seeding CLI commands.

import logging
import os

import click
from flask import Flask

from . import bootstrap
from .errors import register_error_handlers
from .extensions import db
from .routes import api

logger = logging.getLogger(__name__)


# ==================== APPLICATION FACTORY ====================

def create_app(test_config=None):
    """
    Application factory function that creates and configures the Flask application.

    Args:
        test_config (dict, optional): Configuration dictionary for testing.
                                    If provided, overrides default config settings.

    Returns:
        Flask: Configured Flask application instance ready to run.
    """
    app = Flask(__name__)

    # ==================== APPLICATION CONFIGURATION ====================
    # SQLite database next to the package unless DATABASE_URL says otherwise
    project_root = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    db_path = os.path.join(project_root, 'supplychain.db')
    app.config.from_mapping(
        SQLALCHEMY_DATABASE_URI=os.environ.get('DATABASE_URL', f"sqlite:///{db_path}"),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        DEFAULT_PAGE_SIZE=int(os.environ.get('DEFAULT_PAGE_SIZE', 10)),
        MAX_PAGE_SIZE=int(os.environ.get('MAX_PAGE_SIZE', 100)),
        # Sentinel account used when a create request names no valid user
        ADMIN_EMAIL=os.environ.get('ADMIN_EMAIL', 'admin@example.com'),
        ADMIN_NAME=os.environ.get('ADMIN_NAME', 'Admin User'),
        ADMIN_ROLE=os.environ.get('ADMIN_ROLE', 'ADMIN'),
        LOG_LEVEL=os.environ.get('LOG_LEVEL', 'INFO'),
    )

    # Override config with test settings if provided (useful for unit tests)
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    # Bind the process-wide database handle to this app
    db.init_app(app)

    # ==================== DATABASE INITIALIZATION ====================
    with app.app_context():
        db.create_all()

    app.register_blueprint(api)
    register_error_handlers(app)
    _register_commands(app)

    logger.info("Application ready (database: %s)", app.config['SQLALCHEMY_DATABASE_URI'])
    return app


def close_db(app):
    """
    Release the database handle: drop the scoped session and dispose of the
    engine's connection pool. Call on shutdown.
    """
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


# ==================== CLI COMMANDS ====================

def _register_commands(app):

    @app.cli.command('seed-categories')
    def seed_categories_command():
        """Insert the initial product categories into an empty table."""
        click.echo(bootstrap.seed_categories()['message'])

    @app.cli.command('seed-users')
    def seed_users_command():
        """Create the default admin account if it is missing."""
        click.echo(bootstrap.seed_users()['message'])


# ==================== APPLICATION ENTRY POINT ====================

def main():
    """Development server entry point."""
    app = create_app()
    try:
        app.run(debug=True, host='127.0.0.1', port=5000)
    finally:
        close_db(app)


if __name__ == '__main__':
    main()
