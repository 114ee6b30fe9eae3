# backend/storekeeper/__init__.py
from flask import Flask, current_app, jsonify

from .config import Config
from .errors import StoreIOError
from .extensions import REPOSITORY_KEY, db, mail


def create_app(config_overrides: dict | None = None, *, repository=None) -> Flask:
    """
    Application factory.

    config_overrides are applied before extensions initialise. A ready-made
    Repository (e.g. one with a fixed clock) may be passed in; otherwise one
    is built from DOCUMENT_STORE.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    # Initialize extensions
    db.init_app(app)
    mail.init_app(app)

    # Import models so the document table is registered on db.metadata
    from . import models  # noqa: F401
    from .document_store import build_document_store
    from .repository import Repository

    if repository is None:
        repository = Repository(build_document_store(app.config))
    app.extensions[REPOSITORY_KEY] = repository

    if app.config["DOCUMENT_STORE"] == "sql":
        with app.app_context():
            db.create_all()

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.products import products_bp
    from .routes.inventory import inventory_bp
    from .routes.sales import sales_bp
    from .routes.reports import reports_bp
    from .routes.settings import settings_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(settings_bp)

    @app.errorhandler(StoreIOError)
    def handle_store_io_error(e):
        current_app.logger.error("Document store failure: %s", e, exc_info=e)
        return jsonify({"error": "Storage error"}), 500

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
