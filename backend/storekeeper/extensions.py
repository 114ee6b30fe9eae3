# Overview: Flask extension instances and the per-app repository accessor.

from flask import current_app
from flask_mail import Mail
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
mail = Mail()

REPOSITORY_KEY = "storekeeper"


def get_repository():
    """Return the Repository constructed by create_app for the current app."""
    return current_app.extensions[REPOSITORY_KEY]
