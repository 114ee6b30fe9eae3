# backend/storekeeper/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Where the store snapshot lives: "sql" (one row in the DB below), "file" or "memory"
    DOCUMENT_STORE = os.environ.get("DOCUMENT_STORE", "sql")
    DOCUMENT_PATH = os.environ.get("DOCUMENT_PATH", "storekeeper.json")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///storekeeper.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Off: sales and stock-out may drive stock negative (the counter only warns)
    ENFORCE_STOCK_LEVELS = _env_bool("ENFORCE_STOCK_LEVELS", False)

    SESSION_MAX_AGE_SECONDS = int(os.environ.get("SESSION_MAX_AGE_SECONDS", "86400"))
    VERIFICATION_CODE_TTL_MINUTES = int(os.environ.get("VERIFICATION_CODE_TTL_MINUTES", "15"))

    # Flask-Mail, used to deliver verification codes
    MAIL_SERVER = os.environ.get("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.environ.get("MAIL_PORT", "25"))
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", False)
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.environ.get("MAIL_DEFAULT_SENDER", "noreply@storekeeper.local")

    # Used by `flask system init` when the store has no users yet
    DEFAULT_OWNER_USERNAME = os.environ.get("DEFAULT_OWNER_USERNAME")
    DEFAULT_OWNER_PASSWORD = os.environ.get("DEFAULT_OWNER_PASSWORD")
    DEFAULT_OWNER_EMAIL = os.environ.get("DEFAULT_OWNER_EMAIL")
