from __future__ import annotations

import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import StoreError
from ..models import Settings, User
from ..models.settings import LANGUAGES, THEMES
from ..repository import Repository
from .auth_service import require_owner

CURRENCY_RE = re.compile(r"^[A-Z]{3}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

OPTIONAL_KEYS = {"store_logo", "login_image", "owner_email"}


class SettingsValidationError(StoreError):
    pass


def get_settings(repo: Repository) -> Settings:
    return repo.get_settings()


def get_public_settings(repo: Repository) -> dict:
    """The subset shown on the login screen."""
    return repo.get_settings().to_public_dict()


def _validate_value(key: str, value):
    if value is None:
        if key in OPTIONAL_KEYS:
            return None
        raise SettingsValidationError(f"{key} cannot be null")
    if not isinstance(value, str):
        raise SettingsValidationError(f"{key} must be a string")
    value = value.strip()

    if key == "theme" and value not in THEMES:
        raise SettingsValidationError(f"theme must be one of: {', '.join(THEMES)}")
    if key == "language" and value not in LANGUAGES:
        raise SettingsValidationError(f"language must be one of: {', '.join(LANGUAGES)}")
    if key == "currency" and not CURRENCY_RE.match(value):
        raise SettingsValidationError("currency must be a 3-letter ISO code")
    if key == "timezone":
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise SettingsValidationError(f"Unknown timezone: {value}")
    if key == "owner_email" and value and not EMAIL_RE.match(value):
        raise SettingsValidationError("owner_email must be an email address")
    if key in OPTIONAL_KEYS and not value:
        return None
    return value


def validate_patch(patch: dict) -> dict:
    if not isinstance(patch, dict) or not patch:
        raise SettingsValidationError("No settings provided")
    known = set(Settings.field_names())
    unknown = sorted(set(patch) - known)
    if unknown:
        raise SettingsValidationError(f"Unknown settings: {', '.join(unknown)}")
    return {key: _validate_value(key, value) for key, value in patch.items()}


def update_settings(repo: Repository, patch: dict, *, actor: User) -> Settings:
    """Patch the settings singleton in place. Owner only."""
    require_owner(actor)
    return repo.patch_settings(validate_patch(patch))
