from __future__ import annotations

from dataclasses import asdict, dataclass, fields

THEMES = ("light", "dark")
LANGUAGES = ("id", "en")

# Shown on the login screen before anyone is authenticated
PUBLIC_FIELDS = ("store_name", "store_logo", "login_message", "login_image", "theme", "language")


@dataclass
class Settings:
    """Store-wide settings singleton. Patched in place, never recreated."""
    store_name: str = "Toko Saya"
    store_address: str = ""
    store_logo: str | None = None
    store_admin: str = ""
    store_cs: str = ""
    theme: str = "light"
    language: str = "id"
    currency: str = "IDR"
    timezone: str = "Asia/Jakarta"
    login_message: str = "Silahkan Masukkan Username dan Password"
    login_image: str | None = None
    owner_email: str | None = None

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def to_dict(self) -> dict:
        return asdict(self)

    def to_public_dict(self) -> dict:
        return {name: getattr(self, name) for name in PUBLIC_FIELDS}

    @classmethod
    def from_document(cls, data: dict | None) -> "Settings":
        # Unknown keys from older documents are dropped
        known = set(cls.field_names())
        return cls(**{k: v for k, v in (data or {}).items() if k in known})
