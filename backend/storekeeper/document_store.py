"""
Document store adapters.

The store is persisted as one JSON-compatible document that is always read
and written whole. Adapters return None from load() when nothing has been
saved yet; Repository turns that into an empty snapshot.

Every adapter reports read/write failures as StoreIOError.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from .errors import StoreIOError
from .extensions import db
from .models.document import StoreDocument


class DocumentStore:
    """Interface: whole-document load/save."""

    def load(self) -> dict | None:
        raise NotImplementedError

    def save(self, document: dict) -> None:
        raise NotImplementedError


class MemoryDocumentStore(DocumentStore):
    """Keeps a private deep copy of the document; used for tests and throwaway runs."""

    def __init__(self, document: dict | None = None):
        self._document = copy.deepcopy(document)

    def load(self) -> dict | None:
        return copy.deepcopy(self._document)

    def save(self, document: dict) -> None:
        self._document = copy.deepcopy(document)


class JsonFileDocumentStore(DocumentStore):
    """
    Stores the document as a JSON file.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so a crash never leaves a half-written document.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def load(self) -> dict | None:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            raise StoreIOError(f"Could not read store document: {e}") from e

    def save(self, document: dict) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".storekeeper-", suffix=".json", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StoreIOError(f"Could not write store document: {e}") from e


class SqlDocumentStore(DocumentStore):
    """
    Stores the document in the store_documents table (one row per key).

    Requires an application context; the table is created by create_app or
    `flask system init`.
    """

    def __init__(self, key: str = "default"):
        self.key = key

    def load(self) -> dict | None:
        try:
            row = db.session.get(StoreDocument, self.key)
            return copy.deepcopy(row.body) if row is not None else None
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreIOError(f"Could not read store document: {e}") from e

    def save(self, document: dict) -> None:
        try:
            row = db.session.get(StoreDocument, self.key)
            if row is None:
                db.session.add(StoreDocument(key=self.key, body=document))
            else:
                # Assign a fresh object so the JSON column is flagged dirty
                row.body = copy.deepcopy(document)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreIOError(f"Could not write store document: {e}") from e


def build_document_store(config) -> DocumentStore:
    """Pick the adapter named by DOCUMENT_STORE."""
    kind = (config.get("DOCUMENT_STORE") or "sql").lower()
    if kind == "memory":
        return MemoryDocumentStore()
    if kind == "file":
        return JsonFileDocumentStore(config["DOCUMENT_PATH"])
    if kind == "sql":
        return SqlDocumentStore()
    raise ValueError(f"Unknown DOCUMENT_STORE: {kind}")
