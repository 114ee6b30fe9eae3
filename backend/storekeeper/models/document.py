from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow


class StoreDocument(db.Model):
    """
    One row per store snapshot; the whole snapshot is a single JSON value.

    There is no partial update: SqlDocumentStore replaces `body` wholesale.
    """
    __tablename__ = "store_documents"

    key = db.Column(db.String(64), primary_key=True)
    body = db.Column(db.JSON, nullable=False)
    saved_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<StoreDocument key={self.key!r} saved_at={self.saved_at}>"
