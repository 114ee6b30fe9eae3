"""
Domain errors shared by the inventory, sales and persistence layers.

Every failure a caller must branch on is raised as a StoreError subclass.
Routes translate them into JSON error bodies; nothing here is fatal to the
process.
"""


class StoreError(Exception):
    """Base class for recoverable, user-facing failures."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class StoreIOError(StoreError):
    """The document store could not be read or written."""


class ProductNotFound(StoreError):
    def __init__(self, product_id: str):
        super().__init__("Product not found", details={"product_id": product_id})
        self.product_id = product_id


class InvalidQuantity(StoreError):
    """Quantity is missing, not a number, or not strictly positive."""


class InsufficientStock(StoreError):
    """Raised only when stock levels are enforced."""

    def __init__(self, product_id: str, available, requested):
        super().__init__(
            "Insufficient stock",
            details={
                "product_id": product_id,
                "available": str(available),
                "requested": str(requested),
            },
        )
        self.available = available
        self.requested = requested


class PermissionDenied(StoreError):
    """The acting user's role does not allow the operation."""
