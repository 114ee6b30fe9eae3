from .auth import User, LoginAttempt, ROLE_OWNER, ROLE_ADMIN, ROLES
from .inventory import Product, StockTransaction, STOCK_IN, STOCK_OUT, STOCK_TYPES
from .sales import Sale
from .settings import Settings
from .snapshot import Snapshot, DuplicateIdError
from .document import StoreDocument

__all__ = [
    'User', 'LoginAttempt', 'ROLE_OWNER', 'ROLE_ADMIN', 'ROLES',
    'Product', 'StockTransaction', 'STOCK_IN', 'STOCK_OUT', 'STOCK_TYPES',
    'Sale',
    'Settings',
    'Snapshot', 'DuplicateIdError',
    'StoreDocument',
]
