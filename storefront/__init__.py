"""
GreenShoes storefront client

Session identity and cart/wishlist synchronization for the storefront API.
"""

from .app import Storefront, load_browser, open_storefront
from .core.session import Browser, SessionContext
from .core.errors import OperationResult, QueryResult

__version__ = "1.0.0"

__all__ = [
    "Storefront",
    "load_browser",
    "open_storefront",
    "Browser",
    "SessionContext",
    "OperationResult",
    "QueryResult",
]
