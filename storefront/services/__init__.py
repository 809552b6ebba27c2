# Services

from .api_client import StorefrontAPIClient
from .auth import IdentityResolver
from .cart import CartContainer
from .wishlist import WishlistContainer
from .checkout import CheckoutService
from .orders import OrderService
from .account import AccountService
from .catalog import CatalogService

__all__ = [
    "StorefrontAPIClient",
    "IdentityResolver",
    "CartContainer",
    "WishlistContainer",
    "CheckoutService",
    "OrderService",
    "AccountService",
    "CatalogService",
]
