"""
Storefront

Wires one tab: session, API client, identity channel, containers and
services. Open several Storefronts on one Browser to get tabs that share the
signed-in user but keep separate guest identities.
"""

import asyncio
import logging
from typing import Optional

import httpx
from dotenv import load_dotenv

from .core.config import Settings
from .core.errors import OperationResult
from .core.events import IdentityChannel
from .core.logging import configure_logging
from .core.session import Browser, SessionContext
from .services.account import AccountService
from .services.api_client import StorefrontAPIClient
from .services.auth import IdentityResolver
from .services.cart import CartContainer
from .services.catalog import CatalogService
from .services.checkout import CheckoutService
from .services.orders import OrderService
from .services.wishlist import WishlistContainer

logger = logging.getLogger(__name__)


class Storefront:
    """Everything one tab needs, with explicit lifetime"""

    def __init__(
        self,
        session: SessionContext,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        config = session.config
        self.api = StorefrontAPIClient(
            config.api_base_url,
            session,
            timeout=config.request_timeout,
            transport=transport,
        )
        self.channel = IdentityChannel()
        self.cart = CartContainer(self.api, self.channel)
        self.wishlist = WishlistContainer(self.api, self.channel)
        self.auth = IdentityResolver(self.api, self.channel, containers=[self.cart, self.wishlist])
        self.catalog = CatalogService(self.api)
        self.checkout = CheckoutService(self.api, self.cart)
        self.orders = OrderService(self.api, self.cart)
        self.account = AccountService(self.api)

    async def open(self) -> None:
        """Restore the stored session and load cart and wishlist"""
        self.auth.restore()
        await asyncio.gather(self.cart.start(), self.wishlist.start())

    async def close(self) -> None:
        self.cart.close()
        self.wishlist.close()
        await self.api.close()

    async def __aenter__(self) -> "Storefront":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ==================== Cross-collection moves ====================

    async def move_to_wishlist(self, item_id: str) -> OperationResult:
        """Cart line to wishlist; both sides are refetched"""
        result = await self.cart.move_to_wishlist(item_id)
        if result:
            await self.wishlist.fetch()
        return result

    async def move_to_cart(
        self,
        product_id: str,
        size: Optional[str],
        color: Optional[str] = None,
    ) -> OperationResult:
        """Wishlist entry to cart; both sides are refetched"""
        result = await self.wishlist.move_to_cart(product_id, size, color)
        if result:
            await self.cart.fetch()
        return result

    # ==================== Badges ====================

    @property
    def cart_count(self) -> int:
        return self.cart.item_count

    @property
    def wishlist_count(self) -> int:
        return self.wishlist.item_count


def load_browser(env_file: Optional[str] = None) -> Browser:
    """Read settings from the environment (and .env), set up logging"""
    load_dotenv(env_file)
    config = Settings()
    configure_logging(config)
    logger.info(f"{config.app_name} API: {config.api_base_url}")
    return Browser(config=config)


def open_storefront(
    browser: Browser,
    location: str = "/",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Storefront:
    """Open a new tab on the browser; call open() or use it as a context manager"""
    return Storefront(browser.open_tab(location), transport=transport)
