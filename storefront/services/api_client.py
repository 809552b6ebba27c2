"""
Storefront API Client

HTTP client for the storefront REST API.
Attaches the tab's credential to every request and invalidates it when the
API answers 401 outside the login/register endpoints.
"""

import logging
from typing import Optional

import httpx

from ..core.errors import (
    APIResponseError,
    AuthorizationError,
    MalformedResponseError,
    NetworkError,
)
from ..core.session import SessionContext

logger = logging.getLogger(__name__)

# A 401 from these means "wrong credentials", not "stale session"
AUTH_PATHS = frozenset({"/auth/login", "/auth/register"})


def _extract_error(response: httpx.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        for key in ("error", "message", "detail"):
            if isinstance(data.get(key), str):
                return data[key]
    return None


class StorefrontAPIClient:
    """
    Client for the storefront REST API.

    The credential is read from the session on every call, so a login or
    logout in between two requests is always honoured.
    """

    def __init__(
        self,
        base_url: str,
        session: SessionContext,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: Base URL of the storefront API
            session: Identity state of the calling tab
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.session = session
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    def _generate_headers(self) -> dict[str, str]:
        """Generate headers including exactly one credential header"""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        headers.update(self.session.resolve_credential().to_headers())
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> dict:
        """Make an HTTP request with the current credential"""
        url = f"{self.base_url}{path}"
        headers = self._generate_headers()

        logger.debug(f"{method} {path}")
        try:
            response = await self._http_client.request(
                method=method,
                url=url,
                headers=headers,
                json=body,
                params=params,
            )
        except httpx.HTTPError as e:
            logger.error(f"Request failed: {method} {path} - {e!r}")
            raise NetworkError(str(e)) from e

        if response.status_code == 401 and path not in AUTH_PATHS:
            logger.warning(f"Credential rejected on {method} {path}; signing out")
            self.session.clear_auth()
            self.session.redirect_to_login()
            raise AuthorizationError(401, _extract_error(response))

        if response.status_code >= 400:
            logger.error(f"Request failed: {response.status_code} - {response.text}")
            raise APIResponseError(response.status_code, _extract_error(response))

        if response.status_code == 204 or not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"{method} {path} returned non-JSON body") from e

        # every endpoint answers with a JSON object
        if not isinstance(data, dict):
            logger.error(f"Unexpected response shape from {method} {path}: {type(data).__name__}")
            raise MalformedResponseError(f"{method} {path} returned {type(data).__name__}, expected an object")
        return data

    # ==================== Auth APIs ====================

    async def login(self, email: str, password: str) -> dict:
        """Exchange credentials for a bearer token"""
        return await self._request(
            "POST",
            "/auth/login",
            body={"email": email, "password": password},
        )

    async def register(self, payload: dict) -> dict:
        """Create an account; returns a bearer token like login"""
        return await self._request("POST", "/auth/register", body=payload)

    async def check_email(self, email: str) -> dict:
        """Ask whether an email is already registered"""
        return await self._request("POST", "/auth/check-email", body={"email": email})

    # ==================== Product APIs ====================

    async def list_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> dict:
        """Browse the catalog"""
        params = {}
        if category:
            params["category"] = category
        if search:
            params["search"] = search
        if sort:
            params["sort"] = sort
        return await self._request("GET", "/catalog", params=params or None)

    async def get_product(self, product_id: str) -> dict:
        """Get product details"""
        return await self._request("GET", f"/products/{product_id}")

    # ==================== Cart APIs ====================

    async def get_cart(self) -> dict:
        """Get the cart of the current credential"""
        return await self._request("GET", "/cart")

    async def add_to_cart(self, item: dict) -> dict:
        """Add a product variant to the cart"""
        return await self._request("POST", "/cart/add", body=item)

    async def increase_cart_item(self, item_id: str) -> dict:
        return await self._request("PATCH", f"/cart/{item_id}/increase")

    async def decrease_cart_item(self, item_id: str) -> dict:
        """Decrease quantity by one; the API removes the line at zero"""
        return await self._request("PATCH", f"/cart/{item_id}/decrease")

    async def change_cart_variant(self, item_id: str, variant: dict) -> dict:
        """Switch color/size of a line item"""
        return await self._request("PATCH", f"/cart/{item_id}/change-variant", body=variant)

    async def remove_cart_item(self, item_id: str) -> dict:
        return await self._request("DELETE", f"/cart/{item_id}")

    async def move_cart_item_to_wishlist(self, item_id: str) -> dict:
        return await self._request("POST", f"/cart/move-to-wishlist/{item_id}")

    # ==================== Wishlist APIs ====================

    async def get_wishlist(self) -> dict:
        return await self._request("GET", "/wishlist")

    async def add_to_wishlist(self, product_id: str) -> dict:
        return await self._request("POST", "/wishlist/add", body={"product_id": product_id})

    async def remove_from_wishlist(self, product_id: str) -> dict:
        return await self._request("DELETE", f"/wishlist/{product_id}")

    async def move_wishlist_item_to_cart(self, product_id: str, variant: dict) -> dict:
        """Move a saved product into the cart as the given variant"""
        return await self._request("POST", f"/wishlist/move-to-cart/{product_id}", body=variant)

    # ==================== Address APIs ====================

    async def list_addresses(self) -> dict:
        return await self._request("GET", "/addresses")

    async def get_address(self, address_id: str) -> dict:
        return await self._request("GET", f"/addresses/{address_id}")

    async def add_address(self, address: dict) -> dict:
        return await self._request("POST", "/addresses", body=address)

    async def update_address(self, address_id: str, address: dict) -> dict:
        return await self._request("PUT", f"/addresses/{address_id}", body=address)

    async def delete_address(self, address_id: str) -> dict:
        return await self._request("DELETE", f"/addresses/{address_id}")

    async def set_default_address(self, address_id: str) -> dict:
        return await self._request("PATCH", f"/addresses/{address_id}/set-default")

    # ==================== Payment Card APIs ====================

    async def get_payment_card(self) -> dict:
        return await self._request("GET", "/payment-cards")

    async def add_payment_card(self, card: dict) -> dict:
        return await self._request("POST", "/payment-cards", body=card)

    async def delete_payment_card(self) -> dict:
        return await self._request("DELETE", "/payment-cards")

    # ==================== Checkout APIs ====================

    async def checkout_guest(self, payload: dict) -> dict:
        return await self._request("POST", "/checkout/guest", body=payload)

    async def checkout_saved_card(self, payload: dict) -> dict:
        return await self._request("POST", "/checkout/saved-card", body=payload)

    async def checkout_new_card(self, payload: dict) -> dict:
        return await self._request("POST", "/checkout/new-card", body=payload)

    # ==================== Order APIs ====================

    async def list_orders(self) -> dict:
        return await self._request("GET", "/orders")

    async def get_order(self, order_id: str) -> dict:
        return await self._request("GET", f"/orders/{order_id}")

    async def reorder(self, order_id: str) -> dict:
        """Put the items of a past order back into the cart"""
        return await self._request("POST", f"/orders/{order_id}/reorder")
