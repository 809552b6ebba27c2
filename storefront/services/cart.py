"""Cart state container"""

import logging
from typing import Optional

from ..core.errors import OperationResult
from ..models.cart import AddToCartRequest, Cart, VariantChange
from .base import StateContainer

logger = logging.getLogger(__name__)


class CartContainer(StateContainer):
    """
    Mirror of the server-side cart for the current credential.

    Works for guests and signed-in users alike. Line totals and the summary
    are taken from the API as-is.
    """

    name = "cart"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cart: Cart = Cart.empty()

    @property
    def items(self):
        return self.cart.items

    @property
    def summary(self):
        return self.cart.summary

    @property
    def item_count(self) -> int:
        """Number of line items, for the header badge"""
        return self.cart.item_count

    async def _load(self) -> Cart:
        data = await self.api.get_cart()
        return Cart.model_validate(data or {})

    def _apply(self, data: Cart) -> None:
        self.cart = data

    def _apply_empty(self) -> None:
        self.cart = Cart.empty()

    # ==================== Operations ====================

    async def add_item(
        self,
        product_id: str,
        color: Optional[str],
        size: Optional[str],
        quantity: int = 1,
    ) -> OperationResult:
        """Add a product variant (color + size) to the cart"""
        if not size:
            return OperationResult.fail("Please select a size")
        if quantity < 1:
            return OperationResult.fail("Quantity must be at least 1")

        request = AddToCartRequest(product_id=product_id, color=color, size=size, quantity=quantity)
        return await self._mutate(
            product_id,
            lambda: self.api.add_to_cart(request.model_dump(by_alias=True, exclude_none=True)),
            "Failed to add to cart",
        )

    async def increase_quantity(self, item_id: str) -> OperationResult:
        return await self._mutate(
            item_id,
            lambda: self.api.increase_cart_item(item_id),
            "Failed to update quantity",
        )

    async def decrease_quantity(self, item_id: str) -> OperationResult:
        """Decrease by one; at zero the API drops the line"""
        return await self._mutate(
            item_id,
            lambda: self.api.decrease_cart_item(item_id),
            "Failed to update quantity",
        )

    async def remove_item(self, item_id: str) -> OperationResult:
        return await self._mutate(
            item_id,
            lambda: self.api.remove_cart_item(item_id),
            "Failed to remove item",
        )

    async def change_variant(
        self,
        item_id: str,
        color: Optional[str] = None,
        size: Optional[str] = None,
    ) -> OperationResult:
        """
        Switch color and/or size of a line item.

        The unchanged half of the variant is taken from the current line.
        Fails with the API's message when the new combination has no stock.
        """
        if color is None and size is None:
            return OperationResult.fail("Please select a color or size")

        current = self.cart.get_item(item_id)
        if current is not None:
            color = color if color is not None else current.color
            size = size if size is not None else current.size

        variant = VariantChange(color=color, size=size)
        return await self._mutate(
            item_id,
            lambda: self.api.change_cart_variant(item_id, variant.model_dump(exclude_none=True)),
            "Failed to change variant",
        )

    async def move_to_wishlist(self, item_id: str) -> OperationResult:
        """Move a line to the wishlist; signed-in users only"""
        if not self.session.is_authenticated:
            return OperationResult.fail("Please log in to save items to your wishlist")

        return await self._mutate(
            item_id,
            lambda: self.api.move_cart_item_to_wishlist(item_id),
            "Failed to move to wishlist",
        )

    def clear(self) -> None:
        """Discard the cart locally, e.g. after checkout"""
        self._apply_empty()
