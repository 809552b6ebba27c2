"""
Wishlist state container

The wishlist holds products, not variants: no size, no quantity. A size is
chosen only when an entry is moved to the cart.
"""

import logging
from typing import Optional

from ..core.errors import OperationResult
from ..models.cart import VariantChange
from ..models.wishlist import Wishlist, WishlistItem
from .base import StateContainer

logger = logging.getLogger(__name__)


class WishlistContainer(StateContainer):
    """Mirror of the server-side wishlist for the current credential"""

    name = "wishlist"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.items: list[WishlistItem] = []
        self._saved_ids: frozenset[str] = frozenset()

    @property
    def item_count(self) -> int:
        return len(self.items)

    def is_saved(self, product_id: str) -> bool:
        """Heart-icon state, read from the last fetched list"""
        return str(product_id) in self._saved_ids

    def get_item(self, product_id: str) -> Optional[WishlistItem]:
        return next((i for i in self.items if i.product_id == str(product_id)), None)

    async def _load(self) -> Wishlist:
        data = await self.api.get_wishlist()
        return Wishlist.model_validate(data or {})

    def _apply(self, data: Wishlist) -> None:
        self.items = list(data.items)
        self._saved_ids = frozenset(item.product_id for item in self.items)

    def _apply_empty(self) -> None:
        self.items = []
        self._saved_ids = frozenset()

    # ==================== Operations ====================

    async def add(self, product_id: str) -> OperationResult:
        """Save a product; the API keeps one entry per product"""
        return await self._mutate(
            product_id,
            lambda: self.api.add_to_wishlist(product_id),
            "Failed to add to wishlist",
        )

    async def remove(self, product_id: str) -> OperationResult:
        return await self._mutate(
            product_id,
            lambda: self.api.remove_from_wishlist(product_id),
            "Failed to remove from wishlist",
        )

    async def toggle(self, product_id: str) -> OperationResult:
        """Add if not saved, remove if saved"""
        if self.is_saved(product_id):
            return await self.remove(product_id)
        return await self.add(product_id)

    async def move_to_cart(
        self,
        product_id: str,
        size: Optional[str],
        color: Optional[str] = None,
    ) -> OperationResult:
        """
        Move a saved product into the cart.

        Args:
            product_id: Product to move
            size: Size for the new cart line; required
            color: Color for the new cart line; defaults to the saved entry's color
        """
        if not size:
            return OperationResult.fail("Please select a size")

        if color is None:
            saved = self.get_item(product_id)
            color = saved.color if saved else None

        variant = VariantChange(color=color, size=size)
        return await self._mutate(
            product_id,
            lambda: self.api.move_wishlist_item_to_cart(product_id, variant.model_dump(exclude_none=True)),
            "Failed to move to cart",
        )

    def clear(self) -> None:
        self._apply_empty()
