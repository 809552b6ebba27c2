"""Cart models

Prices and totals are display values computed by the API; nothing here
recomputes them.
"""

from pydantic import Field
from typing import Optional

from .base import APIModel


class CartItem(APIModel):
    """One product variant in the cart"""
    cart_item_id: str
    product_id: str
    name: str
    category: Optional[str] = None
    image_url: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    quantity: int = Field(gt=0)
    selling_price: float = 0.0
    effective_price: float = 0.0
    line_total: float = 0.0
    available_colors: list = Field(default_factory=list)
    available_sizes: list = Field(default_factory=list)


class CartSummary(APIModel):
    """Totals owned by the API"""
    subtotal: float = 0.0
    tax: float = 0.0
    shipping: float = 0.0
    total: float = 0.0


class Cart(APIModel):
    """Cart as returned by GET /cart"""
    items: list[CartItem] = Field(default_factory=list)
    summary: Optional[CartSummary] = None

    @classmethod
    def empty(cls) -> "Cart":
        return cls(items=[], summary=None)

    @property
    def item_count(self) -> int:
        return len(self.items)

    def get_item(self, cart_item_id: str) -> Optional[CartItem]:
        return next((i for i in self.items if i.cart_item_id == cart_item_id), None)


class AddToCartRequest(APIModel):
    """Body of POST /cart/add"""
    product_id: str = Field(serialization_alias="productId")
    color: Optional[str] = None
    size: str
    quantity: int = Field(default=1, gt=0)


class VariantChange(APIModel):
    """Body of change-variant and move-to-cart calls"""
    color: Optional[str] = None
    size: Optional[str] = None
