"""Wishlist models"""

from pydantic import Field
from typing import Optional

from .base import APIModel


class WishlistItem(APIModel):
    """A saved product; no variant, no quantity"""
    wishlist_item_id: Optional[str] = None
    product_id: str
    name: str
    category: Optional[str] = None
    selling_price: float = 0.0
    sale_price: Optional[float] = None
    on_sale: bool = False
    image_url: Optional[str] = None
    color: Optional[str] = None
    available_sizes: list = Field(default_factory=list)
    available_colors: list = Field(default_factory=list)


class Wishlist(APIModel):
    """Wishlist as returned by GET /wishlist"""
    items: list[WishlistItem] = Field(default_factory=list)
