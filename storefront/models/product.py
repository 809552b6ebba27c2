"""Catalog models"""

from pydantic import Field
from typing import Optional

from .base import APIModel


class Product(APIModel):
    """Product as returned by the catalog endpoints"""
    id: str
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    selling_price: float = 0.0
    sale_price: Optional[float] = None
    on_sale: bool = False
    image_url: Optional[str] = None
    available_colors: list = Field(default_factory=list)
    available_sizes: list = Field(default_factory=list)

    @property
    def effective_price(self) -> float:
        if self.on_sale and self.sale_price is not None:
            return self.sale_price
        return self.selling_price


class ProductList(APIModel):
    """GET /catalog response"""
    products: list[Product] = Field(default_factory=list)
