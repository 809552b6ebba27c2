"""Checkout and order models"""

from pydantic import Field
from typing import Optional

from .base import APIModel
from .account import Address


class ShippingDetails(APIModel):
    """Shipping address typed in at checkout"""
    full_name: str = ""
    phone: str = ""
    address1: str = ""
    address2: Optional[str] = None
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = "US"

    def missing_fields(self) -> list[str]:
        required = ["full_name", "phone", "address1", "city", "state", "postal_code"]
        return [name for name in required if not getattr(self, name)]

    def to_address(self, is_default: bool = False) -> Address:
        return Address(**self.model_dump(), is_default=is_default)

    def to_guest_payload(self) -> dict:
        return {f"shipping_{k}": v for k, v in self.model_dump().items()}


class CardDetails(APIModel):
    """Card typed in at checkout; never stored client-side"""
    card_number: str = ""
    expiry: str = ""
    cvc: str = ""

    @property
    def digits(self) -> str:
        return self.card_number.replace(" ", "")


class OrderItem(APIModel):
    product_id: Optional[str] = None
    name: str = ""
    color: Optional[str] = None
    size: Optional[str] = None
    quantity: int = 1
    unit_price: float = 0.0
    line_total: float = 0.0


class Order(APIModel):
    """An order as listed in order history"""
    id: str
    order_number: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    subtotal: float = 0.0
    tax: float = 0.0
    shipping: float = 0.0
    total: float = 0.0
    items: list[OrderItem] = Field(default_factory=list)


class CheckoutReceipt(APIModel):
    """
    Checkout API response.

    Authenticated checkouts return `order`, guest checkouts return
    `order_summary`.
    """
    order: Optional[dict] = None
    order_summary: Optional[dict] = None

    @property
    def order_data(self) -> Optional[dict]:
        return self.order or self.order_summary

    @property
    def order_number(self) -> Optional[str]:
        data = self.order_data or {}
        number = data.get("order_number")
        return str(number) if number is not None else None


class OrderList(APIModel):
    """GET /orders response"""
    orders: list[Order] = Field(default_factory=list)
