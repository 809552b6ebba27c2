"""Saved addresses and payment cards"""

from pydantic import Field
from typing import Optional

from .base import APIModel


class Address(APIModel):
    """A saved shipping/billing address"""
    id: Optional[str] = None
    full_name: str
    phone: str
    address1: str
    address2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str = "US"
    is_default: bool = False


class SavedCard(APIModel):
    """The user's stored card, masked by the API"""
    id: Optional[str] = None
    card_type: Optional[str] = None
    masked_number: str = ""
    expiry: Optional[str] = None

    @property
    def last_four(self) -> str:
        return self.masked_number[-4:] if self.masked_number else ""

    @property
    def display_text(self) -> str:
        return f"{self.card_type or 'Card'} ending in {self.last_four}"


class AddressList(APIModel):
    """GET /addresses response"""
    addresses: list[Address] = Field(default_factory=list)


class AddressRef(APIModel):
    id: str


class CreatedAddress(APIModel):
    """POST /addresses response; only the new id is needed"""
    address: AddressRef
