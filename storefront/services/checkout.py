"""
Checkout

Validates shipping and card input locally, submits the order, then discards
the local cart and refetches it. Card details are never stored client-side.

A Buy Now checkout starts from a single product instead of the cart: the
product is added to the cart right before the order is submitted.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from ..core.errors import QueryResult, StorefrontError, error_message
from ..models.account import CreatedAddress
from ..models.cart import AddToCartRequest
from ..models.checkout import CardDetails, CheckoutReceipt, ShippingDetails
from ..utils.cards import is_valid_cvc, is_valid_expiry, validate_card_number
from .api_client import StorefrontAPIClient
from .cart import CartContainer

logger = logging.getLogger(__name__)

INVALID_CARD = "Invalid card number. Please check and try again."


def validate_card(card: CardDetails) -> Optional[str]:
    """Error message for bad card input, or None"""
    if not (card.card_number and card.expiry and card.cvc):
        return "Please fill in all payment fields"
    if not validate_card_number(card.digits):
        return INVALID_CARD
    if not is_valid_expiry(card.expiry):
        return "Please enter a valid expiry date (MM/YY)"
    if not is_valid_cvc(card.cvc):
        return "Please enter a valid CVC"
    return None


def validate_shipping(shipping: ShippingDetails) -> Optional[str]:
    if shipping.missing_fields():
        return "Please fill in all shipping address fields"
    return None


class CheckoutService:
    """Guest, saved-card and new-card checkout"""

    def __init__(self, api: StorefrontAPIClient, cart: CartContainer):
        self.api = api
        self.session = api.session
        self.cart = cart

    def _check_cart(self, buy_now: Optional[AddToCartRequest]) -> Optional[str]:
        if buy_now is None and not self.cart.items:
            return "Your cart is empty"
        return None

    async def _add_buy_now(self, buy_now: Optional[AddToCartRequest]) -> Optional[str]:
        """Put a Buy Now product into the cart ahead of the order"""
        if buy_now is None:
            return None
        result = await self.cart.add_item(buy_now.product_id, buy_now.color, buy_now.size, buy_now.quantity)
        return result.error

    async def _submit(self, call) -> QueryResult:
        try:
            data = await call()
            receipt = CheckoutReceipt.model_validate(data)
        except StorefrontError as e:
            logger.warning(f"Checkout failed: {e}")
            return QueryResult.fail(error_message(e, "Checkout failed. Please try again."))
        except ValidationError:
            logger.exception("Malformed checkout response")
            return QueryResult.fail("Checkout failed. Please try again.")

        logger.info(f"Order placed: {receipt.order_number or 'unnumbered'}")
        self.cart.clear()
        await self.cart.fetch()
        return QueryResult(success=True, data=receipt)


    async def checkout_as_guest(
        self,
        shipping: ShippingDetails,
        card: CardDetails,
        buy_now: Optional[AddToCartRequest] = None,
    ) -> QueryResult:
        """Place an order without an account; data is a CheckoutReceipt"""
        error = self._check_cart(buy_now) or validate_shipping(shipping) or validate_card(card)
        if error:
            return QueryResult.fail(error)

        error = await self._add_buy_now(buy_now)
        if error:
            return QueryResult.fail(error)

        payload = {
            **shipping.to_guest_payload(),
            "card_number": card.digits,
            "expiry": card.expiry,
            "cvc": card.cvc,
        }
        return await self._submit(lambda: self.api.checkout_guest(payload))

    async def checkout_with_saved_card(
        self,
        shipping_address_id: Optional[str],
        cvc: str,
        billing_address_id: Optional[str] = None,
        buy_now: Optional[AddToCartRequest] = None,
    ) -> QueryResult:
        """Pay with the account's stored card; only the CVC is re-entered"""
        if not self.session.is_authenticated:
            return QueryResult.fail("Please log in to use a saved card")
        error = self._check_cart(buy_now)
        if error:
            return QueryResult.fail(error)
        if not shipping_address_id:
            return QueryResult.fail("Please select a shipping address")
        if not cvc:
            return QueryResult.fail("Please enter your CVC")
        if not is_valid_cvc(cvc):
            return QueryResult.fail("Please enter a valid CVC")

        error = await self._add_buy_now(buy_now)
        if error:
            return QueryResult.fail(error)

        payload = {
            "shipping_address_id": shipping_address_id,
            "billing_address_id": billing_address_id or shipping_address_id,
            "cvc": cvc,
        }
        return await self._submit(lambda: self.api.checkout_saved_card(payload))

    async def checkout_with_new_card(
        self,
        card: CardDetails,
        shipping_address_id: Optional[str] = None,
        shipping: Optional[ShippingDetails] = None,
        save_card: bool = False,
        billing_address_id: Optional[str] = None,
        buy_now: Optional[AddToCartRequest] = None,
    ) -> QueryResult:
        """
        Pay with a newly entered card.

        Either an existing address id or new shipping details must be given;
        new details are saved to the address book first.
        """
        if not self.session.is_authenticated:
            return QueryResult.fail("Please log in to check out with an account")
        error = self._check_cart(buy_now)
        if error:
            return QueryResult.fail(error)
        if not shipping_address_id:
            if shipping is None:
                return QueryResult.fail("Please select or enter a shipping address")
            error = validate_shipping(shipping)
            if error:
                return QueryResult.fail(error)
        error = validate_card(card)
        if error:
            return QueryResult.fail(error)

        error = await self._add_buy_now(buy_now)
        if error:
            return QueryResult.fail(error)

        if not shipping_address_id:
            shipping_address_id = await self._save_address(shipping)
            if not shipping_address_id:
                return QueryResult.fail("Failed to save address. Please try again.")

        payload = {
            "shipping_address_id": shipping_address_id,
            "billing_address_id": billing_address_id or shipping_address_id,
            "card_number": card.digits,
            "expiry": card.expiry,
            "cvc": card.cvc,
            "save_card": save_card,
        }
        return await self._submit(lambda: self.api.checkout_new_card(payload))

    async def _save_address(self, shipping: ShippingDetails) -> Optional[str]:
        try:
            existing = await self.api.list_addresses()
            is_default = not existing.get("addresses")
            data = await self.api.add_address(
                shipping.to_address(is_default=is_default).model_dump(exclude_none=True)
            )
            created = CreatedAddress.model_validate(data)
        except StorefrontError as e:
            logger.warning(f"Saving address failed: {e}")
            return None
        except ValidationError:
            logger.exception("Malformed address response")
            return None
        return created.address.id
