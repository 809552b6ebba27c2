"""Address book and saved payment card"""

import logging

from pydantic import ValidationError

from ..core.errors import OperationResult, QueryResult, StorefrontError, error_message
from ..models.account import Address, AddressList, SavedCard
from .api_client import StorefrontAPIClient

logger = logging.getLogger(__name__)


class AccountService:
    """Account data of the signed-in user; fetched on demand, never cached"""

    def __init__(self, api: StorefrontAPIClient):
        self.api = api

    async def list_addresses(self) -> QueryResult:
        try:
            data = await self.api.list_addresses()
            addresses = AddressList.model_validate(data).addresses
        except StorefrontError as e:
            return QueryResult.fail(error_message(e, "Failed to load addresses"))
        except ValidationError:
            logger.exception("Malformed address list")
            return QueryResult.fail("Failed to load addresses")
        return QueryResult(success=True, data=addresses)

    async def save_address(self, address: Address) -> OperationResult:
        """Create the address, or update it when it has an id"""
        body = address.model_dump(exclude={"id"}, exclude_none=True)
        try:
            if address.id:
                await self.api.update_address(address.id, body)
            else:
                await self.api.add_address(body)
        except StorefrontError as e:
            return OperationResult.fail(error_message(e, "Failed to save address"))
        return OperationResult.ok()

    async def delete_address(self, address_id: str) -> OperationResult:
        try:
            await self.api.delete_address(address_id)
        except StorefrontError as e:
            return OperationResult.fail(error_message(e, "Failed to delete address"))
        return OperationResult.ok()

    async def set_default_address(self, address_id: str) -> OperationResult:
        try:
            await self.api.set_default_address(address_id)
        except StorefrontError as e:
            return OperationResult.fail(error_message(e, "Failed to set default address"))
        return OperationResult.ok()

    async def get_saved_card(self) -> QueryResult:
        """data is a SavedCard, or None when no card is stored"""
        try:
            data = await self.api.get_payment_card()
            raw = data.get("card")
            card = SavedCard.model_validate(raw) if raw else None
        except StorefrontError as e:
            return QueryResult.fail(error_message(e, "Failed to load saved card"))
        except ValidationError:
            logger.exception("Malformed saved card")
            return QueryResult.fail("Failed to load saved card")
        return QueryResult(success=True, data=card)

    async def delete_saved_card(self) -> OperationResult:
        try:
            await self.api.delete_payment_card()
        except StorefrontError as e:
            return OperationResult.fail(error_message(e, "Failed to remove card"))
        return OperationResult.ok()
