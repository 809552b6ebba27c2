"""Order history"""

import logging

from pydantic import ValidationError

from ..core.errors import OperationResult, QueryResult, StorefrontError, error_message
from ..models.checkout import Order, OrderList
from .api_client import StorefrontAPIClient
from .cart import CartContainer

logger = logging.getLogger(__name__)


class OrderService:
    """Past orders of the signed-in user"""

    def __init__(self, api: StorefrontAPIClient, cart: CartContainer):
        self.api = api
        self.cart = cart

    async def list_orders(self) -> QueryResult:
        """data is a list of Order, newest first as returned by the API"""
        try:
            data = await self.api.list_orders()
            orders = OrderList.model_validate(data).orders
        except StorefrontError as e:
            return QueryResult.fail(error_message(e, "Failed to load orders"))
        except ValidationError:
            logger.exception("Malformed order list")
            return QueryResult.fail("Failed to load orders")
        return QueryResult(success=True, data=orders)

    async def get_order(self, order_id: str) -> QueryResult:
        try:
            data = await self.api.get_order(order_id)
            order = Order.model_validate(data.get("order", data))
        except StorefrontError as e:
            return QueryResult.fail(error_message(e, "Order not found"))
        except ValidationError:
            logger.exception(f"Malformed order {order_id}")
            return QueryResult.fail("Failed to load order")
        return QueryResult(success=True, data=order)

    async def reorder(self, order_id: str) -> OperationResult:
        """Copy a past order into the cart, then refetch the cart"""
        try:
            await self.api.reorder(order_id)
        except StorefrontError as e:
            return OperationResult.fail(error_message(e, "Failed to reorder"))
        await self.cart.fetch()
        return OperationResult.ok()
