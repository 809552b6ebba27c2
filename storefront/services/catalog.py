"""Product browsing"""

import logging
from typing import Optional

from pydantic import ValidationError

from ..core.errors import QueryResult, StorefrontError, error_message
from ..models.product import Product, ProductList
from .api_client import StorefrontAPIClient

logger = logging.getLogger(__name__)

CATEGORIES = ("heels", "boots", "flats", "sneakers", "sandals")


class CatalogService:
    """Read-only catalog lookups"""

    def __init__(self, api: StorefrontAPIClient):
        self.api = api

    async def list_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> QueryResult:
        """data is a list of Product"""
        try:
            data = await self.api.list_products(category=category, search=search, sort=sort)
            products = ProductList.model_validate(data).products
        except StorefrontError as e:
            return QueryResult.fail(error_message(e, "Failed to load products"))
        except ValidationError:
            logger.exception("Malformed product list")
            return QueryResult.fail("Failed to load products")
        return QueryResult(success=True, data=products)

    async def get_product(self, product_id: str) -> QueryResult:
        try:
            data = await self.api.get_product(product_id)
            product = Product.model_validate(data.get("product", data))
        except StorefrontError as e:
            return QueryResult.fail(error_message(e, "Product not found"))
        except ValidationError:
            logger.exception(f"Malformed product {product_id}")
            return QueryResult.fail("Failed to load product")
        return QueryResult(success=True, data=product)
