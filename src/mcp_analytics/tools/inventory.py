"""Inventory tools backed by an in-memory product catalogue."""

import logging
from typing import Any

from mcp_analytics.errors import ProductNotFoundError
from mcp_analytics.mcp.registry import tool

logger = logging.getLogger(__name__)

# In-memory inventory (pretend this is a database)
PRODUCTS: list[dict[str, Any]] = [
    {"id": "1", "name": "Laptop", "price": 999, "stock": 5},
    {"id": "2", "name": "Mouse", "price": 29, "stock": 50},
    {"id": "3", "name": "Keyboard", "price": 79, "stock": 25},
]


def _find_product(product_id: str) -> dict[str, Any]:
    for product in PRODUCTS:
        if product["id"] == product_id:
            return product
    raise ProductNotFoundError(product_id)


@tool(
    name="getInventory",
    title="Get product inventory",
    description="List every product with its price and stock level",
)
async def get_inventory() -> list[dict[str, Any]]:
    logger.info("getInventory called")
    return [dict(p) for p in PRODUCTS]


@tool(
    name="checkStock",
    title="Get stock for a specified product",
    description="Return the number of units in stock for a product id",
)
async def check_stock(productId: str) -> str:  # noqa: N803
    """Look up stock for one product.

    Args:
        productId: Catalogue id of the product.

    Returns:
        A one-line stock summary.

    Raises:
        ProductNotFoundError: If no product has this id.
    """
    logger.info("checkStock called for product: %s", productId)
    product = _find_product(productId)
    return f"{product['name']}: {product['stock']} units in stock"


@tool(
    name="getLowStockReport",
    title="Low stock report",
    description="List products whose stock is below a threshold",
    feature_flag="low-stock-report",
)
async def get_low_stock_report(threshold: int = 10) -> dict[str, Any]:
    logger.info("getLowStockReport called with threshold: %d", threshold)
    low = [{"id": p["id"], "name": p["name"], "stock": p["stock"]} for p in PRODUCTS if p["stock"] < threshold]
    return {"threshold": threshold, "products": low}
