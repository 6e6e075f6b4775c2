"""Exceptions raised by the MCP analytics server."""


class AnalyticsServerError(Exception):
    """Base class for server errors."""


class ToolNotFoundError(AnalyticsServerError):
    """Raised when a call names a tool that is not exposed."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ProductNotFoundError(AnalyticsServerError):
    """Raised when the inventory has no product with the requested id."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")
