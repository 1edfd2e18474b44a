from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from stockledger.schemas.product import ProductResponse
from stockledger.schemas.ledger import SaleResponse


class DashboardStats(BaseModel):
    """Aggregate figures shown on the dashboard. Serialized in camelCase."""
    total_products: int = 0
    total_stock: int = 0
    low_stock_products: int = 0
    total_revenue: float = 0.0
    stock_in: int = 0
    stock_out: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DashboardResponse(BaseModel):
    """Stats plus the lists shown alongside them."""
    stats: DashboardStats
    low_stock_products: list[ProductResponse]
    recent_sales: list[SaleResponse]

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TopProduct(BaseModel):
    product_id: int
    product_name: str
    sku: str
    quantity_sold: int
    revenue: float


class MonthlySales(BaseModel):
    year: int
    month: int
    quantity_sold: int
    revenue: float
