from pydantic import AliasChoices, BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional

from stockledger.models.product import StockStatus


class ProductBase(BaseModel):
    """Base schema for Product with common attributes."""
    name: str = Field(..., min_length=1, max_length=100, description="Product name")
    sku: str = Field(..., min_length=1, max_length=50, description="Unique stock keeping unit")
    price: float = Field(..., ge=0, description="Unit price (must be non-negative)")
    category: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    supplier: Optional[str] = Field(None, max_length=100)


class ProductCreate(ProductBase):
    """Schema for creating a new product. Accepts `stock`/`min_stock` as aliases."""
    current_stock: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("current_stock", "stock"),
        description="Initial stock (must be non-negative)",
    )
    min_stock_level: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("min_stock_level", "min_stock"),
        description="Low stock threshold",
    )


class ProductUpdate(BaseModel):
    """Schema for updating an existing product. All fields are optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    sku: Optional[str] = Field(None, min_length=1, max_length=50)
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    supplier: Optional[str] = Field(None, max_length=100)
    current_stock: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("current_stock", "stock")
    )
    min_stock_level: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("min_stock_level", "min_stock")
    )


class ProductResponse(BaseModel):
    """Schema for product response including all fields."""
    id: int
    product_code: str
    name: str
    sku: str
    price: float
    category: Optional[str] = None
    description: Optional[str] = None
    supplier: Optional[str] = None
    current_stock: int
    min_stock_level: int
    stock_status: StockStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
