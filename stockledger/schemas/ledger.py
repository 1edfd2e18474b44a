from pydantic import AliasChoices, BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional

from stockledger.models.stock_movement import MovementType


class StockMovementCreate(BaseModel):
    """Schema for recording a stock movement. Accepts `type` as an alias of `movement_type`."""
    product_id: int = Field(..., description="ID of the product whose stock changes")
    movement_type: MovementType = Field(
        ...,
        validation_alias=AliasChoices("movement_type", "type"),
        description="Direction of the movement: 'in' or 'out'",
    )
    quantity: int = Field(..., gt=0, description="Units moved (must be positive)")
    reason: str = Field(..., min_length=1, max_length=100)
    notes: Optional[str] = None


class StockMovementResponse(BaseModel):
    """Schema for a movement, enriched with product and creator names."""
    id: int
    movement_code: str
    product_id: int
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    movement_type: MovementType
    quantity: int
    reason: Optional[str] = None
    notes: Optional[str] = None
    created_by: str
    created_by_name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SaleCreate(BaseModel):
    """Schema for recording a sale. Accepts `customer` as an alias of `customer_name`."""
    product_id: int = Field(..., description="ID of the product sold")
    quantity: int = Field(..., gt=0, description="Units sold (must be positive)")
    unit_price: float = Field(..., ge=0, description="Price charged per unit")
    customer_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("customer_name", "customer"),
    )


class SaleResponse(BaseModel):
    """Schema for a sale, enriched with product and creator names."""
    id: int
    sale_code: str
    product_id: int
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    quantity: int
    unit_price: float
    total_amount: float
    customer_name: Optional[str] = None
    created_by: str
    created_by_name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
