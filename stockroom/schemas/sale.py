from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SellRequest(BaseModel):
    """Schema for selling units of an item."""
    current_quantity: int = Field(..., ge=0, description="Stock level the caller last saw.")
    price: Decimal = Field(..., ge=0, description="Price actually realized for this sale.")
    quantity: int = Field(1, gt=0, description="Units sold in this transaction.")


class RestockRequest(BaseModel):
    current_quantity: int = Field(..., ge=0)


class SaleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: int
    quantity: int
    price: float
    total: float
    date: datetime
    category: Optional[str] = None
    sub_category: Optional[str] = None
    color: Optional[str] = None
