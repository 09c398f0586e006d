from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class ExportRow(BaseModel):
    """One item joined with the aggregate of its sales."""
    id: int
    category: str
    sub_category: Optional[str] = None
    color: str
    age_group: str
    price: Optional[Decimal] = None
    cost_price: Optional[Decimal] = None
    image_uri: Optional[str] = None
    quantity: int
    last_updated: datetime
    sold_quantity: int = 0
    sold_revenue: Decimal = Decimal("0")
    profit: Decimal = Decimal("0")
