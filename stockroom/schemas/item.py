from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ItemFields(BaseModel):
    """
    Mutable fields of an inventory item, used for both create and full update.
    Accepts snake_case or the camelCase names the mobile client sends.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    category: str = Field(..., min_length=1, description="Category, normally a CATEGORY option.")
    sub_category: Optional[str] = Field(None, description="Subcategory within the category.")
    color: str = Field(..., min_length=1)
    age_group: str = Field(..., min_length=1, description="Age group, normally an AGE option.")
    price: Decimal = Field(Decimal("0"), ge=0, description="Selling price.")
    cost_price: Decimal = Field(Decimal("0"), ge=0, description="Purchase cost per unit.")
    image_uri: Optional[str] = Field(None, description="Opaque reference to an image asset.")
    quantity: int = Field(..., ge=0, description="Current stock level.")

    @field_validator("price", "cost_price", mode="before")
    @classmethod
    def absent_price_is_zero(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return Decimal("0")
        return value

    @field_validator("sub_category", "image_uri")
    @classmethod
    def blank_is_none(cls, value):
        return value or None


class ItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category: str
    sub_category: Optional[str] = None
    color: str
    age_group: str
    price: Optional[float] = None
    cost_price: Optional[float] = None
    image_uri: Optional[str] = None
    quantity: int
    last_updated: datetime
