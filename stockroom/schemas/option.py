from typing import Optional

from pydantic import BaseModel, Field


class OptionRequest(BaseModel):
    value: str = Field(..., description="Display value, e.g. 'Graphic'.")
    parent: Optional[str] = Field(None, description="Parent option value for child types such as SUBCATEGORY.")
