from typing import Optional

from fastapi import APIRouter, Depends, status

from stockroom.core.db import Database, get_db
from stockroom.models.option import OptionType
from stockroom.schemas.option import OptionRequest
from stockroom.schemas.response import SuccessResponse
from stockroom.services import option_service

router = APIRouter()


@router.get("/{option_type}", response_model=SuccessResponse)
async def list_option_values(option_type: OptionType, parent: Optional[str] = None, db: Database = Depends(get_db)):
    """Choice list for a form field, e.g. /SUBCATEGORY?parent=Shirt."""
    return SuccessResponse(data=await option_service.list_options(db, option_type, parent))


@router.post("/{option_type}", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def add_option_value(option_type: OptionType, option: OptionRequest, db: Database = Depends(get_db)):
    created = await option_service.add_option(db, option_type, option.value, option.parent)
    message = f"Added {option_type.value} '{option.value}'." if created else f"{option_type.value} '{option.value}' already exists."
    return SuccessResponse(message=message, data={"created": created})
