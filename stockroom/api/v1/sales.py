from typing import Optional

from fastapi import APIRouter, Depends

from stockroom.core.db import Database, get_db
from stockroom.schemas.response import SuccessResponse
from stockroom.schemas.sale import SaleResponse
from stockroom.services import sales_service

router = APIRouter()


@router.get("", response_model=SuccessResponse)
async def list_sales(item_id: Optional[int] = None, db: Database = Depends(get_db)):
    """Recent sales, newest first; the whole ledger unless item_id is given."""
    records = await sales_service.history(db, item_id)
    return SuccessResponse(data=[SaleResponse.model_validate(r).model_dump(mode="json") for r in records])
