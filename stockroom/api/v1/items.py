import logging
from typing import Optional

from fastapi import APIRouter, Depends, status

from stockroom.core.db import Database, get_db
from stockroom.core.exceptions import NotFoundError
from stockroom.schemas.item import ItemFields, ItemResponse
from stockroom.schemas.response import SuccessResponse
from stockroom.schemas.sale import RestockRequest, SaleResponse, SellRequest
from stockroom.services import item_service, sales_service

log = logging.getLogger("uvicorn")

router = APIRouter()


def _item_payload(item) -> dict:
    return ItemResponse.model_validate(item).model_dump(mode="json")


@router.get("", response_model=SuccessResponse)
async def list_stock_items(
    search: Optional[str] = None,
    category: Optional[str] = None,
    sub_category: Optional[str] = None,
    age_group: Optional[str] = None,
    db: Database = Depends(get_db),
):
    """Dashboard view: filtered items, most recently touched first, plus total stock."""
    items = await item_service.list_items(
        db, search=search, category=category, sub_category=sub_category, age_group=age_group
    )
    return SuccessResponse(data={
        "items": [_item_payload(item) for item in items],
        "total_stock": await item_service.total_stock(db),
    })


@router.get("/subcategories", response_model=SuccessResponse)
async def list_item_subcategories(category: Optional[str] = None, db: Database = Depends(get_db)):
    """Subcategories currently used by items, for the dashboard filter."""
    return SuccessResponse(data=await item_service.available_subcategories(db, category))


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_stock_item(fields: ItemFields, db: Database = Depends(get_db)):
    item_id = await item_service.add_item(db, fields)
    return SuccessResponse(message=f"Added {fields.category} ({fields.color}).", data={"id": item_id})


@router.get("/{item_id}", response_model=SuccessResponse)
async def get_stock_item(item_id: int, db: Database = Depends(get_db)):
    item = await item_service.get_item(db, item_id)
    if item is None:
        raise NotFoundError(f"Item {item_id} not found")
    return SuccessResponse(data=_item_payload(item))


@router.put("/{item_id}", response_model=SuccessResponse)
async def update_stock_item(item_id: int, fields: ItemFields, db: Database = Depends(get_db)):
    if not await item_service.update_item(db, item_id, fields):
        raise NotFoundError(f"Item {item_id} not found")
    return SuccessResponse(data=_item_payload(await item_service.get_item(db, item_id)))


@router.delete("/{item_id}", response_model=SuccessResponse)
async def delete_stock_item(item_id: int, db: Database = Depends(get_db)):
    """Deletes the item. Its sales remain in the ledger."""
    if not await item_service.remove_item(db, item_id):
        raise NotFoundError(f"Item {item_id} not found")
    return SuccessResponse(message=f"Item {item_id} deleted.")


@router.post("/{item_id}/sell", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def sell_stock_item(item_id: int, sale: SellRequest, db: Database = Depends(get_db)):
    record = await sales_service.sell(
        db, item_id, sale.current_quantity, sale.price, quantity=sale.quantity
    )
    return SuccessResponse(data={
        "sale": SaleResponse.model_validate(record).model_dump(mode="json"),
        "item": _item_payload(await item_service.get_item(db, item_id)),
    })


@router.post("/{item_id}/restock", response_model=SuccessResponse)
async def restock_stock_item(item_id: int, restock: RestockRequest, db: Database = Depends(get_db)):
    if not await sales_service.restock(db, item_id, restock.current_quantity):
        raise NotFoundError(f"Item {item_id} not found")
    return SuccessResponse(data=_item_payload(await item_service.get_item(db, item_id)))
