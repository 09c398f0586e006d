import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from tortoise import timezone
from tortoise.expressions import F, Q

from stockroom.core.db import Database
from stockroom.core.exceptions import ValidationError
from stockroom.models.item import StockItem
from stockroom.schemas.item import ItemFields

log = logging.getLogger(__name__)

# Filter value the dashboard uses for "no filter"
ALL = "All"


def validate_fields(fields: Union[ItemFields, Dict[str, Any]]) -> ItemFields:
    """Checks raw item input, raising ValidationError naming each violated constraint."""
    if isinstance(fields, ItemFields):
        return fields
    try:
        return ItemFields.model_validate(fields)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Invalid item: {problems}") from e


def _is_filter(value: Optional[str]) -> bool:
    return bool(value) and value != ALL


async def add_item(db: Database, fields: Union[ItemFields, Dict[str, Any]]) -> int:
    """Inserts a new item and returns its id."""
    data = validate_fields(fields)
    conn = await db.connection()
    item = await StockItem.create(
        **data.model_dump(),
        last_updated=timezone.now(),
        using_db=conn,
    )
    log.info(f"Added item {item.id} ({item})")
    return item.id


async def update_item(db: Database, item_id: int, fields: Union[ItemFields, Dict[str, Any]]) -> int:
    """
    Replaces every mutable field of the item. Returns the number of rows
    changed; 0 means the item does not exist.
    """
    data = validate_fields(fields)
    conn = await db.connection()
    return await StockItem.filter(id=item_id).using_db(conn).update(
        **data.model_dump(),
        last_updated=timezone.now(),
    )


async def set_quantity(db: Database, item_id: int, new_quantity: int) -> int:
    if new_quantity is None or new_quantity < 0:
        raise ValidationError(f"Quantity must be zero or more, got {new_quantity}")
    conn = await db.connection()
    return await StockItem.filter(id=item_id).using_db(conn).update(
        quantity=new_quantity,
        last_updated=timezone.now(),
    )


async def decrement_stock(item_id: int, quantity: int, conn: Any) -> int:
    """
    Takes `quantity` units off the item only if that many are in stock.
    Runs on the caller's connection so it can share a transaction.
    """
    return await StockItem.filter(id=item_id, quantity__gte=quantity).using_db(conn).update(
        quantity=F("quantity") - quantity,
        last_updated=timezone.now(),
    )


async def fetch_item(item_id: int, conn: Any) -> Optional[StockItem]:
    return await StockItem.get_or_none(id=item_id).using_db(conn)


async def get_item(db: Database, item_id: int) -> Optional[StockItem]:
    conn = await db.connection()
    return await fetch_item(item_id, conn)


async def remove_item(db: Database, item_id: int) -> int:
    """Deletes the item; its sales stay in the ledger."""
    conn = await db.connection()
    deleted = await StockItem.filter(id=item_id).using_db(conn).delete()
    if deleted:
        log.info(f"Removed item {item_id}")
    return deleted


async def list_items(
    db: Database,
    search: Optional[str] = None,
    category: Optional[str] = None,
    sub_category: Optional[str] = None,
    age_group: Optional[str] = None,
) -> List[StockItem]:
    """
    Items, most recently touched first. `search` matches category, subcategory
    or color case-insensitively; the other filters are exact and ignore "All".
    """
    conn = await db.connection()
    query = StockItem.all().using_db(conn)

    search = (search or "").strip()
    if search:
        query = query.filter(
            Q(category__icontains=search)
            | Q(sub_category__icontains=search)
            | Q(color__icontains=search)
        )
    if _is_filter(category):
        query = query.filter(category=category)
    if _is_filter(sub_category):
        query = query.filter(sub_category=sub_category)
    if _is_filter(age_group):
        query = query.filter(age_group=age_group)

    return await query.order_by("-last_updated", "-id")


async def total_stock(db: Database) -> int:
    conn = await db.connection()
    quantities = await StockItem.all().using_db(conn).values_list("quantity", flat=True)
    return sum(quantities)


async def available_subcategories(db: Database, category: Optional[str] = None) -> List[str]:
    """Distinct subcategories in use on items, optionally within one category."""
    conn = await db.connection()
    query = StockItem.filter(sub_category__isnull=False).using_db(conn)
    if _is_filter(category):
        query = query.filter(category=category)
    values = await query.values_list("sub_category", flat=True)
    return sorted({value.strip() for value in values if value and value.strip()})
