import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from tortoise import timezone
from tortoise.transactions import in_transaction

from stockroom.core.db import Database
from stockroom.core.exceptions import InsufficientStockError, NotFoundError, ValidationError
from stockroom.models.sale import SaleRecord
from stockroom.services import item_service

log = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _price(value) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Price '{value}' is not a number")
    if not price.is_finite() or price < 0:
        raise ValidationError(f"Price must be zero or more, got {value}")
    # Stored with two decimal places; anything finer would make the stored
    # total disagree with quantity * price
    if price != price.quantize(CENT):
        raise ValidationError(f"Price must have at most two decimal places, got {value}")
    return price.quantize(CENT)


async def sell(
    db: Database, item_id: int, current_quantity: int, price, quantity: int = 1
) -> SaleRecord:
    """
    Sells `quantity` units: decrements stock and appends the ledger entry in
    one transaction, so neither write is ever visible without the other.
    """
    price = _price(price)
    if quantity is None or quantity <= 0:
        raise ValidationError(f"Sale quantity must be positive, got {quantity}")
    if current_quantity < quantity:
        log.warning(f"Refused sale of {quantity} x item {item_id}: only {current_quantity} in stock")
        raise InsufficientStockError(item_id, current_quantity, quantity)

    await db.open()
    async with in_transaction(db.connection_name) as conn:
        item = await item_service.fetch_item(item_id, conn)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found")

        # Guarded on the stored quantity, not the caller's view of it
        if not await item_service.decrement_stock(item_id, quantity, conn):
            log.warning(f"Refused sale of {quantity} x item {item_id}: only {item.quantity} in stock")
            raise InsufficientStockError(item_id, item.quantity, quantity)

        sale = await SaleRecord.create(
            item_id=item_id,
            quantity=quantity,
            price=price,
            total=price * quantity,
            date=timezone.now(),
            category=item.category,
            sub_category=item.sub_category,
            color=item.color,
            using_db=conn,
        )

    log.info(f"Sold {quantity} x item {item_id} at {price} (sale {sale.id})")
    return sale


async def restock(db: Database, item_id: int, current_quantity: int) -> int:
    """Puts one unit back on the shelf. A correction, so nothing is written to the ledger."""
    return await item_service.set_quantity(db, item_id, current_quantity + 1)


async def history(db: Database, item_id: Optional[int] = None) -> List[SaleRecord]:
    """
    Sales, newest first. Unscoped it returns the whole ledger; display fields
    come from the snapshot taken at sale time, so sales of deleted items still
    show their category and color.
    """
    conn = await db.connection()
    query = SaleRecord.all().using_db(conn)
    if item_id is not None:
        query = query.filter(item_id=item_id)
    return await query.order_by("-date", "-id")
