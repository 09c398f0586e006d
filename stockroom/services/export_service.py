import csv
import io
import logging
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from stockroom.core.config import EXPORT_DIR
from stockroom.core.db import Database
from stockroom.models.item import StockItem
from stockroom.models.sale import SaleRecord
from stockroom.schemas.export import ExportRow

log = logging.getLogger(__name__)

# Column order of the export file. Spreadsheets built on earlier exports rely on it.
EXPORT_HEADER = [
    "Category",
    "Subcategory",
    "Color",
    "Age Group",
    "Price",
    "Current Stock",
    "Cost Price",
    "Sold Quantity",
    "Total Revenue",
    "Estimated Profit",
    "Last Updated",
]

ZERO = Decimal("0")


async def export_snapshot(db: Database) -> List[ExportRow]:
    """
    Every current item with the totals of its sales. Items that never sold
    are included with zero totals.
    """
    conn = await db.connection()
    items = await StockItem.all().using_db(conn).order_by("id")
    sales = await SaleRecord.all().using_db(conn)

    sold: Dict[int, Tuple[int, Decimal]] = {}
    for sale in sales:
        quantity, revenue = sold.get(sale.item_id, (0, ZERO))
        sold[sale.item_id] = (quantity + sale.quantity, revenue + sale.total)

    rows = []
    for item in items:
        sold_quantity, sold_revenue = sold.get(item.id, (0, ZERO))
        cost_price = item.cost_price or ZERO
        rows.append(
            ExportRow(
                id=item.id,
                category=item.category,
                sub_category=item.sub_category,
                color=item.color,
                age_group=item.age_group,
                price=item.price,
                cost_price=item.cost_price,
                image_uri=item.image_uri,
                quantity=item.quantity,
                last_updated=item.last_updated,
                sold_quantity=sold_quantity,
                sold_revenue=sold_revenue,
                profit=sold_revenue - sold_quantity * cost_price,
            )
        )
    return rows


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        # Plain digits, never exponent notation
        return format(value, "f")
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def to_csv(rows: Iterable[ExportRow]) -> str:
    """
    Header line, then one line per row with every field double-quoted and
    embedded quotes doubled.
    """
    buffer = io.StringIO()
    buffer.write(",".join(EXPORT_HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow(
            _cell(value)
            for value in (
                row.category,
                row.sub_category,
                row.color,
                row.age_group,
                row.price,
                row.quantity,
                row.cost_price or ZERO,
                row.sold_quantity,
                row.sold_revenue,
                row.profit,
                row.last_updated,
            )
        )
    return buffer.getvalue()


def export_filename(today: Optional[date] = None) -> str:
    return f"inventory_{(today or date.today()).isoformat()}.csv"


async def write_export(db: Database, directory: Optional[str] = None, today: Optional[date] = None) -> Path:
    """
    Writes the snapshot as CSV into the export directory and returns the file
    path. The file stays on disk whether or not anything shares it afterwards.
    """
    rows = await export_snapshot(db)
    target = Path(directory or EXPORT_DIR)
    target.mkdir(parents=True, exist_ok=True)

    path = target / export_filename(today)
    path.write_text(to_csv(rows), encoding="utf-8")
    log.info(f"Exported {len(rows)} items to {path}")
    return path
