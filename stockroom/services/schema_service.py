import logging
from typing import Any, Dict, List

from pydantic import BaseModel, Field
from tortoise import Tortoise

from stockroom.core.config import SEED_AGE_GROUPS, SEED_CATEGORIES
from stockroom.models.option import Option, OptionType

log = logging.getLogger(__name__)

TABLES = ["items", "sales", "options"]

# Additive column migrations as (table, column, ddl), each applied only when
# the column is missing.
MIGRATIONS = [
    ("items", "subCategory", "ALTER TABLE items ADD COLUMN subCategory TEXT"),
    ("items", "price", "ALTER TABLE items ADD COLUMN price VARCHAR(40) DEFAULT 0"),
    ("items", "costPrice", "ALTER TABLE items ADD COLUMN costPrice VARCHAR(40) DEFAULT 0"),
    ("items", "imageUri", "ALTER TABLE items ADD COLUMN imageUri TEXT"),
    ("sales", "category", "ALTER TABLE sales ADD COLUMN category TEXT"),
    ("sales", "subCategory", "ALTER TABLE sales ADD COLUMN subCategory TEXT"),
    ("sales", "color", "ALTER TABLE sales ADD COLUMN color TEXT"),
]

SEEDS = {
    OptionType.CATEGORY: SEED_CATEGORIES,
    OptionType.AGE: SEED_AGE_GROUPS,
}


class SchemaReport(BaseModel):
    """What a single ensure_schema() run changed."""
    applied: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)
    seeded: Dict[str, int] = Field(default_factory=dict)
    backfilled: int = 0


async def table_names(conn: Any) -> List[str]:
    rows = await conn.execute_query_dict(
        "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
    )
    return [row["name"] for row in rows]


async def table_columns(conn: Any, table: str) -> List[str]:
    """Column names of `table` in declaration order (empty if the table is absent)."""
    rows = await conn.execute_query_dict(f"PRAGMA table_info({table})")
    return [row["name"] for row in rows]


async def _apply_migrations(conn: Any, report: SchemaReport) -> None:
    for table, column, ddl in MIGRATIONS:
        name = f"{table}.{column}"
        try:
            if column in await table_columns(conn, table):
                log.debug(f"Migration skipped, {name} already present")
                continue
            await conn.execute_script(ddl)
            report.applied.append(name)
            log.info(f"Migration applied: added column {name}")
        except Exception as e:
            # One failing statement must not abort the remaining migrations
            report.failed.append(name)
            log.warning(f"Migration for {name} failed and was skipped: {e}")


# Sales recorded before the snapshot columns existed take their display fields
# from the item, where it still exists.
SALE_SNAPSHOT_BACKFILL = """
UPDATE sales SET
    category = (SELECT category FROM items WHERE items.id = sales.itemId),
    subCategory = (SELECT subCategory FROM items WHERE items.id = sales.itemId),
    color = (SELECT color FROM items WHERE items.id = sales.itemId)
WHERE category IS NULL AND itemId IN (SELECT id FROM items)
"""


async def _backfill_sale_snapshots(conn: Any, report: SchemaReport) -> None:
    if not {"category", "subCategory", "color"} <= set(await table_columns(conn, "sales")):
        # A snapshot column failed to migrate; nothing to fill
        return
    rows, _ = await conn.execute_query(SALE_SNAPSHOT_BACKFILL)
    if rows:
        report.backfilled = rows
        log.info(f"Backfilled display fields on {rows} legacy sales")


async def _seed_options(conn: Any, report: SchemaReport) -> None:
    for option_type, values in SEEDS.items():
        if await Option.filter(type=option_type).using_db(conn).count():
            continue
        await Option.bulk_create(
            [Option(type=option_type, value=value) for value in values],
            using_db=conn,
        )
        report.seeded[option_type.value] = len(values)
        log.info(f"Seeded {len(values)} {option_type.value} options")


async def ensure_schema(conn: Any) -> SchemaReport:
    """
    Creates missing tables, adds missing columns, fills the display snapshot of
    sales recorded before those columns existed, and seeds the default options.
    Safe to run on every start: a second run changes nothing.

    Table creation errors propagate; a failed column migration is logged and
    recorded in the report only.
    """
    report = SchemaReport()

    # CREATE TABLE IF NOT EXISTS for every registered model
    await Tortoise.generate_schemas(safe=True)

    await _apply_migrations(conn, report)
    await _backfill_sale_snapshots(conn, report)
    await _seed_options(conn, report)
    return report
