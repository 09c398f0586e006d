# scripts/export_inventory.py
import asyncio
from pathlib import Path
from typing import Optional

from stockroom.core.config import DB_URL, EXPORT_DIR
from stockroom.core.db import Database
from stockroom.services.export_service import write_export


async def run_export(db_url: str = DB_URL, directory: Optional[str] = None) -> Path:
    """Opens the store, writes today's export file and closes the store again."""
    db = Database(db_url)
    try:
        return await write_export(db, directory or EXPORT_DIR)
    finally:
        await db.close()


async def main():
    path = await run_export()
    print("Inventory exported to:", path)

if __name__ == "__main__":
    asyncio.run(main())
