import pytest
import pytest_asyncio

from stockroom.core.db import Database


@pytest_asyncio.fixture
async def db(tmp_path):
    """A freshly opened store backed by its own SQLite file."""
    database = Database(f"sqlite://{tmp_path / 'inventory.db'}")
    await database.open()
    yield database
    await database.close()


@pytest.fixture
def shirt():
    """Field set for a typical item."""
    return {
        "category": "Shirt",
        "sub_category": "Polo",
        "color": "Red",
        "age_group": "2-3",
        "price": 200,
        "cost_price": 120,
        "quantity": 3,
    }
