from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from unittest.mock import MagicMock, patch

from stockroom.core.exceptions import ValidationError
from stockroom.schemas.item import ItemFields
from stockroom.services import item_service


@pytest.fixture
def ticking_clock():
    """Replaces the service clock with one that advances a second per call."""
    start = datetime(2024, 5, 1, 9, 0, 0)
    clock = MagicMock()
    clock.now.side_effect = [start + timedelta(seconds=i) for i in range(100)]
    with patch("stockroom.services.item_service.timezone", clock):
        yield clock


@pytest.mark.asyncio
async def test_add_returns_id_and_stamps_last_updated(db, shirt):
    item_id = await item_service.add_item(db, shirt)

    item = await item_service.get_item(db, item_id)
    assert item.category == "Shirt"
    assert item.sub_category == "Polo"
    assert item.quantity == 3
    assert item.price == Decimal("200")
    assert item.last_updated is not None


@pytest.mark.asyncio
async def test_absent_prices_default_to_zero(db):
    item_id = await item_service.add_item(
        db, {"category": "Frock", "color": "Yellow", "age_group": "0-1", "quantity": 0, "price": None}
    )

    item = await item_service.get_item(db, item_id)
    assert item.price == 0
    assert item.cost_price == 0
    assert item.sub_category is None


@pytest.mark.asyncio
async def test_camel_case_fields_are_accepted(db):
    item_id = await item_service.add_item(
        db,
        {"category": "Dress", "subCategory": "Party", "color": "Pink", "ageGroup": "3-4",
         "costPrice": "80.50", "imageUri": "file:///photos/1.jpg", "quantity": 2},
    )

    item = await item_service.get_item(db, item_id)
    assert item.sub_category == "Party"
    assert item.age_group == "3-4"
    assert item.cost_price == Decimal("80.50")
    assert item.image_uri == "file:///photos/1.jpg"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "override",
    [
        {"category": ""},
        {"color": "   "},
        {"age_group": ""},
        {"quantity": None},
        {"quantity": -1},
        {"price": "abc"},
        {"cost_price": -5},
    ],
)
async def test_invalid_fields_are_rejected(db, shirt, override):
    with pytest.raises(ValidationError):
        await item_service.add_item(db, {**shirt, **override})

    assert await item_service.list_items(db) == []


@pytest.mark.asyncio
async def test_validation_error_names_the_field(db, shirt):
    with pytest.raises(ValidationError) as excinfo:
        await item_service.add_item(db, {**shirt, "color": ""})
    assert "color" in str(excinfo.value)


@pytest.mark.asyncio
async def test_update_replaces_fields_and_restamps(db, shirt, ticking_clock):
    item_id = await item_service.add_item(db, shirt)
    before = (await item_service.get_item(db, item_id)).last_updated

    updated = await item_service.update_item(
        db, item_id, ItemFields(category="T-Shirt", color="Navy", age_group="4-5", quantity=7)
    )

    assert updated == 1
    item = await item_service.get_item(db, item_id)
    assert (item.category, item.color, item.age_group, item.quantity) == ("T-Shirt", "Navy", "4-5", 7)
    # Full replace: omitted optional fields are cleared
    assert item.sub_category is None
    assert item.price == 0
    assert item.last_updated > before


@pytest.mark.asyncio
async def test_update_of_missing_item_affects_nothing(db, shirt):
    assert await item_service.update_item(db, 999, shirt) == 0


@pytest.mark.asyncio
async def test_set_quantity(db, shirt):
    item_id = await item_service.add_item(db, shirt)

    assert await item_service.set_quantity(db, item_id, 10) == 1
    assert (await item_service.get_item(db, item_id)).quantity == 10
    assert await item_service.set_quantity(db, 999, 1) == 0

    with pytest.raises(ValidationError):
        await item_service.set_quantity(db, item_id, -1)


@pytest.mark.asyncio
async def test_remove(db, shirt):
    item_id = await item_service.add_item(db, shirt)

    assert await item_service.remove_item(db, item_id) == 1
    assert await item_service.get_item(db, item_id) is None
    assert await item_service.remove_item(db, item_id) == 0


@pytest.mark.asyncio
async def test_list_is_most_recently_touched_first(db, shirt, ticking_clock):
    first = await item_service.add_item(db, shirt)
    second = await item_service.add_item(db, {**shirt, "color": "Blue"})

    assert [i.id for i in await item_service.list_items(db)] == [second, first]

    await item_service.set_quantity(db, first, 1)
    assert [i.id for i in await item_service.list_items(db)] == [first, second]


@pytest.mark.asyncio
async def test_dashboard_filters(db, shirt):
    red_polo = await item_service.add_item(db, shirt)
    blue_plain = await item_service.add_item(db, {**shirt, "color": "Blue", "sub_category": None})
    kurta = await item_service.add_item(
        db, {**shirt, "category": "Kurta", "sub_category": "Redwood Print", "color": "Green", "age_group": "4-5"}
    )

    async def ids(**filters):
        return {item.id for item in await item_service.list_items(db, **filters)}

    assert await ids(search="red") == {red_polo, kurta}
    assert await ids(search="POLO") == {red_polo}
    assert await ids(category="Shirt") == {red_polo, blue_plain}
    assert await ids(category="All", age_group="4-5") == {kurta}
    assert await ids(sub_category="Polo") == {red_polo}
    assert await ids(category="Shirt", search="blue") == {blue_plain}


@pytest.mark.asyncio
async def test_total_stock_and_subcategories(db, shirt):
    assert await item_service.total_stock(db) == 0

    await item_service.add_item(db, shirt)
    await item_service.add_item(db, {**shirt, "sub_category": "Henley", "quantity": 2})
    await item_service.add_item(db, {**shirt, "sub_category": "  ", "quantity": 1})
    await item_service.add_item(db, {**shirt, "category": "Kurta", "sub_category": "Linen", "quantity": 4})

    assert await item_service.total_stock(db) == 10
    assert await item_service.available_subcategories(db) == ["Henley", "Linen", "Polo"]
    assert await item_service.available_subcategories(db, "Shirt") == ["Henley", "Polo"]
