import logging
from typing import Any, List, Optional, Union

from tortoise.transactions import in_transaction

from stockroom.core.db import Database
from stockroom.core.exceptions import ReferentialGapError, ValidationError
from stockroom.models.option import PARENT_TYPES, Option, OptionType

log = logging.getLogger(__name__)


def _option_type(option_type: Union[OptionType, str]) -> OptionType:
    try:
        return OptionType(option_type)
    except ValueError:
        allowed = ", ".join(t.value for t in OptionType)
        raise ValidationError(f"Unknown option type '{option_type}'. Expected one of: {allowed}")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


async def resolve_parent(option_type: OptionType, parent_value: str, conn: Any) -> int:
    """
    Returns the id of the option `parent_value` of the type that `option_type`
    hangs under. Raises ReferentialGapError when that option does not exist.
    """
    parent_type = PARENT_TYPES.get(option_type)
    if parent_type is None:
        raise ValidationError(f"{option_type.value} options are top level and take no parent")

    parent = await Option.filter(
        type=parent_type, value=parent_value, parent_id__isnull=True
    ).using_db(conn).order_by("id").first()
    if parent is None:
        raise ReferentialGapError(parent_type, parent_value)
    return parent.id


async def list_options(
    db: Database, option_type: Union[OptionType, str], parent_value: Optional[str] = None
) -> List[str]:
    """
    Values of `option_type` in ascending order. With `parent_value`, only the
    children of that parent; an unknown parent yields an empty list.
    """
    option_type = _option_type(option_type)
    parent_value = _clean(parent_value)
    conn = await db.connection()

    query = Option.filter(type=option_type).using_db(conn)
    if parent_value is not None:
        if option_type not in PARENT_TYPES:
            # Top-level types have no children to look up
            return []
        try:
            parent_id = await resolve_parent(option_type, parent_value, conn)
        except ReferentialGapError:
            return []
        query = query.filter(parent_id=parent_id)

    return list(await query.order_by("value").values_list("value", flat=True))


async def add_option(
    db: Database, option_type: Union[OptionType, str], value: str, parent_value: Optional[str] = None
) -> bool:
    """
    Adds an option unless the same (type, value, parent) already exists.
    A missing parent is created on the spot rather than failing the insert.

    Returns True when a row was inserted, False for the duplicate no-op.
    """
    option_type = _option_type(option_type)
    value = _clean(value)
    parent_value = _clean(parent_value)
    if value is None:
        raise ValidationError(f"{option_type.value} option value must not be empty")
    if option_type in PARENT_TYPES and parent_value is None:
        raise ValidationError(
            f"{option_type.value} options need a parent {PARENT_TYPES[option_type].value}"
        )

    await db.open()
    async with in_transaction(db.connection_name) as conn:
        parent_id = None
        if parent_value is not None:
            try:
                parent_id = await resolve_parent(option_type, parent_value, conn)
            except ReferentialGapError as gap:
                parent = await Option.create(
                    type=gap.parent_type, value=gap.parent_value, using_db=conn
                )
                parent_id = parent.id
                log.info(f"Created missing {gap.parent_type.value} option '{gap.parent_value}' for {option_type.value} '{value}'")

        existing = Option.filter(type=option_type, value=value).using_db(conn)
        if parent_id is None:
            existing = existing.filter(parent_id__isnull=True)
        else:
            existing = existing.filter(parent_id=parent_id)
        if await existing.exists():
            return False

        await Option.create(type=option_type, value=value, parent_id=parent_id, using_db=conn)
        return True
