class InventoryError(Exception):
    """Base class for errors raised by the inventory data layer."""


class ValidationError(InventoryError):
    """Caller supplied structurally invalid input."""


class NotFoundError(InventoryError):
    """Target row does not exist."""


class ReferentialGapError(InventoryError):
    """
    A child option's parent is missing. Raised by parent resolution and always
    recovered by the option registry, which creates the parent instead.
    """

    def __init__(self, parent_type, parent_value: str):
        super().__init__(f"No {parent_type.value} option named '{parent_value}'")
        self.parent_type = parent_type
        self.parent_value = parent_value


class InsufficientStockError(InventoryError):
    """Sale attempted for more units than are in stock."""

    def __init__(self, item_id: int, available: int, requested: int = 1):
        super().__init__(
            f"Insufficient stock for item {item_id}. Requested: {requested}, Available: {available}"
        )
        self.item_id = item_id
        self.available = available
        self.requested = requested


class StorageFault(InventoryError):
    """Underlying read/write failure."""
