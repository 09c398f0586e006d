# stockroom/models/__init__.py
from .item import StockItem
from .option import Option, OptionType, PARENT_TYPES
from .sale import SaleRecord

# Export all models
__all__ = [
    "StockItem",
    "Option",
    "OptionType",
    "PARENT_TYPES",
    "SaleRecord",
]
