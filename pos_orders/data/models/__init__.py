from .data_filters import DateWindow, day_window, start_of_day

from .catalog import CatalogItem, CatalogOption, CatalogDiscount
from .orders import (
    Money,
    OrderStatus,
    TenderMethod,
    LineOption,
    OrderLine,
    AppliedDiscount,
    Order,
    parse_order,
)
from .summary import OrderSummary

__all__ = [
    # Filter classes
    "DateWindow",
    "day_window",
    "start_of_day",
    # Catalog snapshots
    "CatalogItem",
    "CatalogOption",
    "CatalogDiscount",
    # Order aggregate
    "Money",
    "OrderStatus",
    "TenderMethod",
    "LineOption",
    "OrderLine",
    "AppliedDiscount",
    "Order",
    "parse_order",
    # Reporting
    "OrderSummary",
]
