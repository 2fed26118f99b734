from .database import Database
from .ids import IdentifierGenerator, allocate_unique
from .sequence import DailySequenceCounter
from .interface import OrderReporting, OrderStore
from .backends.sqlite_backend import SqliteOrderStore
from .reporting import ReportingAggregator
from .util import get_database, get_order_store, get_reporting

__all__ = [
    "Database",
    "IdentifierGenerator",
    "allocate_unique",
    "DailySequenceCounter",
    "OrderReporting",
    "OrderStore",
    "SqliteOrderStore",
    "ReportingAggregator",
    "get_database",
    "get_order_store",
    "get_reporting",
]
