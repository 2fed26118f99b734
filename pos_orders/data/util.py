from __future__ import annotations

from typing import Literal, Optional

from .backends.sqlite_backend import SqliteOrderStore
from .database import Database
from .interface import OrderReporting, OrderStore
from .reporting import ReportingAggregator


def get_database(db_path: Optional[str] = None) -> Database:
    # Reads from the configured SQLite file unless told otherwise
    database = Database(db_path=db_path)
    database.bootstrap_schema()
    return database


def get_order_store(kind: Literal["sqlite"] = "sqlite", database: Optional[Database] = None) -> OrderStore:
    if kind == "sqlite":
        return SqliteOrderStore(database=database or get_database())
    raise ValueError(f"Unknown order store kind: {kind}")


def get_reporting(kind: Literal["sqlite"] = "sqlite", database: Optional[Database] = None) -> OrderReporting:
    if kind == "sqlite":
        return ReportingAggregator(database=database or get_database())
    raise ValueError(f"Unknown reporting kind: {kind}")
