"""SQLite store handle shared by the order components.

Each call opens its own connection; nothing is cached between calls so
every read reflects committed state.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Iterator, Optional, Union

from ..config import get_config
from ..errors import PersistenceError
from ..logging import get_logger
from .models.data_filters import to_local_naive

_CENT = Decimal("0.01")

SCHEMA = """
CREATE TABLE IF NOT EXISTS staff (
    staff_id TEXT PRIMARY KEY,
    pin TEXT NOT NULL,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL,
    hourly_wage_cents INTEGER NOT NULL,
    is_admin INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS categories (
    category_id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    sort_order INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS items (
    item_id TEXT PRIMARY KEY,
    category_id TEXT NOT NULL,
    name TEXT NOT NULL,
    regular_price_cents INTEGER NOT NULL,
    event_price_cents INTEGER NOT NULL,
    sort_order INTEGER NOT NULL,
    available INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS modifiers (
    modifier_id TEXT PRIMARY KEY,
    item_id TEXT NOT NULL,
    name TEXT NOT NULL,
    single_selection INTEGER NOT NULL DEFAULT 1,
    sort_order INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS options (
    option_id TEXT PRIMARY KEY,
    modifier_id TEXT NOT NULL,
    name TEXT NOT NULL,
    price_cents INTEGER NOT NULL,
    available INTEGER NOT NULL DEFAULT 1,
    sort_order INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS discounts (
    discount_id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    is_percentage INTEGER NOT NULL DEFAULT 1,
    amount_cents INTEGER NOT NULL,
    available INTEGER NOT NULL DEFAULT 1,
    sort_order INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS orders (
    order_id TEXT PRIMARY KEY,
    staff_id TEXT NOT NULL,
    display_number INTEGER NOT NULL,
    tender_method TEXT NOT NULL CHECK (tender_method IN ('cash', 'card')),
    subtotal_cents INTEGER NOT NULL,
    tax_cents INTEGER NOT NULL,
    tip_cents INTEGER NOT NULL DEFAULT 0,
    card_fee_cents INTEGER NOT NULL DEFAULT 0,
    total_cents INTEGER NOT NULL,
    tendered_cents INTEGER,
    change_cents INTEGER,
    status TEXT NOT NULL DEFAULT 'created' CHECK (status IN ('created', 'refunded')),
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS order_lines (
    line_id TEXT PRIMARY KEY,
    order_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    item_id TEXT NOT NULL,
    quantity INTEGER NOT NULL CHECK (quantity > 0),
    unit_price_cents INTEGER NOT NULL,
    line_total_cents INTEGER NOT NULL,
    FOREIGN KEY (order_id) REFERENCES orders (order_id)
);

CREATE TABLE IF NOT EXISTS order_line_options (
    line_option_id TEXT PRIMARY KEY,
    line_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    option_id TEXT NOT NULL,
    price_cents INTEGER NOT NULL,
    FOREIGN KEY (line_id) REFERENCES order_lines (line_id)
);

CREATE TABLE IF NOT EXISTS order_discounts (
    applied_discount_id TEXT PRIMARY KEY,
    order_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    discount_id TEXT NOT NULL,
    amount_cents INTEGER NOT NULL,
    FOREIGN KEY (order_id) REFERENCES orders (order_id)
);

CREATE INDEX IF NOT EXISTS idx_orders_created_at ON orders (created_at);
CREATE INDEX IF NOT EXISTS idx_orders_staff_id ON orders (staff_id);
CREATE INDEX IF NOT EXISTS idx_order_lines_order_id ON order_lines (order_id);
CREATE INDEX IF NOT EXISTS idx_order_line_options_line_id ON order_line_options (line_id);
CREATE INDEX IF NOT EXISTS idx_order_discounts_order_id ON order_discounts (order_id);
"""


# ---------- storage encodings ----------

def to_cents(amount: Decimal) -> int:
    """Fixed-point amount -> integer minor units."""
    return int((Decimal(amount) / _CENT).to_integral_value(rounding=ROUND_HALF_UP))


def from_cents(cents: Optional[int]) -> Optional[Decimal]:
    """Integer minor units -> two-place Decimal (None stays None)."""
    if cents is None:
        return None
    return (Decimal(int(cents)) * _CENT).quantize(_CENT)


def to_storage_ts(value: datetime) -> str:
    # Fixed width so that text comparison in SQL matches chronological order
    return to_local_naive(value).isoformat(sep=" ", timespec="microseconds")


def from_storage_ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


class Database:
    """
    Explicit handle on one SQLite file.
    - `read()` yields a short-lived connection for queries.
    - `transaction()` yields a connection holding the write lock (BEGIN IMMEDIATE);
      everything inside commits together or rolls back together.
    """

    def __init__(self, db_path: Union[str, Path, None] = None, timeout: Optional[float] = None) -> None:
        config = get_config()
        if db_path is None:
            db_path = config.db_path
        self.timeout = config.db_timeout_seconds if timeout is None else timeout
        self.logger = get_logger(__name__)

        self.db_path = Path(db_path)

        # If the path is relative, make it relative to the repository root
        if not self.db_path.is_absolute():
            current = Path.cwd()
            repo_root = None

            # Look up the directory tree for pyproject.toml
            for parent in [current] + list(current.parents):
                if (parent / "pyproject.toml").exists():
                    repo_root = parent
                    break

            self.db_path = (repo_root or current) / self.db_path

    # ---------- connections ----------

    def connect(self) -> sqlite3.Connection:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        except (OSError, sqlite3.Error) as e:
            self.logger.error(f"Failed to open database {self.db_path}: {e}")
            raise PersistenceError(f"Failed to open database {self.db_path}", e) from e
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def read(self) -> Iterator[sqlite3.Connection]:
        conn = self.connect()
        try:
            yield conn
        except (sqlite3.Error, OverflowError) as e:
            self.logger.error(f"Read failed: {e}")
            raise PersistenceError("Read failed", e) from e
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self.connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        except (sqlite3.Error, OverflowError) as e:
            self.logger.error(f"Transaction rolled back: {e}")
            raise PersistenceError("Transaction rolled back", e) from e
        finally:
            conn.close()

    # ---------- schema ----------

    def bootstrap_schema(self) -> None:
        """Create catalog and order tables if they do not already exist."""
        conn = self.connect()
        try:
            conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            self.logger.error(f"Schema bootstrap failed: {e}")
            raise PersistenceError("Schema bootstrap failed", e) from e
        finally:
            conn.close()
        self.logger.debug(f"Schema ready at {self.db_path}")
