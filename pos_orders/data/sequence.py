from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Optional

from ..config import get_config
from .database import Database, to_storage_ts
from .models import day_window


class DailySequenceCounter:
    """Next human-facing order number for the local calendar day.

    Numbers restart at 1 each day and wrap back to 1 once the next value
    would exceed `max_number`. After a wrap the day's maximum is still
    `max_number`, so later orders that day keep receiving 1.
    """

    def __init__(self, database: Database, max_number: Optional[int] = None) -> None:
        self.database = database
        self.max_number = get_config().display_number_max if max_number is None else max_number

    def next_display_number(self, now: datetime, conn: Optional[sqlite3.Connection] = None) -> int:
        if conn is None:
            with self.database.read() as read_conn:
                return self._next(now, read_conn)
        return self._next(now, conn)

    def _next(self, now: datetime, conn: sqlite3.Connection) -> int:
        window = day_window(now)
        row = conn.execute(
            "SELECT MAX(display_number) FROM orders WHERE created_at >= ? AND created_at < ?",
            (to_storage_ts(window.start_ts), to_storage_ts(window.end_ts)),
        ).fetchone()

        if row[0] is None:
            return 1

        next_number = int(row[0]) + 1
        if next_number > self.max_number:
            return 1
        return next_number
