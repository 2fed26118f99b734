from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from ..errors import PersistenceError, ValidationError
from ..logging import get_logger
from .database import Database, from_cents, to_storage_ts
from .interface import OrderReporting
from .models import DateWindow, OrderSummary


_SUMMARY_QUERY = """
SELECT
    COUNT(*) AS total_transactions,
    SUM(CASE WHEN tender_method = 'cash' THEN total_cents ELSE 0 END) AS total_cash_sales,
    SUM(CASE WHEN tender_method != 'cash' THEN total_cents ELSE 0 END) AS total_card_sales,
    SUM(tax_cents) AS total_tax,
    SUM(tip_cents) AS total_tips,
    COUNT(CASE WHEN tender_method = 'cash' THEN 1 END) AS total_cash_transactions,
    COUNT(CASE WHEN tender_method != 'cash' THEN 1 END) AS total_card_transactions,
    SUM(total_cents) AS total_gross_sales,
    SUM(subtotal_cents) AS total_net_sales,
    (
        SELECT SUM(od.amount_cents)
        FROM order_discounts od
        JOIN orders o2 ON od.order_id = o2.order_id
        WHERE o2.created_at >= :start_ts AND o2.created_at < :end_ts
    ) AS total_discounts
FROM orders
WHERE created_at >= :start_ts AND created_at < :end_ts
"""

_LINE_ITEMS_QUERY = """
SELECT
    o.created_at, o.order_id, o.display_number, o.tender_method, o.status,
    ol.item_id, COALESCE(i.name, '') AS item_name,
    ol.quantity, ol.unit_price_cents, ol.line_total_cents
FROM orders o
JOIN order_lines ol ON ol.order_id = o.order_id
LEFT JOIN items i ON ol.item_id = i.item_id
WHERE o.created_at >= :start_ts AND o.created_at < :end_ts
ORDER BY o.created_at DESC, o.rowid DESC, ol.position
"""

LINE_ITEM_COLUMNS = [
    "created_at", "order_id", "display_number", "tender_method", "status",
    "item_id", "item_name", "quantity", "unit_price", "line_total",
]


def _zero_if_null(value: Optional[Any]) -> int:
    # SUM over zero rows is NULL in SQL
    return 0 if value is None else int(value)


class ReportingAggregator(OrderReporting):
    """
    Summary reads over persisted orders.
    - One aggregate query per call, no aggregate reconstruction.
    - Refunded orders are still counted; the window only looks at created_at.
    """

    def __init__(self, database: Optional[Database] = None) -> None:
        self.database = database or Database()
        self.logger = get_logger(__name__)

    def summarize(self, start_ts: datetime, end_ts: datetime) -> OrderSummary:
        params = self._params(start_ts, end_ts)
        with self.database.read() as conn:
            row = conn.execute(_SUMMARY_QUERY, params).fetchone()

        summary = OrderSummary(
            total_transactions=_zero_if_null(row["total_transactions"]),
            total_cash_transactions=_zero_if_null(row["total_cash_transactions"]),
            total_card_transactions=_zero_if_null(row["total_card_transactions"]),
            total_gross_sales=from_cents(_zero_if_null(row["total_gross_sales"])),
            total_net_sales=from_cents(_zero_if_null(row["total_net_sales"])),
            total_cash_sales=from_cents(_zero_if_null(row["total_cash_sales"])),
            total_card_sales=from_cents(_zero_if_null(row["total_card_sales"])),
            total_tax=from_cents(_zero_if_null(row["total_tax"])),
            total_tips=from_cents(_zero_if_null(row["total_tips"])),
            total_discounts=from_cents(_zero_if_null(row["total_discounts"])),
        )
        self.logger.debug(f"Summary for [{start_ts}, {end_ts}): {summary.total_transactions} orders")
        return summary

    def line_items_frame(self, start_ts: datetime, end_ts: datetime) -> pd.DataFrame:
        params = self._params(start_ts, end_ts)
        with self.database.read() as conn:
            # Plain tuples for pandas
            conn.row_factory = None
            try:
                df = pd.read_sql_query(_LINE_ITEMS_QUERY, conn, params=params)
            except pd.errors.DatabaseError as e:
                self.logger.error(f"Line item export failed: {e}")
                raise PersistenceError("Line item export failed", e) from e

        if df.empty:
            return pd.DataFrame(columns=LINE_ITEM_COLUMNS)

        # Ensure types
        df["created_at"] = pd.to_datetime(df["created_at"])
        df["unit_price"] = df["unit_price_cents"].astype(float) / 100.0
        df["line_total"] = df["line_total_cents"].astype(float) / 100.0
        return df[LINE_ITEM_COLUMNS].reset_index(drop=True)

    @staticmethod
    def _params(start_ts: datetime, end_ts: datetime) -> dict:
        try:
            window = DateWindow(start_ts=start_ts, end_ts=end_ts)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid date window: {e}") from e
        return {"start_ts": to_storage_ts(window.start_ts), "end_ts": to_storage_ts(window.end_ts)}
