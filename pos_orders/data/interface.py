from __future__ import annotations

from datetime import date, datetime
from typing import List, Protocol, Union

import pandas as pd

from .models import Order, OrderSummary


# ---- Order store protocol ----

class OrderStore(Protocol):
    """
    Backend-agnostic contract consumed by the request-handling layer.

    IMPORTANT:
    - Implementations MUST NOT cache order state between calls.
      Each call reads or writes the committed state of the underlying store.
    - `create` is all-or-nothing: a failure leaves no partial aggregate visible.
    """

    def create(self, order: Order) -> Order:
        """Persist a new order aggregate, filling in identifiers, display number and timestamp."""
        ...

    def find_by_date_range(self, start_ts: datetime, end_ts: datetime) -> List[Order]:
        """Orders created in [start_ts, end_ts), newest first, fully reconstructed."""
        ...

    def find_for_day(self, day: Union[date, datetime]) -> List[Order]:
        """Orders created on the local calendar day containing `day`."""
        ...

    def find_by_id(self, order_id: str) -> Order:
        """One fully reconstructed order."""
        ...

    def refund(self, order_id: str) -> None:
        """Mark an order as refunded."""
        ...


# ---- Reporting protocol ----

class OrderReporting(Protocol):
    """Aggregated reads over the same [start_ts, end_ts) window semantics as OrderStore."""

    def summarize(self, start_ts: datetime, end_ts: datetime) -> OrderSummary:
        """Counts and sums for the window; all zeros when it is empty."""
        ...

    def line_items_frame(self, start_ts: datetime, end_ts: datetime) -> pd.DataFrame:
        """One row per order line in the window, newest order first."""
        ...
