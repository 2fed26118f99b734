from __future__ import annotations

import sqlite3
from datetime import date, datetime
from typing import Callable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ...config import get_config
from ...errors import Conflict, NotFound, ValidationError
from ...logging import get_logger
from ..database import Database, from_cents, from_storage_ts, to_cents, to_local_naive, to_storage_ts
from ..ids import IdentifierGenerator
from ..interface import OrderStore
from ..models import (
    AppliedDiscount, CatalogDiscount, CatalogItem, CatalogOption, DateWindow,
    LineOption, Order, OrderLine, day_window,
)
from ..sequence import DailySequenceCounter


_HEADER_COLUMNS = """
    o.order_id, o.staff_id, o.display_number, o.tender_method,
    o.subtotal_cents, o.tax_cents, o.tip_cents, o.card_fee_cents,
    o.total_cents, o.tendered_cents, o.change_cents,
    o.status, o.created_at
"""


class SqliteOrderStore(OrderStore):
    """
    SQLite-backed order store.
    - `create` runs identifier assignment, the daily number lookup and every insert
      inside one BEGIN IMMEDIATE transaction.
    - Reads left-join current catalog rows, so deleted or renamed catalog entries
      come back with default catalog fields instead of failing the read.
    """

    def __init__(
        self,
        database: Optional[Database] = None,
        ids: Optional[IdentifierGenerator] = None,
        sequence: Optional[DailySequenceCounter] = None,
        clock: Callable[[], datetime] = datetime.now,
        strict_refunds: Optional[bool] = None,
    ) -> None:
        self.database = database or Database()
        self.ids = ids or IdentifierGenerator(self.database)
        self.sequence = sequence or DailySequenceCounter(self.database)
        self.clock = clock
        self.strict_refunds = get_config().strict_refunds if strict_refunds is None else strict_refunds
        self.logger = get_logger(__name__)

    # ---------- create ----------

    def create(self, order: Order) -> Order:
        self._check_unpersisted(order)

        # Work on a copy so a rolled back attempt leaves the caller's object untouched
        draft = order.model_copy(deep=True)

        with self.database.transaction() as conn:
            draft.order_id = self.ids.generate("order", conn=conn)
            draft.created_at = to_local_naive(self.clock())
            draft.display_number = self.sequence.next_display_number(draft.created_at, conn=conn)
            draft.status = "created"
            self._insert_header(conn, draft)

            for line_position, line in enumerate(draft.lines):
                line.line_id = self.ids.generate("order_line", conn=conn)
                line.order_id = draft.order_id
                self._insert_line(conn, line, line_position)

                for option_position, option in enumerate(line.options):
                    option.line_option_id = self.ids.generate("line_option", conn=conn)
                    option.line_id = line.line_id
                    self._insert_line_option(conn, option, option_position)

            for discount_position, discount in enumerate(draft.discounts):
                discount.applied_discount_id = self.ids.generate("applied_discount", conn=conn)
                discount.order_id = draft.order_id
                self._insert_discount(conn, discount, discount_position)

        self._copy_generated_fields(draft, order)

        self.logger.info(
            f"Created order {order.order_id} #{order.display_number} "
            f"({len(order.lines)} lines, {len(order.discounts)} discounts)"
        )
        return order

    @staticmethod
    def _copy_generated_fields(saved: Order, order: Order) -> None:
        """Write committed identifiers onto the caller's own objects, children included."""
        order.order_id = saved.order_id
        order.created_at = saved.created_at
        order.display_number = saved.display_number
        order.status = saved.status

        for line, saved_line in zip(order.lines, saved.lines):
            line.line_id = saved_line.line_id
            line.order_id = saved_line.order_id
            for option, saved_option in zip(line.options, saved_line.options):
                option.line_option_id = saved_option.line_option_id
                option.line_id = saved_option.line_id

        for discount, saved_discount in zip(order.discounts, saved.discounts):
            discount.applied_discount_id = saved_discount.applied_discount_id
            discount.order_id = saved_discount.order_id

    @staticmethod
    def _check_unpersisted(order: Order) -> None:
        if order.order_id or order.created_at is not None or order.display_number is not None:
            raise ValidationError("Order already carries generated fields; it cannot be created again")
        if order.status != "created":
            raise ValidationError(f"New orders must have status 'created', got '{order.status}'")
        for line in order.lines:
            if line.line_id or any(option.line_option_id for option in line.options):
                raise ValidationError("Order lines must not carry identifiers")
        if any(discount.applied_discount_id for discount in order.discounts):
            raise ValidationError("Applied discounts must not carry identifiers")

    @staticmethod
    def _insert_header(conn: sqlite3.Connection, order: Order) -> None:
        conn.execute(
            """
            INSERT INTO orders (
                order_id, staff_id, display_number, tender_method,
                subtotal_cents, tax_cents, tip_cents, card_fee_cents,
                total_cents, tendered_cents, change_cents, status,
                created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                order.order_id, order.staff_id, order.display_number, order.tender_method,
                to_cents(order.subtotal), to_cents(order.tax), to_cents(order.tip), to_cents(order.card_fee),
                to_cents(order.total),
                None if order.tendered_amount is None else to_cents(order.tendered_amount),
                None if order.change_amount is None else to_cents(order.change_amount),
                order.status,
                to_storage_ts(order.created_at),
            ),
        )

    @staticmethod
    def _insert_line(conn: sqlite3.Connection, line: OrderLine, position: int) -> None:
        conn.execute(
            """
            INSERT INTO order_lines (
                line_id, order_id, position, item_id,
                quantity, unit_price_cents, line_total_cents
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                line.line_id, line.order_id, position, line.item_id,
                line.quantity, to_cents(line.unit_price), to_cents(line.line_total),
            ),
        )

    @staticmethod
    def _insert_line_option(conn: sqlite3.Connection, option: LineOption, position: int) -> None:
        conn.execute(
            """
            INSERT INTO order_line_options (line_option_id, line_id, position, option_id, price_cents)
            VALUES (?, ?, ?, ?, ?)
            """,
            (option.line_option_id, option.line_id, position, option.option_id, to_cents(option.price)),
        )

    @staticmethod
    def _insert_discount(conn: sqlite3.Connection, discount: AppliedDiscount, position: int) -> None:
        conn.execute(
            """
            INSERT INTO order_discounts (applied_discount_id, order_id, position, discount_id, amount_cents)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                discount.applied_discount_id, discount.order_id, position,
                discount.discount_id, to_cents(discount.amount),
            ),
        )

    # ---------- reads ----------

    def find_by_date_range(self, start_ts: datetime, end_ts: datetime) -> List[Order]:
        window = _window(start_ts, end_ts)
        with self.database.read() as conn:
            rows = conn.execute(
                f"""
                SELECT {_HEADER_COLUMNS}
                FROM orders o
                WHERE o.created_at >= ? AND o.created_at < ?
                ORDER BY o.created_at DESC, o.rowid DESC
                """,
                (to_storage_ts(window.start_ts), to_storage_ts(window.end_ts)),
            ).fetchall()
            orders = [self._load_aggregate(conn, row) for row in rows]

        self.logger.debug(f"Loaded {len(orders)} orders in [{window.start_ts}, {window.end_ts})")
        return orders

    def find_for_day(self, day: Union[date, datetime]) -> List[Order]:
        window = day_window(day)
        return self.find_by_date_range(window.start_ts, window.end_ts)

    def find_by_id(self, order_id: str) -> Order:
        with self.database.read() as conn:
            row = conn.execute(
                f"SELECT {_HEADER_COLUMNS} FROM orders o WHERE o.order_id = ?",
                (order_id,),
            ).fetchone()
            if row is None:
                raise NotFound(order_id)
            return self._load_aggregate(conn, row)

    def _load_aggregate(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Order:
        order = Order(
            order_id=row["order_id"],
            staff_id=row["staff_id"],
            display_number=row["display_number"],
            tender_method=row["tender_method"],
            subtotal=from_cents(row["subtotal_cents"]),
            tax=from_cents(row["tax_cents"]),
            tip=from_cents(row["tip_cents"]),
            card_fee=from_cents(row["card_fee_cents"]),
            total=from_cents(row["total_cents"]),
            tendered_amount=from_cents(row["tendered_cents"]),
            change_amount=from_cents(row["change_cents"]),
            status=row["status"],
            created_at=from_storage_ts(row["created_at"]),
        )
        order.lines = self._load_lines(conn, order.order_id)
        order.discounts = self._load_discounts(conn, order.order_id)
        return order

    def _load_lines(self, conn: sqlite3.Connection, order_id: str) -> List[OrderLine]:
        rows = conn.execute(
            """
            SELECT
                ol.line_id, ol.order_id, ol.item_id,
                ol.quantity, ol.unit_price_cents, ol.line_total_cents,
                COALESCE(i.name, '') AS item_name,
                COALESCE(i.category_id, '') AS category_id,
                COALESCE(i.regular_price_cents, 0) AS regular_price_cents,
                COALESCE(i.event_price_cents, 0) AS event_price_cents,
                COALESCE(i.sort_order, 0) AS sort_order,
                COALESCE(i.available, 0) AS available
            FROM order_lines ol
            LEFT JOIN items i ON ol.item_id = i.item_id
            WHERE ol.order_id = ?
            ORDER BY ol.position
            """,
            (order_id,),
        ).fetchall()

        lines = []
        for r in rows:
            line = OrderLine(
                line_id=r["line_id"],
                order_id=r["order_id"],
                item_id=r["item_id"],
                item=CatalogItem(
                    name=r["item_name"],
                    category_id=r["category_id"],
                    regular_price=from_cents(r["regular_price_cents"]),
                    event_price=from_cents(r["event_price_cents"]),
                    sort_order=r["sort_order"],
                    available=bool(r["available"]),
                ),
                quantity=r["quantity"],
                unit_price=from_cents(r["unit_price_cents"]),
                line_total=from_cents(r["line_total_cents"]),
            )
            line.options = self._load_line_options(conn, line.line_id)
            lines.append(line)
        return lines

    @staticmethod
    def _load_line_options(conn: sqlite3.Connection, line_id: str) -> List[LineOption]:
        rows = conn.execute(
            """
            SELECT
                lo.line_option_id, lo.line_id, lo.option_id, lo.price_cents,
                COALESCE(o.modifier_id, '') AS modifier_id,
                COALESCE(o.name, '') AS option_name,
                COALESCE(o.price_cents, 0) AS catalog_price_cents,
                COALESCE(o.available, 0) AS available,
                COALESCE(o.sort_order, 0) AS sort_order
            FROM order_line_options lo
            LEFT JOIN options o ON lo.option_id = o.option_id
            WHERE lo.line_id = ?
            ORDER BY lo.position
            """,
            (line_id,),
        ).fetchall()

        return [
            LineOption(
                line_option_id=r["line_option_id"],
                line_id=r["line_id"],
                option_id=r["option_id"],
                option=CatalogOption(
                    modifier_id=r["modifier_id"],
                    name=r["option_name"],
                    price=from_cents(r["catalog_price_cents"]),
                    available=bool(r["available"]),
                    sort_order=r["sort_order"],
                ),
                price=from_cents(r["price_cents"]),
            )
            for r in rows
        ]

    @staticmethod
    def _load_discounts(conn: sqlite3.Connection, order_id: str) -> List[AppliedDiscount]:
        rows = conn.execute(
            """
            SELECT
                od.applied_discount_id, od.order_id, od.discount_id, od.amount_cents,
                COALESCE(d.name, '') AS discount_name,
                COALESCE(d.is_percentage, 0) AS is_percentage,
                COALESCE(d.amount_cents, 0) AS catalog_amount_cents,
                COALESCE(d.available, 0) AS available,
                COALESCE(d.sort_order, 0) AS sort_order
            FROM order_discounts od
            LEFT JOIN discounts d ON od.discount_id = d.discount_id
            WHERE od.order_id = ?
            ORDER BY od.position
            """,
            (order_id,),
        ).fetchall()

        return [
            AppliedDiscount(
                applied_discount_id=r["applied_discount_id"],
                order_id=r["order_id"],
                discount_id=r["discount_id"],
                discount=CatalogDiscount(
                    name=r["discount_name"],
                    is_percentage=bool(r["is_percentage"]),
                    amount=from_cents(r["catalog_amount_cents"]),
                    available=bool(r["available"]),
                    sort_order=r["sort_order"],
                ),
                amount=from_cents(r["amount_cents"]),
            )
            for r in rows
        ]

    # ---------- refund ----------

    def refund(self, order_id: str) -> None:
        with self.database.transaction() as conn:
            if self.strict_refunds:
                row = conn.execute("SELECT status FROM orders WHERE order_id = ?", (order_id,)).fetchone()
                if row is None:
                    raise NotFound(order_id)
                if row["status"] == "refunded":
                    raise Conflict(order_id, row["status"])

            cursor = conn.execute("UPDATE orders SET status = 'refunded' WHERE order_id = ?", (order_id,))

        if cursor.rowcount == 0:
            self.logger.debug(f"No order {order_id} to refund")
        else:
            self.logger.info(f"Refunded order {order_id}")


def _window(start_ts: datetime, end_ts: datetime) -> DateWindow:
    try:
        return DateWindow(start_ts=start_ts, end_ts=end_ts)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid date window: {e}") from e
