#!/usr/bin/env python3
"""
seed_data.py

Seeds a SQLite order database with a small catalog and synthetic sale history.
Orders go through the real order store, so identifiers and daily display
numbers are assigned exactly as they are at the register.

Run:
  python -m pos_orders.seed_data --days 7 --orders-per-day 40
"""

from __future__ import annotations

import argparse
import random
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from .config import get_config
from .data.backends.sqlite_backend import SqliteOrderStore
from .data.database import Database, to_cents
from .data.ids import IdentifierGenerator
from .data.models import AppliedDiscount, LineOption, Order, OrderLine
from .data.reporting import ReportingAggregator
from .logging import get_logger

# -----------------------------
# Catalog definition
# -----------------------------

MENU: Dict[str, List[tuple]] = {
    "Coffee": [("Espresso", "3.00"), ("Latte", "4.50"), ("Cappuccino", "4.25"), ("Cold Brew", "4.75")],
    "Tea": [("Green Tea", "3.25"), ("Chai Latte", "4.50")],
    "Bakery": [("Croissant", "3.50"), ("Blueberry Muffin", "3.25"), ("Bagel", "2.75")],
}

# Modifiers attached to every drink item: (modifier name, [(option name, price)])
DRINK_MODIFIERS = [
    ("Milk", [("Oat Milk", "0.75"), ("Almond Milk", "0.75")]),
    ("Extras", [("Extra Shot", "1.00"), ("Vanilla Syrup", "0.50")]),
]

DISCOUNTS = [("Staff", True, "20.00"), ("Loyalty", False, "1.00")]

STAFF = [("Ana", "Lopez"), ("Ben", "Okafor"), ("Chloe", "Martin")]

TAX_RATE = Decimal("0.08")
CARD_FEE_RATE = Decimal("0.03")
CENT = Decimal("0.01")


@dataclass
class SeededItem:
    item_id: str
    price: Decimal
    options: List[tuple]  # (option_id, price)


@dataclass
class SeededCatalog:
    items: List[SeededItem]
    discounts: List[tuple]  # (discount_id, is_percentage, amount)
    staff_ids: List[str]


# -----------------------------
# Catalog
# -----------------------------

def seed_catalog(database: Database, ids: IdentifierGenerator) -> SeededCatalog:
    items: List[SeededItem] = []
    discounts: List[tuple] = []
    staff_ids: List[str] = []

    with database.transaction() as conn:
        for cat_sort, (category, entries) in enumerate(MENU.items()):
            category_id = ids.generate("category", conn=conn)
            conn.execute(
                "INSERT INTO categories (category_id, name, sort_order) VALUES (?, ?, ?)",
                (category_id, category, cat_sort),
            )
            for item_sort, (name, price) in enumerate(entries):
                item_id = ids.generate("item", conn=conn)
                conn.execute(
                    """
                    INSERT INTO items (item_id, category_id, name, regular_price_cents, event_price_cents, sort_order, available)
                    VALUES (?, ?, ?, ?, ?, ?, 1)
                    """,
                    (item_id, category_id, name, to_cents(Decimal(price)), to_cents(Decimal(price)), item_sort),
                )
                options: List[tuple] = []
                if category != "Bakery":
                    for mod_sort, (modifier, choices) in enumerate(DRINK_MODIFIERS):
                        modifier_id = ids.generate("modifier", conn=conn)
                        conn.execute(
                            "INSERT INTO modifiers (modifier_id, item_id, name, single_selection, sort_order) VALUES (?, ?, ?, 1, ?)",
                            (modifier_id, item_id, modifier, mod_sort),
                        )
                        for opt_sort, (option, option_price) in enumerate(choices):
                            option_id = ids.generate("option", conn=conn)
                            conn.execute(
                                """
                                INSERT INTO options (option_id, modifier_id, name, price_cents, available, sort_order)
                                VALUES (?, ?, ?, ?, 1, ?)
                                """,
                                (option_id, modifier_id, option, to_cents(Decimal(option_price)), opt_sort),
                            )
                            options.append((option_id, Decimal(option_price)))
                items.append(SeededItem(item_id=item_id, price=Decimal(price), options=options))

        for sort, (name, is_percentage, amount) in enumerate(DISCOUNTS):
            discount_id = ids.generate("discount", conn=conn)
            conn.execute(
                """
                INSERT INTO discounts (discount_id, name, is_percentage, amount_cents, available, sort_order)
                VALUES (?, ?, ?, ?, 1, ?)
                """,
                (discount_id, name, int(is_percentage), to_cents(Decimal(amount)), sort),
            )
            discounts.append((discount_id, is_percentage, Decimal(amount)))

        for first, last in STAFF:
            staff_id = ids.generate("staff", conn=conn, seed_name=first)
            conn.execute(
                "INSERT INTO staff (staff_id, pin, first_name, last_name, hourly_wage_cents, is_admin) VALUES (?, ?, ?, ?, ?, 0)",
                (staff_id, f"{random.randint(0, 9999):04d}", first, last, 1800),
            )
            staff_ids.append(staff_id)

    return SeededCatalog(items=items, discounts=discounts, staff_ids=staff_ids)


# -----------------------------
# Orders
# -----------------------------

def build_order(catalog: SeededCatalog) -> Order:
    """A random but internally consistent sale."""
    lines: List[OrderLine] = []
    for item in random.sample(catalog.items, k=random.randint(1, 3)):
        quantity = random.choice([1, 1, 1, 2])
        chosen = random.sample(item.options, k=random.randint(0, min(1, len(item.options))))
        options = [LineOption(option_id=option_id, price=price) for option_id, price in chosen]
        unit_price = item.price + sum((o.price for o in options), Decimal("0.00"))
        lines.append(OrderLine(
            item_id=item.item_id,
            quantity=quantity,
            unit_price=unit_price,
            line_total=unit_price * quantity,
            options=options,
        ))

    subtotal = sum((line.line_total for line in lines), Decimal("0.00"))

    discounts: List[AppliedDiscount] = []
    if catalog.discounts and random.random() < 0.15:
        discount_id, is_percentage, amount = random.choice(catalog.discounts)
        applied = (subtotal * amount / 100).quantize(CENT) if is_percentage else min(amount, subtotal)
        discounts.append(AppliedDiscount(discount_id=discount_id, amount=applied))
    discount_total = sum((d.amount for d in discounts), Decimal("0.00"))

    tender = random.choices(["cash", "card"], weights=[0.3, 0.7])[0]
    tax = ((subtotal - discount_total) * TAX_RATE).quantize(CENT)
    tip = Decimal(random.choice(["0.00", "0.00", "1.00", "2.00"]))
    card_fee = ((subtotal - discount_total) * CARD_FEE_RATE).quantize(CENT) if tender == "card" else Decimal("0.00")
    total = subtotal + tax + tip + card_fee - discount_total

    tendered = change = None
    if tender == "cash":
        tendered = Decimal(int(total) + 1)
        change = tendered - total

    return Order(
        staff_id=random.choice(catalog.staff_ids),
        tender_method=tender,
        subtotal=subtotal,
        tax=tax,
        tip=tip,
        card_fee=card_fee,
        total=total,
        tendered_amount=tendered,
        change_amount=change,
        lines=lines,
        discounts=discounts,
    )


def sale_times(day: date, count: int) -> List[datetime]:
    """Sorted random sale instants between opening (07:00) and closing (19:00)."""
    opening = datetime.combine(day, time(7, 0))
    seconds = sorted(random.randint(0, 12 * 3600 - 1) for _ in range(count))
    return [opening + timedelta(seconds=s) for s in seconds]


# -----------------------------
# Main
# -----------------------------

def main(argv: Optional[List[str]] = None) -> int:
    config = get_config()
    logger = get_logger(__name__)

    parser = argparse.ArgumentParser(description="Seed a SQLite order database with synthetic sales.")
    parser.add_argument("--db-path", type=str, default=config.db_path)
    parser.add_argument("--days", type=int, default=config.default_seed_days, help="Number of days of order history.")
    parser.add_argument("--orders-per-day", type=int, default=config.default_seed_orders_per_day)
    parser.add_argument("--start-date", type=str, default=None, help="YYYY-MM-DD (defaults to today - days + 1)")
    parser.add_argument("--seed", type=int, default=config.default_seed_value)
    parser.add_argument("--refund-rate", type=float, default=0.02, help="Share of orders to refund afterwards.")
    args = parser.parse_args(argv)

    if args.days < 1 or args.orders_per_day < 0:
        parser.error("--days must be >= 1 and --orders-per-day >= 0")

    random.seed(args.seed)

    database = Database(db_path=args.db_path)
    database.bootstrap_schema()
    ids = IdentifierGenerator(database, rng=random.Random(args.seed))

    if args.start_date:
        start_d = date.fromisoformat(args.start_date)
    else:
        start_d = date.today() - timedelta(days=args.days - 1)

    catalog = seed_catalog(database, ids)

    # The store stamps created_at from its clock; feed it the synthetic sale times
    pending: List[datetime] = []
    store = SqliteOrderStore(database=database, ids=ids, clock=lambda: pending.pop(0))

    created: List[str] = []
    for offset in range(args.days):
        day = start_d + timedelta(days=offset)
        for ts in sale_times(day, args.orders_per_day):
            pending.append(ts)
            created.append(store.create(build_order(catalog)).order_id)

    refunded = [order_id for order_id in created if random.random() < args.refund_rate]
    for order_id in refunded:
        store.refund(order_id)

    end_d = start_d + timedelta(days=args.days)
    summary = ReportingAggregator(database).summarize(
        datetime.combine(start_d, time.min), datetime.combine(end_d, time.min)
    )

    # simple summary
    logger.info(f"Seeded {database.db_path}")
    logger.info(f" items: {len(catalog.items)} | discounts: {len(catalog.discounts)} | staff: {len(catalog.staff_ids)}")
    logger.info(f" orders: {summary.total_transactions} | refunded: {len(refunded)} | gross: {summary.total_gross_sales}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
