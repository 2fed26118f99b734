from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from pos_orders.config import set_config_for_test
from pos_orders.data.backends.sqlite_backend import SqliteOrderStore
from pos_orders.data.database import Database
from pos_orders.data.models import AppliedDiscount, LineOption, Order, OrderLine


class FakeClock:
    """Callable clock that tests move by hand."""
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(autouse=True)
def scratch_config(tmp_path, monkeypatch):
    for var in ["DB_PATH", "DISPLAY_NUMBER_MAX", "STRICT_REFUNDS", "ID_MAX_ATTEMPTS", "ID_DIGITS", "LOG_LEVEL"]:
        monkeypatch.delenv(var, raising=False)
    set_config_for_test(db_path=str(tmp_path / "pos.db"), log_level="WARNING")
    yield


@pytest.fixture
def database(tmp_path):
    db = Database(db_path=tmp_path / "pos.db")
    db.bootstrap_schema()
    return db


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 15, 9, 30))


@pytest.fixture
def store(database, clock):
    return SqliteOrderStore(database=database, clock=clock)


@pytest.fixture
def catalog(database):
    """Two items, one option and one discount, inserted straight into the catalog tables."""
    with database.transaction() as conn:
        conn.execute("INSERT INTO categories (category_id, name, sort_order) VALUES ('category000001', 'Coffee', 0)")
        conn.execute(
            "INSERT INTO items (item_id, category_id, name, regular_price_cents, event_price_cents, sort_order, available) "
            "VALUES ('item000001', 'category000001', 'Latte', 450, 500, 0, 1)"
        )
        conn.execute(
            "INSERT INTO items (item_id, category_id, name, regular_price_cents, event_price_cents, sort_order, available) "
            "VALUES ('item000002', 'category000001', 'Croissant', 350, 350, 1, 1)"
        )
        conn.execute(
            "INSERT INTO modifiers (modifier_id, item_id, name, single_selection, sort_order) "
            "VALUES ('modifier000001', 'item000001', 'Milk', 1, 0)"
        )
        conn.execute(
            "INSERT INTO options (option_id, modifier_id, name, price_cents, available, sort_order) "
            "VALUES ('option000001', 'modifier000001', 'Oat Milk', 75, 1, 0)"
        )
        conn.execute(
            "INSERT INTO discounts (discount_id, name, is_percentage, amount_cents, available, sort_order) "
            "VALUES ('discount000001', 'Loyalty', 0, 100, 1, 0)"
        )
    return {
        "latte": "item000001",
        "croissant": "item000002",
        "oat_milk": "option000001",
        "loyalty": "discount000001",
    }


@pytest.fixture
def make_order(catalog):
    """Factory for the standard two-line sale: a latte with oat milk and a croissant, one discount."""
    def _make(tender_method="card", total="8.58", with_discount=True, **overrides):
        fields = dict(
            staff_id="ana123456",
            tender_method=tender_method,
            subtotal=Decimal("8.75"),
            tax=Decimal("0.62"),
            tip=Decimal("0.00"),
            card_fee=Decimal("0.21") if tender_method == "card" else Decimal("0.00"),
            total=Decimal(total),
            lines=[
                OrderLine(
                    item_id=catalog["latte"],
                    quantity=1,
                    unit_price=Decimal("5.25"),
                    line_total=Decimal("5.25"),
                    options=[LineOption(option_id=catalog["oat_milk"], price=Decimal("0.75"))],
                ),
                OrderLine(
                    item_id=catalog["croissant"],
                    quantity=1,
                    unit_price=Decimal("3.50"),
                    line_total=Decimal("3.50"),
                ),
            ],
            discounts=[AppliedDiscount(discount_id=catalog["loyalty"], amount=Decimal("1.00"))] if with_discount else [],
        )
        if tender_method == "cash":
            fields.update(tendered_amount=Decimal("10.00"), change_amount=Decimal("10.00") - Decimal(total))
        fields.update(overrides)
        return Order(**fields)

    return _make
