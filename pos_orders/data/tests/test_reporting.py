from datetime import datetime, timezone
from decimal import Decimal

import pytest

from pos_orders.data.reporting import LINE_ITEM_COLUMNS, ReportingAggregator
from pos_orders.errors import ValidationError

DAY_START = datetime(2024, 3, 15)
DAY_END = datetime(2024, 3, 16)


@pytest.fixture
def reporting(database):
    return ReportingAggregator(database)


def test_empty_window_is_all_zero(reporting):
    summary = reporting.summarize(DAY_START, DAY_END)

    for field, value in summary.model_dump().items():
        assert value is not None, field
        assert value == 0, field


def test_partitions_by_tender(store, reporting, make_order):
    store.create(make_order(
        tender_method="cash", subtotal=Decimal("9.26"), tax=Decimal("0.74"), total=Decimal("10.00"),
        with_discount=False,
    ))
    store.create(make_order(
        tender_method="card", subtotal=Decimal("17.50"), tax=Decimal("1.40"), tip=Decimal("0.50"),
        card_fee=Decimal("0.60"), total=Decimal("20.00"), with_discount=False,
    ))

    summary = reporting.summarize(DAY_START, DAY_END)

    assert summary.total_transactions == 2
    assert summary.total_cash_transactions == 1
    assert summary.total_card_transactions == 1
    assert summary.total_cash_sales == Decimal("10.00")
    assert summary.total_card_sales == Decimal("20.00")
    assert summary.total_gross_sales == Decimal("30.00")
    assert summary.total_net_sales == Decimal("26.76")
    assert summary.total_tax == Decimal("2.14")
    assert summary.total_tips == Decimal("0.50")
    assert summary.total_discounts == Decimal("0.00")


def test_discounts_use_applied_amounts_in_window(store, clock, reporting, make_order, database, catalog):
    store.create(make_order())
    store.create(make_order())
    clock.now = datetime(2024, 3, 16, 10, 0)
    store.create(make_order())

    # Repricing the catalog discount must not change history
    with database.transaction() as conn:
        conn.execute("UPDATE discounts SET amount_cents = 5000 WHERE discount_id = ?", (catalog["loyalty"],))

    summary = reporting.summarize(DAY_START, DAY_END)
    assert summary.total_transactions == 2
    assert summary.total_discounts == Decimal("2.00")


def test_refunded_orders_still_counted(store, reporting, make_order):
    order = store.create(make_order())
    store.refund(order.order_id)

    assert reporting.summarize(DAY_START, DAY_END).total_transactions == 1


def test_inverted_window_is_rejected(reporting):
    with pytest.raises(ValidationError):
        reporting.summarize(DAY_END, DAY_START)


def test_line_items_frame(store, clock, reporting, make_order):
    first = store.create(make_order())
    clock.advance(hours=1)
    second = store.create(make_order(tender_method="cash", total="8.37"))

    df = reporting.line_items_frame(DAY_START, DAY_END)

    assert list(df.columns) == LINE_ITEM_COLUMNS
    assert len(df) == 4
    assert df["order_id"].tolist() == [second.order_id, second.order_id, first.order_id, first.order_id]
    assert df["item_name"].tolist()[:2] == ["Latte", "Croissant"]
    assert df["unit_price"].tolist()[:2] == [5.25, 3.5]
    assert df["tender_method"].iloc[0] == "cash"
    assert df["display_number"].tolist() == [2, 2, 1, 1]


def test_line_items_frame_empty(reporting):
    df = reporting.line_items_frame(DAY_START, DAY_END)
    assert df.empty
    assert list(df.columns) == LINE_ITEM_COLUMNS


def test_aware_bounds_are_read_as_local_time(store, reporting, make_order):
    store.create(make_order())

    summary = reporting.summarize(DAY_START.astimezone(timezone.utc), DAY_END)
    assert summary.total_transactions == 1
    assert summary.total_discounts == Decimal("1.00")
