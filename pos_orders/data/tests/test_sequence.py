from datetime import datetime

from pos_orders.config import set_config_for_test
from pos_orders.data.backends.sqlite_backend import SqliteOrderStore
from pos_orders.data.sequence import DailySequenceCounter


def test_first_order_of_day_is_one(database):
    counter = DailySequenceCounter(database)
    assert counter.next_display_number(datetime(2024, 3, 15, 8, 0)) == 1


def test_same_day_orders_increment(store, clock, make_order):
    numbers = []
    for _ in range(4):
        numbers.append(store.create(make_order()).display_number)
        clock.advance(minutes=5)
    assert numbers == [1, 2, 3, 4]


def test_new_day_restarts(store, clock, make_order):
    clock.now = datetime(2024, 3, 15, 23, 58)
    assert store.create(make_order()).display_number == 1
    assert store.create(make_order()).display_number == 2

    clock.now = datetime(2024, 3, 16, 0, 0)
    assert store.create(make_order()).display_number == 1


def test_wraps_to_one_above_max(database, clock, make_order):
    store = SqliteOrderStore(
        database=database,
        sequence=DailySequenceCounter(database, max_number=3),
        clock=clock,
    )
    numbers = []
    for _ in range(5):
        numbers.append(store.create(make_order()).display_number)
        clock.advance(minutes=1)
    # The day's maximum stays at 3 after the wrap, so later orders keep getting 1
    assert numbers == [1, 2, 3, 1, 1]


def test_max_from_config(database, clock, make_order, tmp_path):
    set_config_for_test(db_path=str(tmp_path / "pos.db"), display_number_max=2, log_level="WARNING")
    store = SqliteOrderStore(database=database, clock=clock)
    numbers = [store.create(make_order()).display_number for _ in range(3)]
    assert numbers == [1, 2, 1]


def test_counter_ignores_other_days(store, clock, make_order):
    store.create(make_order())
    store.create(make_order())

    counter = DailySequenceCounter(store.database)
    assert counter.next_display_number(datetime(2024, 3, 15, 18, 0)) == 3
    assert counter.next_display_number(datetime(2024, 3, 14, 18, 0)) == 1
    assert counter.next_display_number(datetime(2024, 3, 16, 0, 0)) == 1
