from datetime import datetime

import pytest

from pos_orders.data.backends.sqlite_backend import SqliteOrderStore
from pos_orders.data.reporting import ReportingAggregator
from pos_orders.data.util import get_database, get_order_store, get_reporting


def test_factories_share_configured_database(tmp_path):
    database = get_database()
    assert database.db_path == tmp_path / "pos.db"
    assert database.db_path.exists()

    store = get_order_store(database=database)
    reporting = get_reporting(database=database)
    assert isinstance(store, SqliteOrderStore)
    assert isinstance(reporting, ReportingAggregator)
    assert store.database is reporting.database

    # Schema is bootstrapped, so an empty read succeeds
    assert store.find_by_date_range(datetime(2024, 1, 1), datetime(2024, 1, 2)) == []


def test_unknown_kind():
    with pytest.raises(ValueError):
        get_order_store(kind="postgres")
    with pytest.raises(ValueError):
        get_reporting(kind="postgres")
