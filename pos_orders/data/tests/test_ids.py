import re

import pytest

from pos_orders.config import set_config_for_test
from pos_orders.data.ids import IdentifierGenerator, allocate_unique
from pos_orders.errors import ExhaustedRetries, ValidationError


class ScriptedRng:
    """Returns the scripted draws in order, repeating the last one."""
    def __init__(self, *draws):
        self.draws = list(draws)

    def randrange(self, stop):
        if len(self.draws) > 1:
            return self.draws.pop(0)
        return self.draws[0]


def test_order_id_format(database):
    """Order identifiers are 'sale' plus six zero-padded digits."""
    ids = IdentifierGenerator(database)
    assert re.fullmatch(r"sale\d{6}", ids.generate("order"))


def test_zero_padding(database):
    ids = IdentifierGenerator(database, rng=ScriptedRng(42))
    assert ids.generate("order_line") == "titem000042"
    assert ids.generate("line_option") == "toption000042"
    assert ids.generate("applied_discount") == "tdiscount000042"


def test_retries_past_taken_identifier(database, catalog):
    """item000001 is already in the catalog, so the next draw is used."""
    ids = IdentifierGenerator(database, rng=ScriptedRng(1, 2, 7))
    assert ids.generate("item") == "item000007"


def test_exhausted_retries(database, catalog):
    ids = IdentifierGenerator(database, max_attempts=5, rng=ScriptedRng(1))
    with pytest.raises(ExhaustedRetries) as exc_info:
        ids.generate("item")
    assert exc_info.value.attempts == 5
    assert exc_info.value.namespace == "item"


def test_attempt_bound_from_config(database, catalog, tmp_path):
    set_config_for_test(db_path=str(tmp_path / "pos.db"), id_max_attempts=3, log_level="WARNING")
    ids = IdentifierGenerator(database, rng=ScriptedRng(1))
    assert ids.max_attempts == 3
    with pytest.raises(ExhaustedRetries):
        ids.generate("item")


def test_allocate_unique_stops_at_first_free_token():
    checked = []
    tokens = iter(["a", "b", "c"])

    def is_taken(token):
        checked.append(token)
        return token != "b"

    assert allocate_unique("demo", lambda: next(tokens), is_taken, max_attempts=10) == "b"
    assert checked == ["a", "b"]


def test_allocate_unique_bounded():
    calls = []

    def is_taken(token):
        calls.append(token)
        return True

    with pytest.raises(ExhaustedRetries):
        allocate_unique("demo", lambda: "x", is_taken, max_attempts=100)
    assert len(calls) == 100


def test_staff_prefix_is_first_name(database):
    ids = IdentifierGenerator(database, rng=ScriptedRng(314))
    assert ids.generate("staff", seed_name=" Ana ") == "ana000314"


def test_staff_requires_first_name(database):
    with pytest.raises(ValidationError):
        IdentifierGenerator(database).generate("staff")


def test_unknown_kind(database):
    with pytest.raises(ValidationError):
        IdentifierGenerator(database).generate("receipt")
