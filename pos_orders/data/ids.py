"""Short human-typeable identifiers: a prefix plus zero-padded random digits.

Uniqueness comes from probing the owning table, not from the random draw.
"""

from __future__ import annotations

import random
import sqlite3
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..config import get_config
from ..errors import ExhaustedRetries, ValidationError
from ..logging import get_logger
from .database import Database


@dataclass(frozen=True)
class IdNamespace:
    prefix: str
    table: str
    column: str


NAMESPACES: Dict[str, IdNamespace] = {
    # order aggregate
    "order": IdNamespace("sale", "orders", "order_id"),
    "order_line": IdNamespace("titem", "order_lines", "line_id"),
    "line_option": IdNamespace("toption", "order_line_options", "line_option_id"),
    "applied_discount": IdNamespace("tdiscount", "order_discounts", "applied_discount_id"),
    # catalog
    "category": IdNamespace("category", "categories", "category_id"),
    "item": IdNamespace("item", "items", "item_id"),
    "modifier": IdNamespace("modifier", "modifiers", "modifier_id"),
    "option": IdNamespace("option", "options", "option_id"),
    "discount": IdNamespace("discount", "discounts", "discount_id"),
    "staff": IdNamespace("", "staff", "staff_id"),  # prefix is the first name
}

# Seeded once per process from the OS entropy source.
_process_rng = random.Random()


def allocate_unique(
    namespace: str,
    candidate: Callable[[], str],
    is_taken: Callable[[str], bool],
    max_attempts: int,
) -> str:
    """Draw candidates until one is free in the namespace.

    Raises:
        ExhaustedRetries: If every one of max_attempts candidates was taken.
    """
    for _ in range(max_attempts):
        token = candidate()
        if not is_taken(token):
            return token
    raise ExhaustedRetries(namespace, max_attempts)


class IdentifierGenerator:
    """Generates collision-checked identifiers for order and catalog rows."""

    def __init__(
        self,
        database: Database,
        digits: Optional[int] = None,
        max_attempts: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        config = get_config()
        self.database = database
        self.digits = config.id_digits if digits is None else digits
        self.max_attempts = config.id_max_attempts if max_attempts is None else max_attempts
        self.rng = rng or _process_rng
        self.logger = get_logger(__name__)

    def candidate(self, prefix: str) -> str:
        return f"{prefix}{self.rng.randrange(10 ** self.digits):0{self.digits}d}"

    def generate(
        self,
        kind: str,
        conn: Optional[sqlite3.Connection] = None,
        seed_name: Optional[str] = None,
    ) -> str:
        """Return a free identifier for `kind`.

        Args:
            kind: Key of NAMESPACES ("order", "order_line", "item", ...).
            conn: Connection to check against; pass the open transaction's
                connection so the check and the insert share the write lock.
            seed_name: First name used as the prefix for staff identifiers.
        Raises:
            ValidationError: Unknown kind, or staff without a seed_name.
            ExhaustedRetries: No free identifier within the attempt bound.
        """
        ns = NAMESPACES.get(kind)
        if ns is None:
            raise ValidationError(f"Unknown identifier kind: {kind}")

        prefix = ns.prefix
        if kind == "staff":
            if not seed_name or not seed_name.strip():
                raise ValidationError("Staff identifiers need a first name")
            prefix = seed_name.strip().lower()

        if conn is None:
            with self.database.read() as read_conn:
                return self._allocate(kind, ns, prefix, read_conn)
        return self._allocate(kind, ns, prefix, conn)

    def _allocate(self, kind: str, ns: IdNamespace, prefix: str, conn: sqlite3.Connection) -> str:
        query = f"SELECT 1 FROM {ns.table} WHERE {ns.column} = ? LIMIT 1"

        def is_taken(token: str) -> bool:
            taken = conn.execute(query, (token,)).fetchone() is not None
            if taken:
                self.logger.debug(f"{kind} ID collision on {token}, retrying")
            return taken

        return allocate_unique(kind, lambda: self.candidate(prefix), is_taken, self.max_attempts)
