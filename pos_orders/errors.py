"""Typed errors raised by the order engine.

The request layer maps these to status codes; the engine itself never
deals in HTTP.
"""
from __future__ import annotations

from typing import Optional


class PosOrdersError(Exception):
    """Base class for every error the order engine raises."""


class ValidationError(PosOrdersError):
    """Malformed or missing input fields."""


class NotFound(PosOrdersError):
    """No order header exists for the requested identifier."""

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class Conflict(PosOrdersError):
    """The requested transition is not allowed from the order's current status."""

    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(f"Order {order_id} is already {status}")
        self.order_id = order_id
        self.status = status


class ExhaustedRetries(PosOrdersError):
    """No free identifier was found within the attempt bound."""

    def __init__(self, namespace: str, attempts: int) -> None:
        super().__init__(f"Failed to generate unique {namespace} ID after {attempts} attempts")
        self.namespace = namespace
        self.attempts = attempts


class PersistenceError(PosOrdersError):
    """Any failure of the underlying store, including rolled back transactions."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.cause = cause
