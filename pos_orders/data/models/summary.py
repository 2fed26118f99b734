from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class OrderSummary(BaseModel):
    """Aggregate figures for the orders created in a date window.

    Every field is numeric; empty windows produce zeros, never None.
    """
    total_transactions: int = Field(default=0, description="Orders in the window")
    total_cash_transactions: int = Field(default=0, description="Orders tendered in cash")
    total_card_transactions: int = Field(default=0, description="Orders tendered by anything other than cash")
    total_gross_sales: Decimal = Field(default=Decimal("0.00"), description="Sum of order totals")
    total_net_sales: Decimal = Field(default=Decimal("0.00"), description="Sum of order subtotals")
    total_cash_sales: Decimal = Field(default=Decimal("0.00"), description="Sum of cash order totals")
    total_card_sales: Decimal = Field(default=Decimal("0.00"), description="Sum of non-cash order totals")
    total_tax: Decimal = Field(default=Decimal("0.00"), description="Sum of tax")
    total_tips: Decimal = Field(default=Decimal("0.00"), description="Sum of tips")
    total_discounts: Decimal = Field(default=Decimal("0.00"), description="Sum of applied discount amounts")
