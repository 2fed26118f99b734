from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, List, Literal, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, model_validator

from ...errors import ValidationError
from .catalog import CatalogDiscount, CatalogItem, CatalogOption

TenderMethod = Literal["cash", "card"]
OrderStatus = Literal["created", "refunded"]

# Upper bounds keep stored cents, and their sums, inside a SQLite INTEGER.
MAX_AMOUNT = Decimal("9999999999.99")
MAX_QUANTITY = 1_000_000

# Fixed-point amount with at most two decimal places, never negative.
Money = Annotated[Decimal, Field(ge=0, le=MAX_AMOUNT, decimal_places=2)]


class LineOption(BaseModel):
    """Option selected on an order line, priced at sale time."""
    line_option_id: Optional[str] = Field(default=None, description="Generated option row identifier")
    line_id: Optional[str] = Field(default=None, description="Owning order line")
    option_id: str = Field(min_length=1, description="Catalog option reference")
    option: CatalogOption = Field(default_factory=CatalogOption, description="Catalog data joined at read time")
    price: Money = Field(description="Option price captured at sale time")


class OrderLine(BaseModel):
    """One catalog item on an order, priced at sale time."""
    line_id: Optional[str] = Field(default=None, description="Generated line identifier")
    order_id: Optional[str] = Field(default=None, description="Owning order")
    item_id: str = Field(min_length=1, description="Catalog item reference")
    item: CatalogItem = Field(default_factory=CatalogItem, description="Catalog data joined at read time")
    quantity: int = Field(gt=0, le=MAX_QUANTITY, description="Units sold")
    unit_price: Money = Field(description="Unit price captured at sale time")
    line_total: Money = Field(description="Line total captured at sale time")
    options: List[LineOption] = Field(default_factory=list, description="Selected options")


class AppliedDiscount(BaseModel):
    """Discount applied to an order with the amount actually taken off."""
    applied_discount_id: Optional[str] = Field(default=None, description="Generated discount row identifier")
    order_id: Optional[str] = Field(default=None, description="Owning order")
    discount_id: str = Field(min_length=1, description="Catalog discount reference")
    discount: CatalogDiscount = Field(default_factory=CatalogDiscount, description="Catalog data joined at read time")
    amount: Money = Field(description="Amount applied at sale time")


class Order(BaseModel):
    """Order aggregate root: header, lines with their options, and applied discounts.

    Generated fields (identifiers, display number, status, timestamp) are
    left empty by the caller and filled in by the order store.
    """
    order_id: Optional[str] = Field(default=None, description="Generated unique order identifier")
    staff_id: str = Field(min_length=1, description="Staff member who rang up the sale")
    display_number: Optional[int] = Field(default=None, description="Daily display sequence number")
    tender_method: TenderMethod = Field(description="Payment channel")
    subtotal: Money = Field(description="Sum of line totals")
    tax: Money = Field(description="Tax amount")
    tip: Money = Field(default=Decimal("0.00"), description="Tip amount")
    card_fee: Money = Field(default=Decimal("0.00"), description="Card surcharge")
    total: Money = Field(description="subtotal + tax + tip + card_fee - discounts")
    tendered_amount: Optional[Money] = Field(default=None, description="Cash handed over (cash only)")
    change_amount: Optional[Money] = Field(default=None, description="Change returned (cash only)")
    status: OrderStatus = Field(default="created", description="created or refunded")
    created_at: Optional[datetime] = Field(default=None, description="Stamped by the store at persist time")
    lines: List[OrderLine] = Field(default_factory=list, description="Order lines")
    discounts: List[AppliedDiscount] = Field(default_factory=list, description="Applied discounts")

    @model_validator(mode="after")
    def _cash_fields_only_on_cash(self) -> "Order":
        if self.tender_method != "cash" and (self.tendered_amount is not None or self.change_amount is not None):
            raise ValueError("tendered_amount and change_amount are only valid for cash orders")
        return self

    @property
    def is_refunded(self) -> bool:
        return self.status == "refunded"


def parse_order(payload: Mapping[str, Any]) -> Order:
    """Validate a caller payload into an Order.

    Raises:
        ValidationError: If required fields are missing or malformed.
    """
    try:
        return Order.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid order: {e}") from e
