from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class CatalogItem(BaseModel):
    """Current catalog data joined onto an order line at read time."""
    name: str = Field(default="", description="Item name, empty if the item no longer exists")
    category_id: str = Field(default="", description="Owning category")
    regular_price: Decimal = Field(default=Decimal("0.00"), description="Current regular price")
    event_price: Decimal = Field(default=Decimal("0.00"), description="Current event price")
    sort_order: int = Field(default=0, description="Display order within the category")
    available: bool = Field(default=False, description="Whether the item is currently sellable")


class CatalogOption(BaseModel):
    """Current catalog data joined onto a line option at read time."""
    modifier_id: str = Field(default="", description="Owning modifier")
    name: str = Field(default="", description="Option name, empty if the option no longer exists")
    price: Decimal = Field(default=Decimal("0.00"), description="Current option price")
    available: bool = Field(default=False, description="Whether the option is currently sellable")
    sort_order: int = Field(default=0, description="Display order within the modifier")


class CatalogDiscount(BaseModel):
    """Current catalog data joined onto an applied discount at read time."""
    name: str = Field(default="", description="Discount name, empty if the discount no longer exists")
    is_percentage: bool = Field(default=False, description="Whether amount is a percentage")
    amount: Decimal = Field(default=Decimal("0.00"), description="Current percentage or flat value")
    available: bool = Field(default=False, description="Whether the discount is currently offered")
    sort_order: int = Field(default=0, description="Display order")
