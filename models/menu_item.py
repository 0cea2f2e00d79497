from pydantic import BaseModel, Field


class BulkPricingTierDTO(BaseModel):
    """
    Bulk pricing tier of a menu item.

    Each menu item can have multiple tiers based on quantity:
    - Example: 1-9 units: RM 12.00, 10-49 units: RM 11.00, 50+ units: RM 10.00

    The tier with the highest min_quantity reached by the ordered quantity
    sets the unit price of every unit on the line.
    """
    min_quantity: int = Field(gt=0)
    price_per_unit: float = Field(gt=0)


class MenuItemDTO(BaseModel):
    """Read-only menu item as published by a vendor."""
    id: str
    vendor_id: str
    name: str
    description: str | None = None
    base_price: float = Field(ge=0)
    min_order_quantity: int = Field(default=1, ge=1)
    max_order_quantity: int | None = None
    is_available: bool = True
    bulk_pricing_tiers: list[BulkPricingTierDTO] = Field(default_factory=list)


class TierPricingResultDTO(BaseModel):
    """Result of a tiered price lookup for one line."""
    quantity: int
    unit_price: float
    total: float
    applied_tier: BulkPricingTierDTO | None = None
