# The cart is an in-memory container for the customer's working selection.
# It is never persisted directly; checkout materializes it into an order.
#
# Every mutation in services/cart.py replaces the CartState instead of
# editing it, so derived values below are always recomputed from items.
from collections import OrderedDict
from typing import Any

from pydantic import BaseModel, Field

from enums.delivery_method import DeliveryMethod
from models.base import generate_uuid
from models.menu_item import BulkPricingTierDTO
from services.delivery_fee import calculate_delivery_fee

SST_RATE = 0.06


class CartItemDTO(BaseModel):
    id: str = Field(default_factory=generate_uuid)
    product_id: str
    name: str
    description: str | None = None
    unit_price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    customizations: dict[str, Any] | None = None
    notes: str | None = None
    vendor_id: str
    vendor_name: str
    is_available: bool = True

    # Present only for lines added from a menu item; used to re-price on quantity change
    base_price: float | None = None
    min_order_quantity: int | None = None
    max_order_quantity: int | None = None
    bulk_pricing_tiers: list[BulkPricingTierDTO] = Field(default_factory=list)

    @property
    def total_price(self) -> float:
        return self.unit_price * self.quantity

    @property
    def is_menu_item(self) -> bool:
        return self.base_price is not None


class CartState(BaseModel):
    items: list[CartItemDTO] = Field(default_factory=list)
    delivery_method: DeliveryMethod = DeliveryMethod.OWN_FLEET
    is_loading: bool = False
    error: str | None = None

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> float:
        return sum(item.total_price for item in self.items)

    @property
    def tax_amount(self) -> float:
        return self.subtotal * SST_RATE

    @property
    def delivery_fee(self) -> float:
        return calculate_delivery_fee(self.delivery_method, self.subtotal)

    @property
    def total_amount(self) -> float:
        return self.subtotal + self.tax_amount + self.delivery_fee

    @property
    def items_by_vendor(self) -> "OrderedDict[str, list[CartItemDTO]]":
        grouped: OrderedDict[str, list[CartItemDTO]] = OrderedDict()
        for item in self.items:
            grouped.setdefault(item.vendor_id, []).append(item)
        return grouped

    @property
    def has_multiple_vendors(self) -> bool:
        return len(self.items_by_vendor) > 1

    def find_item(self, item_id: str) -> CartItemDTO | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class CartValidationResultDTO(BaseModel):
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0
