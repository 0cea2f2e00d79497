import logging

import config
from models.menu_item import BulkPricingTierDTO, TierPricingResultDTO

logger = logging.getLogger(__name__)


class PricingService:
    """Service for bulk (tiered) pricing of menu items."""

    @staticmethod
    def calculate_tier_price(
        base_price: float,
        tiers: list[BulkPricingTierDTO],
        quantity: int
    ) -> TierPricingResultDTO:
        """
        Calculate price using classic tiered pricing.

        Classic tiered pricing means all units receive the unit price of the
        highest tier reached by the quantity.

        Algorithm:
        1. Sort tiers by min_quantity ascending
        2. Find the highest tier where min_quantity <= quantity
        3. Apply that tier's price_per_unit to ALL units
        4. No tier reached -> base price

        Example with 24 units, base RM 12 and tiers [10->RM 11, 20->RM 10, 50->RM 9]:
            - Quantity 24 reaches tier "20->RM 10" (but not tier "50->RM 9")
            - All 24 units: 24 x RM 10 = RM 240

        Args:
            base_price: Menu item's regular unit price
            tiers: Bulk pricing tiers (any order)
            quantity: Number of units on the line

        Returns:
            TierPricingResultDTO with unit price, total and the tier applied
        """
        applicable_tier = None
        for tier in sorted(tiers, key=lambda t: t.min_quantity):
            if tier.min_quantity <= quantity:
                applicable_tier = tier
            else:
                # Tiers are sorted ascending, so we can stop here
                break

        unit_price = applicable_tier.price_per_unit if applicable_tier else base_price
        logger.debug(
            f"Tier price for quantity {quantity}: {unit_price} "
            f"({'tier ' + str(applicable_tier.min_quantity) + '+' if applicable_tier else 'base price'})"
        )
        return TierPricingResultDTO(
            quantity=quantity,
            unit_price=unit_price,
            total=unit_price * quantity,
            applied_tier=applicable_tier
        )

    @staticmethod
    def get_unit_price(base_price: float, tiers: list[BulkPricingTierDTO], quantity: int) -> float:
        return PricingService.calculate_tier_price(base_price, tiers, quantity).unit_price

    @staticmethod
    def format_tier_breakdown(pricing_result: TierPricingResultDTO) -> str:
        """
        Format a pricing result for display.

        Example output:
            24 × RM 10.00 = RM 240.00
        """
        symbol = config.CURRENCY_SYMBOL
        return (f"{pricing_result.quantity} × {symbol} {pricing_result.unit_price:.2f} "
                f"= {symbol} {pricing_result.total:.2f}")

    @staticmethod
    def format_available_tiers(
        tiers: list[BulkPricingTierDTO],
        unit: str = "pcs."
    ) -> str | None:
        """
        Format available tiers as a price list for display.

        Example output:
            Bulk Pricing:
                1-9 pcs.:  RM  12.00
              10-49 pcs.:  RM  11.00
                50+ pcs.:  RM  10.00

        Args:
            tiers: Bulk pricing tiers of a menu item
            unit: Item unit (e.g., "pcs.", "trays")

        Returns:
            Formatted string with available tiers, or None if no tiers exist
        """
        if not tiers:
            return None

        # Deduplicate by min_quantity (keep first occurrence)
        seen_quantities = set()
        sorted_tiers = []
        for tier in sorted(tiers, key=lambda t: t.min_quantity):
            if tier.min_quantity not in seen_quantities:
                seen_quantities.add(tier.min_quantity)
                sorted_tiers.append(tier)

        symbol = config.CURRENCY_SYMBOL
        lines = ["Bulk Pricing:"]

        for i, tier in enumerate(sorted_tiers):
            if i < len(sorted_tiers) - 1:
                # Has next tier - show range
                next_qty = sorted_tiers[i + 1].min_quantity
                range_str = f"{tier.min_quantity}-{next_qty - 1} {unit}"
            else:
                # Last tier - show "X+"
                range_str = f"{tier.min_quantity}+ {unit}"

            lines.append(f"  {range_str:>12}: {symbol} {tier.price_per_unit:>6.2f}")

        return "\n".join(lines)
