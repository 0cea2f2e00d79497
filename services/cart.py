import logging
from typing import Any

import config
from enums.delivery_method import DeliveryMethod
from exceptions.cart import CartItemNotFoundException, InvalidCartQuantityException
from models.cart import CartState, CartItemDTO, CartValidationResultDTO
from models.menu_item import MenuItemDTO
from models.vendor import VendorDTO
from services.pricing import PricingService

logger = logging.getLogger(__name__)


def customizations_equal(first: dict[str, Any] | None, second: dict[str, Any] | None) -> bool:
    """
    Two customization maps match when they have the same keys and the same
    value per key, regardless of order. None only matches None.
    """
    if first is None or second is None:
        return first is None and second is None
    if first.keys() != second.keys():
        return False
    return all(first[key] == second[key] for key in first)


class CartService:
    """
    Owns the customer's cart for one session.

    Every operation builds a new CartState and swaps it in; callers holding an
    older state object never see it change.
    """

    def __init__(self, state: CartState | None = None):
        self.state = state or CartState()

    def _replace(self, **changes) -> CartState:
        changes.setdefault("error", None)
        self.state = self.state.model_copy(update=changes)
        return self.state

    def _fail(self, exception: Exception) -> None:
        self.state = self.state.model_copy(update={"error": str(exception)})
        raise exception

    def _find_matching(self, product_id: str, customizations: dict[str, Any] | None) -> CartItemDTO | None:
        for item in self.state.items:
            if item.product_id == product_id and customizations_equal(item.customizations, customizations):
                return item
        return None

    def _get_item(self, item_id: str) -> CartItemDTO:
        item = self.state.find_item(item_id)
        if item is None:
            self._fail(CartItemNotFoundException(item_id))
        return item

    def _replace_item(self, updated: CartItemDTO) -> CartState:
        items = [updated if item.id == updated.id else item for item in self.state.items]
        return self._replace(items=items)

    @staticmethod
    def _validate_bounds(name: str, quantity: int, min_quantity: int | None, max_quantity: int | None,
                         product_id: str | None = None) -> None:
        if quantity < 1:
            raise InvalidCartQuantityException(
                "Quantity must be at least 1", product_id, quantity, min_quantity, max_quantity
            )
        if min_quantity is not None and quantity < min_quantity:
            raise InvalidCartQuantityException(
                f"Minimum order quantity for {name} is {min_quantity}",
                product_id, quantity, min_quantity, max_quantity
            )
        if max_quantity is not None and quantity > max_quantity:
            raise InvalidCartQuantityException(
                f"Maximum order quantity for {name} is {max_quantity}",
                product_id, quantity, min_quantity, max_quantity
            )

    def add_item(
        self,
        product: MenuItemDTO,
        vendor: VendorDTO,
        quantity: int = 1,
        customizations: dict[str, Any] | None = None,
        notes: str | None = None
    ) -> CartState:
        """
        Add a product at its base price, merging into a matching line.

        A line matches when it has the same product id and equal customizations;
        its quantity is incremented instead of appending a second line. A
        matching menu-item line goes through update_item_quantity, so its
        order bounds are checked and its tier price re-evaluated.
        """
        if quantity < 1:
            self._fail(InvalidCartQuantityException("Quantity must be at least 1", product.id, quantity))

        existing = self._find_matching(product.id, customizations)
        if existing is not None:
            logger.info(f"Cart: +{quantity} {product.name} (line {existing.id})")
            if existing.is_menu_item:
                return self.update_item_quantity(existing.id, existing.quantity + quantity)
            return self._replace_item(existing.model_copy(update={"quantity": existing.quantity + quantity}))

        item = CartItemDTO(
            product_id=product.id,
            name=product.name,
            description=product.description,
            unit_price=product.base_price,
            quantity=quantity,
            customizations=customizations,
            notes=notes,
            vendor_id=vendor.id,
            vendor_name=vendor.business_name,
            is_available=product.is_available
        )
        logger.info(f"Cart: added {quantity} x {product.name} from vendor {vendor.id}")
        return self._replace(items=[*self.state.items, item])

    def add_menu_item(
        self,
        menu_item: MenuItemDTO,
        vendor_name: str,
        quantity: int = 1,
        customizations: dict[str, Any] | None = None,
        notes: str | None = None
    ) -> CartState:
        """
        Add a menu item, enforcing its order bounds and bulk pricing.

        The requested quantity and the resulting cumulative quantity of the
        line must lie within [min_order_quantity, max_order_quantity]. The
        unit price of the whole line is the tier price at the new cumulative
        quantity.

        Raises:
            InvalidCartQuantityException: bounds violated; the cart items stay unchanged
        """
        existing = self._find_matching(menu_item.id, customizations)
        new_quantity = quantity + (existing.quantity if existing else 0)
        try:
            if quantity < 1:
                raise InvalidCartQuantityException(
                    "Quantity must be at least 1", menu_item.id, quantity,
                    menu_item.min_order_quantity, menu_item.max_order_quantity
                )
            self._validate_bounds(menu_item.name, new_quantity, menu_item.min_order_quantity,
                                  menu_item.max_order_quantity, menu_item.id)
        except InvalidCartQuantityException as e:
            logger.warning(f"Cart: rejected {menu_item.name} x {quantity}: {e.message}")
            self._fail(e)

        unit_price = PricingService.get_unit_price(menu_item.base_price, menu_item.bulk_pricing_tiers, new_quantity)

        if existing is not None:
            logger.info(f"Cart: {menu_item.name} line {existing.id} -> {new_quantity} @ {unit_price}")
            return self._replace_item(existing.model_copy(update={
                "quantity": new_quantity,
                "unit_price": unit_price,
            }))

        item = CartItemDTO(
            product_id=menu_item.id,
            name=menu_item.name,
            description=menu_item.description,
            unit_price=unit_price,
            quantity=new_quantity,
            customizations=customizations,
            notes=notes,
            vendor_id=menu_item.vendor_id,
            vendor_name=vendor_name,
            is_available=menu_item.is_available,
            base_price=menu_item.base_price,
            min_order_quantity=menu_item.min_order_quantity,
            max_order_quantity=menu_item.max_order_quantity,
            bulk_pricing_tiers=menu_item.bulk_pricing_tiers
        )
        logger.info(f"Cart: added {new_quantity} x {menu_item.name} @ {unit_price}")
        return self._replace(items=[*self.state.items, item])

    def update_item_quantity(self, item_id: str, new_quantity: int) -> CartState:
        """
        Set a line's quantity; zero or less removes the line.

        Menu-item lines are checked against their order bounds and re-priced
        at the new quantity.
        """
        item = self._get_item(item_id)

        if new_quantity <= 0:
            return self.remove_item(item_id)

        if not item.is_menu_item:
            logger.info(f"Cart: {item.name} line {item_id} quantity -> {new_quantity}")
            return self._replace_item(item.model_copy(update={"quantity": new_quantity}))

        try:
            self._validate_bounds(item.name, new_quantity, item.min_order_quantity,
                                  item.max_order_quantity, item.product_id)
        except InvalidCartQuantityException as e:
            logger.warning(f"Cart: rejected quantity {new_quantity} for {item.name}: {e.message}")
            self._fail(e)

        unit_price = PricingService.get_unit_price(item.base_price, item.bulk_pricing_tiers, new_quantity)
        logger.info(f"Cart: {item.name} line {item_id} quantity -> {new_quantity} @ {unit_price}")
        return self._replace_item(item.model_copy(update={"quantity": new_quantity, "unit_price": unit_price}))

    def increment(self, item_id: str) -> CartState:
        item = self._get_item(item_id)
        return self.update_item_quantity(item_id, item.quantity + 1)

    def decrement(self, item_id: str) -> CartState:
        item = self._get_item(item_id)
        return self.update_item_quantity(item_id, item.quantity - 1)

    def remove_item(self, item_id: str) -> CartState:
        items = [item for item in self.state.items if item.id != item_id]
        if len(items) == len(self.state.items):
            logger.debug(f"Cart: remove of unknown line {item_id} ignored")
        else:
            logger.info(f"Cart: removed line {item_id}")
        return self._replace(items=items)

    def clear_cart(self) -> CartState:
        logger.info(f"Cart: cleared {len(self.state.items)} lines")
        return self._replace(items=[])

    def clear_vendor_items(self, vendor_id: str) -> CartState:
        items = [item for item in self.state.items if item.vendor_id != vendor_id]
        logger.info(f"Cart: removed {len(self.state.items) - len(items)} lines of vendor {vendor_id}")
        return self._replace(items=items)

    def update_delivery_method(self, method: DeliveryMethod) -> CartState:
        logger.info(f"Cart: delivery method -> {method.value}")
        return self._replace(delivery_method=method)

    def validate_for_checkout(self, has_delivery_address: bool) -> CartValidationResultDTO:
        """
        Collect every reason the cart cannot be checked out yet.

        Args:
            has_delivery_address: Whether the customer picked a delivery address

        Returns:
            CartValidationResultDTO; is_valid is True when errors is empty
        """
        state = self.state
        errors = []
        warnings = []

        if state.is_empty:
            errors.append("Cart is empty")

        if state.has_multiple_vendors:
            errors.append("Cart contains items from multiple vendors. Please checkout separately.")

        if not state.is_empty and state.subtotal < config.MIN_ORDER_AMOUNT:
            errors.append(f"Minimum order amount is {config.CURRENCY_SYMBOL} {config.MIN_ORDER_AMOUNT:.2f}")

        if state.delivery_method.requires_driver and not has_delivery_address:
            errors.append("Delivery address is required")

        if any(not item.is_available for item in state.items):
            errors.append("Some items are no longer available")

        if state.delivery_fee > 0:
            warnings.append(f"Delivery fee of {config.CURRENCY_SYMBOL} {state.delivery_fee:.2f} applies")

        result = CartValidationResultDTO(errors=errors, warnings=warnings)
        logger.info(f"Cart: checkout validation {'passed' if result.is_valid else 'failed: ' + '; '.join(errors)}")
        return result
