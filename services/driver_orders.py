import logging
from typing import Any, Awaitable, Callable

from exceptions.base import GigaEatsException
from models.async_value import AsyncValue
from models.driver import DriverEarningsDTO
from models.order import DriverOrderDTO
from repositories.driver_order import DriverOrderRepository
from utils.error_handler import handle_service_error
from utils.request_generation import RequestGenerationTracker

logger = logging.getLogger(__name__)

AVAILABLE_ORDERS = "available_orders"
ACTIVE_ORDER = "active_order"
ORDER_HISTORY = "order_history"
EARNINGS = "earnings"


class DriverOrdersState:
    """
    In-memory state behind the driver's order screens.

    Each list is an AsyncValue. A refresh supersedes any refresh of the same
    list still in flight; the superseded response is dropped so an older
    result can never overwrite a newer one.
    """

    def __init__(self, repository: DriverOrderRepository, tracker: RequestGenerationTracker | None = None):
        self.repository = repository
        self.tracker = tracker or RequestGenerationTracker()
        self.values: dict[str, AsyncValue] = {
            AVAILABLE_ORDERS: AsyncValue[list[DriverOrderDTO]](),
            ACTIVE_ORDER: AsyncValue[DriverOrderDTO](),
            ORDER_HISTORY: AsyncValue[list[DriverOrderDTO]](),
            EARNINGS: AsyncValue[DriverEarningsDTO](),
        }
        self._last_requests: dict[str, Callable[[], Awaitable[Any]]] = {}

    @property
    def available_orders(self) -> AsyncValue[list[DriverOrderDTO]]:
        return self.values[AVAILABLE_ORDERS]

    @property
    def active_order(self) -> AsyncValue[DriverOrderDTO]:
        return self.values[ACTIVE_ORDER]

    @property
    def order_history(self) -> AsyncValue[list[DriverOrderDTO]]:
        return self.values[ORDER_HISTORY]

    @property
    def earnings(self) -> AsyncValue[DriverEarningsDTO]:
        return self.values[EARNINGS]

    async def _load(self, key: str, request: Callable[[], Awaitable[Any]]) -> AsyncValue:
        self._last_requests[key] = request
        self.values[key] = AsyncValue.loading()
        try:
            is_current, result = await self.tracker.run(key, request)
        except GigaEatsException as e:
            self.values[key] = AsyncValue.failure(handle_service_error(e))
            return self.values[key]

        if is_current:
            self.values[key] = AsyncValue.data(result)
        return self.values[key]

    async def refresh_available_orders(self) -> AsyncValue:
        return await self._load(AVAILABLE_ORDERS, self.repository.get_available_orders)

    async def refresh_active_order(self) -> AsyncValue:
        return await self._load(ACTIVE_ORDER, self.repository.get_active_order)

    async def refresh_order_history(self, limit: int = DriverOrderRepository.DEFAULT_HISTORY_LIMIT) -> AsyncValue:
        return await self._load(ORDER_HISTORY, lambda: self.repository.get_order_history(limit))

    async def refresh_earnings(self, start_date=None, end_date=None) -> AsyncValue:
        return await self._load(EARNINGS, lambda: self.repository.get_driver_earnings(start_date, end_date))

    async def retry(self, key: str) -> AsyncValue:
        """Manual retry entry point for an error rendering."""
        request = self._last_requests.get(key)
        if request is None:
            raise KeyError(f"Nothing to retry for {key}")
        logger.info(f"Retrying {key}")
        return await self._load(key, request)

    def dispose(self) -> None:
        for key in self.values:
            self.tracker.cancel(key)
