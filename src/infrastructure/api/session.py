from __future__ import annotations

from collections.abc import Callable

import httpx
from zoneinfo import ZoneInfo

from src.application.interfaces.unit_of_work import DataSource
from src.config.logging import configure_logging
from src.config.settings import Settings
from src.infrastructure.api.client import ApiClient
from src.utils.datetime_tz import DEFAULT_TZ


def create_api_client(
    settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> ApiClient:
    return ApiClient(
        base_url=settings.api_url,
        token=settings.api_token.get_secret_value() if settings.api_token else None,
        tenant_id=settings.tenant_id,
        tenant_header=settings.tenant_header,
        timeout=settings.http_timeout,
        transport=transport,
    )


class HttpDataSource(DataSource):
    """Read repositories backed by the LecheFacil REST API, one client per context."""

    def __init__(
        self,
        client_factory: Callable[[], ApiClient],
        *,
        page_size: int = 500,
        tz: ZoneInfo = DEFAULT_TZ,
    ) -> None:
        self._client_factory = client_factory
        self._page_size = page_size
        self._tz = tz
        self.client: ApiClient | None = None
        self.animals = None
        self.milk_prices = None
        self.milk_productions = None
        self.milk_deliveries = None
        self.tenant_config = None

    async def __aenter__(self) -> HttpDataSource:
        from src.infrastructure.repos.animals_http import AnimalsHttpRepository
        from src.infrastructure.repos.milk_deliveries_http import MilkDeliveriesHttpRepository
        from src.infrastructure.repos.milk_prices_http import MilkPricesHttpRepository
        from src.infrastructure.repos.milk_productions_http import MilkProductionsHttpRepository
        from src.infrastructure.repos.tenant_config_http import TenantConfigHttpRepository

        self.client = self._client_factory()
        self.animals = AnimalsHttpRepository(self.client)
        self.milk_prices = MilkPricesHttpRepository(self.client)
        self.milk_productions = MilkProductionsHttpRepository(
            self.client, page_size=self._page_size, tz=self._tz
        )
        self.milk_deliveries = MilkDeliveriesHttpRepository(self.client, tz=self._tz)
        self.tenant_config = TenantConfigHttpRepository(self.client)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if not self.client:
            return
        try:
            await self.client.aclose()
        finally:
            self.client = None
            self.animals = None
            self.milk_prices = None
            self.milk_productions = None
            self.milk_deliveries = None
            self.tenant_config = None


def create_data_source(
    settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> HttpDataSource:
    configure_logging(settings.log_level)
    return HttpDataSource(
        lambda: create_api_client(settings, transport=transport),
        page_size=settings.page_size,
        tz=settings.tz,
    )
