from __future__ import annotations

from datetime import date
from uuid import UUID

from pydantic import TypeAdapter

from src.application.interfaces.repositories.milk_prices import MilkPricesReader
from src.domain.models.milk_price import MilkPrice
from src.infrastructure.api.client import ApiClient
from src.infrastructure.api.schemas.milk_prices import MilkPriceResponse

_prices = TypeAdapter(list[MilkPriceResponse])


class MilkPricesHttpRepository(MilkPricesReader):
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def list(
        self,
        tenant_id: UUID,
        *,
        date_from: date | None,
        date_to: date | None,
        buyer_id: UUID | None = None,
    ) -> list[MilkPrice]:
        # Without buyer_id the API returns general and buyer-specific prices alike
        data = await self.client.get_json(
            "/milk-prices/",
            {"date_from": date_from, "date_to": date_to, "buyer_id": buyer_id},
        )
        return [p.to_domain(tenant_id) for p in _prices.validate_python(data)]
