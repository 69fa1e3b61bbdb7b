from __future__ import annotations

from datetime import date
from uuid import UUID

from pydantic import TypeAdapter
from zoneinfo import ZoneInfo

from src.application.interfaces.repositories.milk_deliveries import MilkDeliveriesReader
from src.domain.models.milk_delivery import MilkDelivery
from src.infrastructure.api.client import ApiClient
from src.infrastructure.api.schemas.milk_deliveries import MilkDeliveryResponse
from src.utils.datetime_tz import DEFAULT_TZ

_deliveries = TypeAdapter(list[MilkDeliveryResponse])


class MilkDeliveriesHttpRepository(MilkDeliveriesReader):
    def __init__(self, client: ApiClient, *, tz: ZoneInfo = DEFAULT_TZ) -> None:
        self.client = client
        self.tz = tz

    async def list(
        self,
        tenant_id: UUID,
        *,
        date_from: date | None,
        date_to: date | None,
        buyer_id: UUID | None = None,
    ) -> list[MilkDelivery]:
        data = await self.client.get_json(
            "/milk-deliveries/",
            {"date_from": date_from, "date_to": date_to, "buyer_id": buyer_id},
        )
        return [d.to_domain(tenant_id, self.tz) for d in _deliveries.validate_python(data)]
