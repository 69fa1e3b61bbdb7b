from __future__ import annotations

from datetime import date
from uuid import UUID

from zoneinfo import ZoneInfo

from src.application.interfaces.repositories.milk_productions import MilkProductionsReader
from src.domain.models.milk_production import MilkProduction
from src.infrastructure.api.client import ApiClient
from src.infrastructure.api.schemas.milk_productions import (
    MilkProductionListResponse,
    MilkProductionResponse,
)
from src.utils.datetime_tz import DEFAULT_TZ


class MilkProductionsHttpRepository(MilkProductionsReader):
    def __init__(self, client: ApiClient, *, page_size: int = 500, tz: ZoneInfo = DEFAULT_TZ):
        self.client = client
        self.page_size = page_size
        self.tz = tz

    async def list(
        self,
        tenant_id: UUID,
        *,
        date_from: date | None,
        date_to: date | None,
        animal_id: UUID | None = None,
    ) -> list[MilkProduction]:
        items: list[MilkProductionResponse] = []
        offset = 0
        while True:
            data = await self.client.get_json(
                "/milk-productions/",
                {
                    "date_from": date_from,
                    "date_to": date_to,
                    "animal_id": animal_id,
                    "limit": self.page_size,
                    "offset": offset,
                },
            )
            # Older deployments answer with a bare list
            if isinstance(data, list):
                items.extend(MilkProductionResponse.model_validate(it) for it in data)
                break
            page = MilkProductionListResponse.model_validate(data)
            items.extend(page.items)
            offset += len(page.items)
            if not page.items or offset >= page.total:
                break
        return [it.to_domain(tenant_id, self.tz) for it in items]
