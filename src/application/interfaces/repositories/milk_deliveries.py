from __future__ import annotations

from datetime import date
from typing import Protocol
from uuid import UUID

from src.domain.models.milk_delivery import MilkDelivery


class MilkDeliveriesReader(Protocol):
    async def list(
        self,
        tenant_id: UUID,
        *,
        date_from: date | None,
        date_to: date | None,
        buyer_id: UUID | None = None,
    ) -> list[MilkDelivery]: ...


class MilkDeliveriesRepository(MilkDeliveriesReader, Protocol):
    async def add(self, md: MilkDelivery) -> MilkDelivery: ...
