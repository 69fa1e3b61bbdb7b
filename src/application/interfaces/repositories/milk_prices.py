from __future__ import annotations

from datetime import date
from typing import Protocol
from uuid import UUID

from src.domain.models.milk_price import MilkPrice


class MilkPricesReader(Protocol):
    async def list(
        self,
        tenant_id: UUID,
        *,
        date_from: date | None,
        date_to: date | None,
        buyer_id: UUID | None = None,
    ) -> list[MilkPrice]: ...
