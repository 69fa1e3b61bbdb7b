from __future__ import annotations

from datetime import date
from typing import Protocol
from uuid import UUID

from src.domain.models.milk_production import MilkProduction


class MilkProductionsReader(Protocol):
    async def list(
        self,
        tenant_id: UUID,
        *,
        date_from: date | None,
        date_to: date | None,
        animal_id: UUID | None = None,
    ) -> list[MilkProduction]: ...


class MilkProductionsRepository(MilkProductionsReader, Protocol):
    async def get(self, tenant_id: UUID, production_id: UUID) -> MilkProduction | None: ...
    async def add(self, mp: MilkProduction) -> MilkProduction: ...
    # Conditional update: returns None when the stored version differs
    async def update(
        self,
        tenant_id: UUID,
        production_id: UUID,
        data: dict,
        expected_version: int,
    ) -> MilkProduction | None: ...
