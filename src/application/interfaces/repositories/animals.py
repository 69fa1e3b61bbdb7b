from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.animal import Animal


class AnimalsReader(Protocol):
    async def list(
        self,
        tenant_id: UUID,
        *,
        status_codes: list[str] | None = None,
    ) -> list[Animal]: ...
