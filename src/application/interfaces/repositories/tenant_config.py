from __future__ import annotations

from typing import Protocol
from uuid import UUID

from src.domain.models.tenant_config import TenantConfig


class TenantConfigReader(Protocol):
    async def get(self, tenant_id: UUID) -> TenantConfig | None: ...
