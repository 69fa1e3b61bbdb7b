from __future__ import annotations

from uuid import UUID

from src.application.errors import NotFound
from src.application.interfaces.repositories.tenant_config import TenantConfigReader
from src.domain.models.tenant_config import TenantConfig
from src.infrastructure.api.client import ApiClient
from src.infrastructure.api.schemas.tenant_settings import TenantBillingResponse


class TenantConfigHttpRepository(TenantConfigReader):
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def get(self, tenant_id: UUID) -> TenantConfig | None:
        try:
            data = await self.client.get_json("/settings/billing")
        except NotFound:
            return None
        return TenantBillingResponse.model_validate(data).to_domain(tenant_id)
