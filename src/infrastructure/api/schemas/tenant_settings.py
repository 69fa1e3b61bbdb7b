from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.domain.models.tenant_config import TenantConfig


class TenantBillingResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")
    default_buyer_id: UUID | None = None
    default_density: Decimal = Decimal("1.03")
    default_delivery_input_unit: str = "l"
    default_production_input_unit: str = "lb"
    default_currency: str = "USD"
    default_price_per_l: Decimal | None = None

    def to_domain(self, tenant_id: UUID) -> TenantConfig:
        return TenantConfig(
            tenant_id=tenant_id,
            default_buyer_id=self.default_buyer_id,
            default_density=self.default_density,
            default_delivery_input_unit=self.default_delivery_input_unit,
            default_production_input_unit=self.default_production_input_unit,
            default_currency=self.default_currency,
            default_price_per_l=self.default_price_per_l,
        )
