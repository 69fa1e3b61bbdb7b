from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID


@dataclass(slots=True)
class TenantConfig:
    """Tenant billing defaults: the process-wide fallback for unit, density and price."""

    tenant_id: UUID
    default_buyer_id: UUID | None = None
    default_density: Decimal = Decimal("1.03")
    default_delivery_input_unit: str = "l"
    default_production_input_unit: str = "lb"
    default_currency: str = "USD"
    default_price_per_l: Decimal | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def density_or_default(self, density: Decimal | None) -> Decimal:
        return density if density is not None else self.default_density

    def production_unit_or_default(self, unit: str | None) -> str:
        return unit if unit is not None else self.default_production_input_unit

    def buyer_or_default(self, buyer_id: UUID | None) -> UUID | None:
        return buyer_id if buyer_id is not None else self.default_buyer_id
