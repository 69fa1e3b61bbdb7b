from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.domain.models.milk_production import MilkProduction
from src.utils.datetime_tz import DEFAULT_TZ, local_date


class MilkProductionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: UUID
    animal_id: UUID | None = None
    buyer_id: UUID | None = None
    date_time: datetime
    # Legacy rows may lack a shift; the core derives it from the local hour
    shift: str | None = None
    input_unit: str = "l"
    input_quantity: Decimal
    density: Decimal = Decimal("1.03")
    volume_l: Decimal | None = None
    price_snapshot: Decimal | None = None
    currency: str = "USD"
    amount: Decimal | None = None
    notes: str | None = None
    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_domain(self, tenant_id: UUID, tz=DEFAULT_TZ) -> MilkProduction:
        extra = {}
        if self.created_at is not None:
            extra["created_at"] = self.created_at
        if self.updated_at is not None:
            extra["updated_at"] = self.updated_at
        return MilkProduction(
            id=self.id,
            tenant_id=tenant_id,
            animal_id=self.animal_id,
            buyer_id=self.buyer_id,
            date_time=self.date_time,
            date=local_date(self.date_time, tz),
            shift=self.shift or "",
            input_unit=self.input_unit,
            input_quantity=self.input_quantity,
            density=self.density,
            volume_l=self.volume_l,
            price_snapshot=self.price_snapshot,
            currency=self.currency,
            amount=self.amount,
            notes=self.notes,
            version=self.version,
            **extra,
        )


class MilkProductionListResponse(BaseModel):
    items: list[MilkProductionResponse]
    total: int
    limit: int
    offset: int
