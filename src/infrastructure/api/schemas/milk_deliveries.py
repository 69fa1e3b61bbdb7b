from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.domain.models.milk_delivery import MilkDelivery
from src.utils.datetime_tz import DEFAULT_TZ, local_date


class MilkDeliveryResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: UUID
    date_time: datetime
    volume_l: Decimal
    buyer_id: UUID
    price_snapshot: Decimal | None = None
    currency: str = "USD"
    amount: Decimal | None = None
    notes: str | None = None
    version: int = 1

    def to_domain(self, tenant_id: UUID, tz=DEFAULT_TZ) -> MilkDelivery:
        return MilkDelivery(
            id=self.id,
            tenant_id=tenant_id,
            buyer_id=self.buyer_id,
            date_time=self.date_time,
            date=local_date(self.date_time, tz),
            volume_l=self.volume_l,
            price_snapshot=self.price_snapshot,
            currency=self.currency,
            amount=self.amount,
            notes=self.notes,
            version=self.version,
        )
