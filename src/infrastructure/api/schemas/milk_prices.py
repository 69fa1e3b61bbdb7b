from __future__ import annotations

from datetime import date as DtDate
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.domain.models.milk_price import MilkPrice


class MilkPriceResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: UUID
    date: DtDate
    price_per_l: Decimal
    currency: str = "USD"
    buyer_id: UUID | None = None

    def to_domain(self, tenant_id: UUID) -> MilkPrice:
        return MilkPrice(
            id=self.id,
            tenant_id=tenant_id,
            date=self.date,
            price_per_l=self.price_per_l,
            currency=self.currency,
            buyer_id=self.buyer_id,
        )
