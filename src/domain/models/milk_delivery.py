from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from zoneinfo import ZoneInfo

from src.utils.datetime_tz import DEFAULT_TZ, assume_local_tz, local_date


@dataclass(slots=True)
class MilkDelivery:
    id: UUID
    tenant_id: UUID
    buyer_id: UUID
    date_time: datetime
    date: date
    volume_l: Decimal
    price_snapshot: Decimal | None
    currency: str
    amount: Decimal | None
    notes: str | None = None
    deleted_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = 1

    @classmethod
    def create(
        cls,
        *,
        tenant_id: UUID,
        buyer_id: UUID,
        date_time: datetime,
        volume_l: Decimal,
        price_snapshot: Decimal,
        currency: str,
        amount: Decimal,
        notes: str | None = None,
        tz: ZoneInfo = DEFAULT_TZ,
    ) -> MilkDelivery:
        date_time = assume_local_tz(date_time, tz)
        now = datetime.now(timezone.utc)
        return cls(
            id=uuid4(),
            tenant_id=tenant_id,
            buyer_id=buyer_id,
            date_time=date_time,
            date=local_date(date_time, tz),
            volume_l=volume_l,
            price_snapshot=price_snapshot,
            currency=currency,
            amount=amount,
            notes=notes,
            created_at=now,
            updated_at=now,
            version=1,
        )
