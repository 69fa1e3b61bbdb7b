from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID, uuid4

from zoneinfo import ZoneInfo

from src.domain.services.units import quantize_liters, to_liters
from src.domain.value_objects.input_unit import InputUnit
from src.domain.value_objects.shift import Shift
from src.utils.datetime_tz import DEFAULT_TZ, assume_local_tz, local_date


def compute_amount(volume_l: Decimal, price: Decimal | None) -> Decimal | None:
    if price is None:
        return None
    return (volume_l * price).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass(slots=True)
class MilkProduction:
    id: UUID
    tenant_id: UUID
    animal_id: UUID | None
    buyer_id: UUID | None
    date_time: datetime
    date: date
    shift: str
    input_unit: str  # 'kg' | 'lb' | 'l'
    input_quantity: Decimal
    density: Decimal  # e.g., 1.03
    volume_l: Decimal | None
    price_snapshot: Decimal | None = None
    currency: str = "USD"
    amount: Decimal | None = None
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
        animal_id: UUID | None,
        buyer_id: UUID | None,
        date_time: datetime,
        shift: Shift | str,
        input_unit: InputUnit | str,
        input_quantity: Decimal,
        density: Decimal,
        price_snapshot: Decimal | None = None,
        currency: str = "USD",
        notes: str | None = None,
        tz: ZoneInfo = DEFAULT_TZ,
    ) -> MilkProduction:
        # volume_l is fixed here from the entered measurement
        unit = InputUnit.parse(input_unit)
        volume_l = quantize_liters(to_liters(input_quantity, unit, density))
        date_time = assume_local_tz(date_time, tz)
        now = datetime.now(timezone.utc)
        return cls(
            id=uuid4(),
            tenant_id=tenant_id,
            animal_id=animal_id,
            buyer_id=buyer_id,
            date_time=date_time,
            date=local_date(date_time, tz),
            shift=Shift.parse(shift).value,
            input_unit=unit.value,
            input_quantity=input_quantity,
            density=density,
            volume_l=volume_l,
            price_snapshot=price_snapshot,
            currency=currency,
            amount=compute_amount(volume_l, price_snapshot),
            notes=notes,
            created_at=now,
            updated_at=now,
            version=1,
        )
