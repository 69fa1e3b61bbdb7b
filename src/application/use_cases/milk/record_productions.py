from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID

from zoneinfo import ZoneInfo

from src.application.errors import ConflictError, ValidationError
from src.application.interfaces.unit_of_work import UnitOfWork
from src.domain.models.milk_production import MilkProduction
from src.domain.models.tenant_config import TenantConfig
from src.domain.services.conflicts import ProposedEntry, detect_conflicts
from src.domain.services.pricing import resolve_price_quote
from src.domain.services.units import density_warnings
from src.domain.value_objects.input_unit import InputUnit
from src.domain.value_objects.shift import Shift
from src.utils.datetime_tz import (
    DEFAULT_TZ,
    Clock,
    SystemClock,
    assume_local_tz,
    local_date,
    shift_for,
    shift_start,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BulkItem:
    animal_id: UUID
    input_quantity: Decimal


@dataclass(slots=True)
class RecordProductionsInput:
    items: list[BulkItem]
    # Shared fields for the whole batch
    date: date | None = None
    shift: str | None = None
    # Advanced override (if provided, ignores date)
    date_time: datetime | None = None
    input_unit: str | None = None
    density: Decimal | None = None
    buyer_id: UUID | None = None
    notes: str | None = None


@dataclass(slots=True)
class RecordProductionsResult:
    productions: list[MilkProduction]
    total_volume_l: Decimal
    warnings: list[str] = field(default_factory=list)


def _validate_items(items: list[BulkItem]) -> None:
    if not items:
        raise ValidationError("Debe ingresar la cantidad de al menos un animal")
    seen: set[UUID] = set()
    repeated: list[str] = []
    for item in items:
        if item.animal_id in seen:
            repeated.append(str(item.animal_id))
        seen.add(item.animal_id)
    if repeated:
        raise ValidationError(
            "Un animal aparece más de una vez en el registro",
            details={"animal_ids": repeated},
        )


def resolve_date_time(
    payload_date: date | None,
    payload_shift: str | None,
    payload_date_time: datetime | None,
    clock: Clock,
    tz: ZoneInfo,
) -> tuple[datetime, Shift]:
    """Timestamp and shift for a collection, all in local wall-clock terms."""
    try:
        explicit_shift = Shift.parse(payload_shift) if payload_shift is not None else None
    except ValueError as exc:
        raise ValidationError("invalid shift", details={"shift": payload_shift}) from exc
    if payload_date_time is not None:
        dt = assume_local_tz(payload_date_time, tz)
        return dt, explicit_shift or Shift(shift_for(dt, tz))
    shift = explicit_shift or Shift.AM
    return shift_start(payload_date or clock.today(), shift.value, tz), shift


async def execute(
    uow: UnitOfWork,
    tenant_id: UUID,
    payload: RecordProductionsInput,
    *,
    clock: Clock | None = None,
    tz: ZoneInfo = DEFAULT_TZ,
) -> RecordProductionsResult:
    """Register one collection round for many animals, all or nothing.

    If any animal already has a record for the same local day and shift,
    nothing is added and every conflict is reported at once.
    """
    _validate_items(payload.items)
    clock = clock or SystemClock(tz)
    dt, shift = resolve_date_time(payload.date, payload.shift, payload.date_time, clock, tz)
    the_day = local_date(dt, tz)

    cfg, prices, existing = await asyncio.gather(
        uow.tenant_config.get(tenant_id),
        uow.milk_prices.list(tenant_id, date_from=the_day, date_to=the_day),
        # Include UTC spillover by extending date_to by +1 day
        uow.milk_productions.list(
            tenant_id, date_from=the_day, date_to=the_day + timedelta(days=1)
        ),
    )
    cfg = cfg or TenantConfig(tenant_id=tenant_id)
    density = cfg.density_or_default(payload.density)
    unit = cfg.production_unit_or_default(payload.input_unit)
    buyer_id = cfg.buyer_or_default(payload.buyer_id)
    quote = resolve_price_quote(the_day, buyer_id, prices, cfg)
    if quote is None:
        logger.info("No price known for tenant=%s on %s; amounts left empty", tenant_id, the_day)

    # Conversion errors fail the whole batch before any conflict lookup
    records = [
        MilkProduction.create(
            tenant_id=tenant_id,
            animal_id=item.animal_id,
            buyer_id=buyer_id,
            date_time=dt,
            shift=shift,
            input_unit=unit,
            input_quantity=item.input_quantity,
            density=density,
            price_snapshot=quote.price_per_l if quote else None,
            currency=quote.currency if quote else cfg.default_currency,
            notes=payload.notes,
            tz=tz,
        )
        for item in payload.items
    ]
    warnings = [] if InputUnit.parse(unit).is_volume else density_warnings(density)

    proposed = [
        ProposedEntry(
            animal_id=item.animal_id,
            date=the_day,
            shift=shift,
            input_quantity=item.input_quantity,
        )
        for item in payload.items
    ]
    conflicts = detect_conflicts(proposed, existing, tz=tz)
    if conflicts:
        logger.info(
            "Rejected production batch tenant=%s date=%s shift=%s: %d conflicts",
            tenant_id,
            the_day,
            shift.value,
            len(conflicts),
        )
        raise ConflictError(
            "Algunos animales ya tienen registro para ese día/turno",
            details={"conflicts": [c.as_details() for c in conflicts]},
        )

    created: list[MilkProduction] = []
    try:
        for record in records:
            created.append(await uow.milk_productions.add(record))
        await uow.commit()
    except Exception:
        await uow.rollback()
        raise
    total_volume = sum((r.volume_l for r in created), Decimal("0"))
    logger.info(
        "Recorded %d productions tenant=%s date=%s shift=%s total=%s L",
        len(created),
        tenant_id,
        the_day,
        shift.value,
        total_volume,
    )
    return RecordProductionsResult(
        productions=created, total_volume_l=total_volume, warnings=warnings
    )
