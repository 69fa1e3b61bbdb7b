from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID

from zoneinfo import ZoneInfo

from src.application.errors import ConflictError, NotFound, StaleVersion, ValidationError
from src.application.interfaces.unit_of_work import UnitOfWork
from src.domain.models.milk_production import MilkProduction, compute_amount
from src.domain.models.tenant_config import TenantConfig
from src.domain.services.conflicts import ProposedEntry, detect_conflicts, record_shift
from src.domain.services.pricing import resolve_price_quote
from src.domain.services.units import quantize_liters, to_liters
from src.domain.value_objects.input_unit import InputUnit
from src.domain.value_objects.shift import Shift
from src.utils.datetime_tz import (
    DEFAULT_TZ,
    assume_local_tz,
    local_date,
    shift_for,
    shift_start,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UpdateProductionInput:
    # Version the caller last saw
    version: int
    # You may update via date/shift or date_time directly
    date: date | None = None
    shift: str | None = None
    date_time: datetime | None = None
    animal_id: UUID | None = None
    buyer_id: UUID | None = None
    input_unit: str | None = None
    input_quantity: Decimal | None = None
    density: Decimal | None = None
    notes: str | None = None


async def execute(
    uow: UnitOfWork,
    tenant_id: UUID,
    production_id: UUID,
    payload: UpdateProductionInput,
    *,
    tz: ZoneInfo = DEFAULT_TZ,
) -> MilkProduction:
    if payload.version < 1:
        raise ValidationError("Invalid version value")
    existing = await uow.milk_productions.get(tenant_id, production_id)
    if existing is None or existing.deleted_at is not None:
        raise NotFound("Production not found")
    if existing.version != payload.version:
        raise StaleVersion(
            "El registro fue modificado por otro usuario",
            details={"expected_version": payload.version, "current_version": existing.version},
        )

    updates: dict = {}
    try:
        new_shift = Shift.parse(payload.shift) if payload.shift is not None else None
    except ValueError as exc:
        raise ValidationError("invalid shift", details={"shift": payload.shift}) from exc
    if payload.date_time is not None:
        updates["date_time"] = assume_local_tz(payload.date_time, tz)
    elif payload.date is not None or new_shift is not None:
        d = payload.date or local_date(existing.date_time, tz)
        sh = new_shift or record_shift(existing, tz)
        updates["date_time"] = shift_start(d, sh.value, tz)
    if "date_time" in updates:
        updates["date"] = local_date(updates["date_time"], tz)
    if new_shift is not None:
        updates["shift"] = new_shift.value
    elif "date_time" in updates:
        updates["shift"] = shift_for(updates["date_time"], tz)
    for field_name in ("animal_id", "buyer_id", "input_quantity", "density", "notes"):
        value = getattr(payload, field_name)
        if value is not None:
            updates[field_name] = value
    if payload.input_unit is not None:
        try:
            updates["input_unit"] = InputUnit.parse(payload.input_unit).value
        except ValueError as exc:
            raise ValidationError("invalid unit", details={"unit": payload.input_unit}) from exc
    if not updates:
        return existing

    # Volume only moves when the measurement itself is amended
    if {"input_unit", "input_quantity", "density"} & updates.keys():
        updates["volume_l"] = quantize_liters(
            to_liters(
                updates.get("input_quantity", existing.input_quantity),
                updates.get("input_unit", existing.input_unit),
                updates.get("density", existing.density),
            )
        )

    if {"date_time", "shift", "animal_id"} & updates.keys():
        dt = updates.get("date_time", existing.date_time)
        the_day = local_date(dt, tz)
        same_day = await uow.milk_productions.list(
            tenant_id,
            date_from=the_day,
            date_to=the_day + timedelta(days=1),
            animal_id=updates.get("animal_id", existing.animal_id),
        )
        others = [r for r in same_day if r.id != existing.id]
        conflicts = detect_conflicts(
            [
                ProposedEntry(
                    animal_id=updates.get("animal_id", existing.animal_id),
                    date=the_day,
                    shift=(
                        Shift.parse(updates["shift"])
                        if "shift" in updates
                        else record_shift(existing, tz)
                    ),
                    input_quantity=updates.get("input_quantity", existing.input_quantity),
                )
            ],
            others,
            tz=tz,
        )
        if conflicts:
            raise ConflictError(
                "Ya existe un registro para este animal en ese día/turno",
                details={"conflicts": [c.as_details() for c in conflicts]},
            )

    # A new date or buyer is a different price context; otherwise the snapshot stays frozen
    price = existing.price_snapshot
    if {"date_time", "buyer_id"} & updates.keys():
        the_day = local_date(updates.get("date_time", existing.date_time), tz)
        bid = updates.get("buyer_id", existing.buyer_id)
        prices = await uow.milk_prices.list(tenant_id, date_from=the_day, date_to=the_day)
        cfg = await uow.tenant_config.get(tenant_id) or TenantConfig(tenant_id=tenant_id)
        quote = resolve_price_quote(the_day, bid, prices, cfg)
        if quote is not None:
            price = quote.price_per_l
            updates["price_snapshot"] = quote.price_per_l
            updates["currency"] = quote.currency
        else:
            # The old day's price does not carry over
            price = None
            updates["price_snapshot"] = None
    if {"volume_l", "price_snapshot"} & updates.keys():
        updates["amount"] = compute_amount(updates.get("volume_l", existing.volume_l), price)

    updated = await uow.milk_productions.update(
        tenant_id, production_id, data=updates, expected_version=payload.version
    )
    if updated is None:
        await uow.rollback()
        raise StaleVersion("El registro fue modificado por otro usuario")
    await uow.commit()
    logger.info(
        "Amended production id=%s fields=%s version=%d",
        production_id,
        sorted(updates.keys()),
        updated.version,
    )
    return updated
