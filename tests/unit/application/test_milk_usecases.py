from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from conftest import FixedClock, StubUnitOfWork, local_dt, make_production
from src.application.errors import ConflictError, NotFound, StaleVersion, ValidationError
from src.application.use_cases.milk import (
    record_delivery,
    record_production,
    record_productions,
    update_production,
)
from src.domain.models.milk_delivery import MilkDelivery
from src.domain.models.milk_price import MilkPrice

DAY = date(2024, 3, 1)


def _batch(*pairs, **kwargs):
    items = [record_productions.BulkItem(a, Decimal(q)) for a, q in pairs]
    return record_productions.RecordProductionsInput(items=items, **kwargs)


@pytest.mark.asyncio
async def test_bulk_records_every_animal_with_tenant_defaults(tenant_id, tenant_config):
    uow = StubUnitOfWork(config=tenant_config)
    a1, a2 = uuid4(), uuid4()
    result = await record_productions.execute(
        uow, tenant_id, _batch((a1, "33.069"), (a2, "25"), date=DAY, shift="am")
    )
    assert uow.commits == 1
    assert len(uow.milk_productions.items) == 2
    first, second = result.productions
    assert first.input_unit == "lb"
    assert first.density == Decimal("1.03")
    assert first.shift == "AM"
    assert first.date == DAY
    assert first.date_time == datetime(2024, 3, 1, 6, 0, tzinfo=first.date_time.tzinfo)
    assert second.volume_l == Decimal("11.010")
    # Tenant default price is frozen on each record
    assert first.price_snapshot == Decimal("0.40")
    assert second.amount == Decimal("4.40")
    assert result.total_volume_l == first.volume_l + second.volume_l
    assert result.warnings == []


@pytest.mark.asyncio
async def test_bulk_prefers_buyer_price_of_the_day(tenant_id, tenant_config):
    buyer_id = uuid4()
    prices = [
        MilkPrice.create(tenant_id=tenant_id, date=DAY, price_per_l=Decimal("0.45")),
        MilkPrice.create(
            tenant_id=tenant_id, date=DAY, price_per_l=Decimal("0.52"), buyer_id=buyer_id
        ),
    ]
    uow = StubUnitOfWork(config=tenant_config, prices=prices)
    result = await record_productions.execute(
        uow,
        tenant_id,
        _batch((uuid4(), "10"), date=DAY, shift="PM", input_unit="l", buyer_id=buyer_id),
    )
    record = result.productions[0]
    assert record.price_snapshot == Decimal("0.52")
    assert record.amount == Decimal("5.20")
    assert record.date_time.hour == 18


@pytest.mark.asyncio
async def test_bulk_is_all_or_nothing_on_conflict(tenant_id, tenant_config):
    a1, a2 = uuid4(), uuid4()
    existing = make_production(tenant_id, a1, local_dt(2024, 3, 1, 6), "15")
    uow = StubUnitOfWork(config=tenant_config, productions=[existing])
    with pytest.raises(ConflictError) as exc_info:
        await record_productions.execute(
            uow, tenant_id, _batch((a1, "20"), (a2, "18"), date=DAY, shift="AM")
        )
    conflicts = exc_info.value.details["conflicts"]
    assert [c["animal_id"] for c in conflicts] == [str(a1)]
    assert conflicts[0]["existing_id"] == str(existing.id)
    assert uow.milk_productions.items == [existing]
    assert uow.commits == 0


@pytest.mark.asyncio
async def test_bulk_sees_evening_records_stored_on_next_utc_day(tenant_id, tenant_config):
    a1 = uuid4()
    evening = make_production(
        tenant_id, a1, datetime(2024, 3, 2, 1, 0, tzinfo=timezone.utc), "8", shift="PM"
    )
    uow = StubUnitOfWork(config=tenant_config, productions=[evening])
    with pytest.raises(ConflictError):
        await record_productions.execute(uow, tenant_id, _batch((a1, "9"), date=DAY, shift="PM"))


@pytest.mark.asyncio
async def test_bulk_uses_clock_when_date_missing(tenant_id, tenant_config):
    uow = StubUnitOfWork(config=tenant_config)
    clock = FixedClock(local_dt(2024, 3, 5, 17, 30))
    result = await record_productions.execute(
        uow, tenant_id, _batch((uuid4(), "10"), shift="PM"), clock=clock
    )
    assert result.productions[0].date == date(2024, 3, 5)


@pytest.mark.asyncio
async def test_bulk_date_time_override_derives_shift(tenant_id, tenant_config):
    uow = StubUnitOfWork(config=tenant_config)
    result = await record_productions.execute(
        uow, tenant_id, _batch((uuid4(), "10"), date_time=datetime(2024, 3, 1, 15, 45))
    )
    record = result.productions[0]
    assert record.shift == "PM"
    assert record.date == DAY
    assert record.date_time.tzinfo is not None


@pytest.mark.asyncio
async def test_bulk_rejects_empty_and_repeated_animals(tenant_id, tenant_config):
    uow = StubUnitOfWork(config=tenant_config)
    with pytest.raises(ValidationError):
        await record_productions.execute(uow, tenant_id, _batch(date=DAY))
    a1 = uuid4()
    with pytest.raises(ValidationError):
        await record_productions.execute(uow, tenant_id, _batch((a1, "1"), (a1, "2"), date=DAY))
    assert uow.milk_productions.items == []


@pytest.mark.asyncio
async def test_bulk_rejects_invalid_measurements(tenant_id, tenant_config):
    uow = StubUnitOfWork(config=tenant_config)
    with pytest.raises(ValidationError):
        await record_productions.execute(uow, tenant_id, _batch((uuid4(), "-3"), date=DAY))
    with pytest.raises(ValidationError):
        await record_productions.execute(
            uow, tenant_id, _batch((uuid4(), "3"), date=DAY, input_unit="kg", density=Decimal("0"))
        )
    with pytest.raises(ValidationError):
        await record_productions.execute(uow, tenant_id, _batch((uuid4(), "3"), shift="noon"))
    assert uow.commits == 0


@pytest.mark.asyncio
async def test_bulk_warns_on_unusual_density(tenant_id, tenant_config):
    uow = StubUnitOfWork(config=tenant_config)
    result = await record_productions.execute(
        uow, tenant_id, _batch((uuid4(), "10"), date=DAY, density=Decimal("1.10"))
    )
    assert len(result.warnings) == 1


@pytest.mark.asyncio
async def test_bulk_without_any_price_leaves_amount_empty(tenant_id):
    uow = StubUnitOfWork()
    result = await record_productions.execute(
        uow, tenant_id, _batch((uuid4(), "10"), date=DAY, input_unit="l")
    )
    record = result.productions[0]
    assert record.price_snapshot is None
    assert record.amount is None
    assert record.volume_l == Decimal("10.000")


@pytest.mark.asyncio
async def test_single_production_reports_conflict_message(tenant_id, tenant_config):
    a1 = uuid4()
    uow = StubUnitOfWork(config=tenant_config)
    payload = record_production.RecordProductionInput(
        animal_id=a1, input_quantity=Decimal("20"), date=DAY, shift="AM"
    )
    created = await record_production.execute(uow, tenant_id, payload)
    assert created.animal_id == a1
    with pytest.raises(ConflictError) as exc_info:
        await record_production.execute(uow, tenant_id, payload)
    assert "mismo día y turno" in exc_info.value.message
    assert len(uow.milk_productions.items) == 1


@pytest.mark.asyncio
async def test_update_recomputes_volume_and_amount(tenant_id, tenant_config):
    record = make_production(
        tenant_id, uuid4(), local_dt(2024, 3, 1, 6), "10", price_snapshot="0.50"
    )
    uow = StubUnitOfWork(config=tenant_config, productions=[record])
    updated = await update_production.execute(
        uow,
        tenant_id,
        record.id,
        update_production.UpdateProductionInput(version=1, input_quantity=Decimal("12")),
    )
    assert updated.volume_l == Decimal("12.000")
    assert updated.amount == Decimal("6.00")
    # Same day and buyer keep the frozen price
    assert updated.price_snapshot == Decimal("0.50")
    assert updated.version == 2
    assert uow.commits == 1


@pytest.mark.asyncio
async def test_update_moving_date_resolves_new_price(tenant_id, tenant_config):
    record = make_production(
        tenant_id, uuid4(), local_dt(2024, 3, 1, 6), "10", price_snapshot="0.50"
    )
    prices = [
        MilkPrice.create(tenant_id=tenant_id, date=date(2024, 3, 2), price_per_l=Decimal("0.60"))
    ]
    uow = StubUnitOfWork(config=tenant_config, productions=[record], prices=prices)
    updated = await update_production.execute(
        uow,
        tenant_id,
        record.id,
        update_production.UpdateProductionInput(version=1, date=date(2024, 3, 2), shift="PM"),
    )
    assert updated.date == date(2024, 3, 2)
    assert updated.shift == "PM"
    assert updated.date_time.hour == 18
    assert updated.price_snapshot == Decimal("0.60")
    assert updated.amount == Decimal("6.00")


@pytest.mark.asyncio
async def test_update_with_stale_version_is_rejected(tenant_id, tenant_config):
    record = make_production(tenant_id, uuid4(), local_dt(2024, 3, 1, 6), "10")
    record.version = 3
    uow = StubUnitOfWork(config=tenant_config, productions=[record])
    with pytest.raises(StaleVersion) as exc_info:
        await update_production.execute(
            uow,
            tenant_id,
            record.id,
            update_production.UpdateProductionInput(version=2, notes="late"),
        )
    assert isinstance(exc_info.value, ConflictError)
    assert exc_info.value.code == "stale_version"
    assert record.notes is None
    assert uow.commits == 0


@pytest.mark.asyncio
async def test_update_into_an_occupied_shift_conflicts(tenant_id, tenant_config):
    a1 = uuid4()
    morning = make_production(tenant_id, a1, local_dt(2024, 3, 1, 6), "10")
    evening = make_production(tenant_id, a1, local_dt(2024, 3, 1, 18), "8")
    uow = StubUnitOfWork(config=tenant_config, productions=[morning, evening])
    with pytest.raises(ConflictError):
        await update_production.execute(
            uow,
            tenant_id,
            evening.id,
            update_production.UpdateProductionInput(version=1, shift="AM"),
        )
    assert evening.shift == "PM"


@pytest.mark.asyncio
async def test_update_missing_record_and_bad_version(tenant_id):
    uow = StubUnitOfWork()
    with pytest.raises(NotFound):
        await update_production.execute(
            uow, tenant_id, uuid4(), update_production.UpdateProductionInput(version=1)
        )
    with pytest.raises(ValidationError):
        await update_production.execute(
            uow, tenant_id, uuid4(), update_production.UpdateProductionInput(version=0)
        )


@pytest.mark.asyncio
async def test_delivery_uses_default_buyer_and_price(tenant_id, tenant_config):
    buyer_id = uuid4()
    tenant_config.default_buyer_id = buyer_id
    uow = StubUnitOfWork(config=tenant_config)
    created = await record_delivery.execute(
        uow,
        tenant_id,
        record_delivery.RecordDeliveryInput(
            date_time=local_dt(2024, 3, 1, 19), volume_l=Decimal("120.5")
        ),
    )
    assert created.buyer_id == buyer_id
    assert created.date == DAY
    assert created.price_snapshot == Decimal("0.40")
    assert created.amount == Decimal("48.20")
    assert uow.milk_deliveries.items == [created]


@pytest.mark.asyncio
async def test_delivery_once_per_buyer_and_day(tenant_id, tenant_config):
    buyer_id = uuid4()
    previous = MilkDelivery.create(
        tenant_id=tenant_id,
        buyer_id=buyer_id,
        date_time=local_dt(2024, 3, 1, 7),
        volume_l=Decimal("100"),
        price_snapshot=Decimal("0.40"),
        currency="USD",
        amount=Decimal("40.00"),
    )
    uow = StubUnitOfWork(config=tenant_config, deliveries=[previous])
    payload = record_delivery.RecordDeliveryInput(
        date_time=local_dt(2024, 3, 1, 19), volume_l=Decimal("50"), buyer_id=buyer_id
    )
    with pytest.raises(ValidationError):
        await record_delivery.execute(uow, tenant_id, payload)
    other_buyer = record_delivery.RecordDeliveryInput(
        date_time=local_dt(2024, 3, 1, 19), volume_l=Decimal("50"), buyer_id=uuid4()
    )
    assert (await record_delivery.execute(uow, tenant_id, other_buyer)).amount == Decimal("20.00")


@pytest.mark.asyncio
async def test_delivery_requires_buyer_price_and_positive_volume(tenant_id):
    uow = StubUnitOfWork()
    when = local_dt(2024, 3, 1, 19)
    with pytest.raises(ValidationError):
        await record_delivery.execute(
            uow, tenant_id, record_delivery.RecordDeliveryInput(when, Decimal("10"))
        )
    with pytest.raises(ValidationError):
        await record_delivery.execute(
            uow, tenant_id, record_delivery.RecordDeliveryInput(when, Decimal("10"), uuid4())
        )
    with pytest.raises(ValidationError):
        await record_delivery.execute(
            uow, tenant_id, record_delivery.RecordDeliveryInput(when, Decimal("0"), uuid4())
        )
    assert uow.milk_deliveries.items == []


@pytest.mark.asyncio
async def test_update_moving_to_an_unpriced_date_clears_price(tenant_id):
    record = make_production(
        tenant_id, uuid4(), local_dt(2024, 3, 1, 6), "10", price_snapshot="0.50"
    )
    uow = StubUnitOfWork(productions=[record])
    updated = await update_production.execute(
        uow,
        tenant_id,
        record.id,
        update_production.UpdateProductionInput(version=1, date=date(2024, 3, 5)),
    )
    assert updated.date == date(2024, 3, 5)
    assert updated.price_snapshot is None
    assert updated.amount is None
    assert updated.volume_l == Decimal("10.000")
