from datetime import date, datetime

import pytest
from pydantic import ValidationError

from engine.contract_search import last_payment_status, search_contracts
from engine.lineage import Lineage
from models import (
    Building,
    Contract,
    ContractFilters,
    Landlord,
    PaymentRecord,
    PaymentStatus,
    Tenant,
    Unit,
    UnitStatus,
)


def _pay(pid, contract_id, status, created=None) -> PaymentRecord:
    return PaymentRecord(id=pid, contract_id=contract_id, total_amount=1000, period_month=date(2025, 1, 1),
                         status=status, created_at=created)


@pytest.fixture
def contracts():
    return [
        Contract(id="c1", tenant_id="t1", unit_id="u1", monthly_rent=100000, start_date=date(2024, 1, 1)),
        Contract(id="c2", unit_id="u2", monthly_rent=80000, start_date=date(2024, 6, 1), status="termine"),
        Contract(id="c3", unit_id="u3", monthly_rent=150000),
        Contract(id="c4", monthly_rent=50000, start_date=date(2025, 1, 1)),
    ]


@pytest.fixture
def lineage(contracts):
    return Lineage.from_records(
        contracts=contracts,
        tenants=[Tenant(id="t1", first_name="Fatou", last_name="Ndiaye", phone="77 000 00 01")],
        units=[
            Unit(id="u1", name="A1", building_id="i1", status=UnitStatus.OCCUPIED),
            Unit(id="u2", name="A2", building_id="i1", status=UnitStatus.VACANT),
            Unit(id="u3", name="S1", building_id="i2", status=UnitStatus.MAINTENANCE),
        ],
        buildings=[Building(id="i1", name="Palmiers", landlord_id="b1"),
                   Building(id="i2", name="Soleil", landlord_id="b2")],
        landlords=[Landlord(id="b1", first_name="Awa", last_name="Diop"),
                   Landlord(id="b2", first_name="Moussa", last_name="Fall")],
    )


@pytest.fixture
def payments():
    return [
        _pay("p1", "c1", PaymentStatus.PAID, datetime(2025, 1, 5)),
        _pay("p2", "c1", PaymentStatus.UNPAID, datetime(2025, 2, 5)),
        _pay("p3", "c2", PaymentStatus.PAID, datetime(2025, 1, 5)),
        _pay("p4", "c3", PaymentStatus.PAID, datetime(2025, 1, 5)),
        _pay("p5", "c3", PaymentStatus.PARTIAL),
    ]


def _ids(contracts, lineage, payments, **criteria):
    return [m.contract_id for m in search_contracts(contracts, lineage, payments, ContractFilters(**criteria))]


def test_no_criteria_returns_every_contract(contracts, lineage, payments) -> None:
    assert _ids(contracts, lineage, payments) == ["c1", "c2", "c3", "c4"]


def test_last_payment_is_the_latest_created(payments) -> None:
    assert last_payment_status(payments) == {
        "c1": PaymentStatus.UNPAID,
        "c2": PaymentStatus.PAID,
        "c3": PaymentStatus.PAID,
    }


def test_landlord_building_unit_cascade(contracts, lineage, payments) -> None:
    assert _ids(contracts, lineage, payments, landlord_id="b1") == ["c1", "c2"]
    assert _ids(contracts, lineage, payments, landlord_id="b1", building_id="i1", unit_id="u2") == ["c2"]
    assert _ids(contracts, lineage, payments, landlord_id="b2", building_id="i1") == []
    assert _ids(contracts, lineage, payments, building_id="i2") == ["c3"]


def test_rent_and_start_date_bounds_are_inclusive(contracts, lineage, payments) -> None:
    assert _ids(contracts, lineage, payments, rent_min=80000, rent_max=100000) == ["c1", "c2"]
    # c3 has no start date and drops out as soon as a date bound is set.
    assert _ids(contracts, lineage, payments, start_from=date(2024, 1, 1), start_to=date(2024, 6, 1)) == ["c1", "c2"]
    assert _ids(contracts, lineage, payments, start_from=date(2024, 6, 2)) == ["c4"]


def test_unit_and_payment_status(contracts, lineage, payments) -> None:
    assert _ids(contracts, lineage, payments, unit_status="libre") == ["c2"]
    assert _ids(contracts, lineage, payments, unit_status="maintenance") == ["c3"]
    assert _ids(contracts, lineage, payments, payment_status="impaye") == ["c1"]
    assert _ids(contracts, lineage, payments, payment_status="paye") == ["c2", "c3"]


def test_match_rows_carry_labels(contracts, lineage, payments) -> None:
    match = search_contracts(contracts, lineage, payments, ContractFilters(unit_id="u1"))[0]
    assert (match.tenant_name, match.tenant_phone) == ("Fatou Ndiaye", "77 000 00 01")
    assert (match.unit_name, match.unit_status, match.building_name, match.landlord_name) == (
        "A1", UnitStatus.OCCUPIED, "Palmiers", "Awa Diop",
    )
    assert match.last_payment_status == PaymentStatus.UNPAID
    orphan = search_contracts(contracts, lineage, payments, ContractFilters(rent_max=50000))[0]
    assert (orphan.contract_id, orphan.unit_id, orphan.last_payment_status) == ("c4", None, None)


def test_filters_normalise_blank_and_reject_bad_values() -> None:
    filters = ContractFilters(landlord_id=" ", unit_status="", payment_status="")
    assert (filters.landlord_id, filters.unit_status, filters.payment_status) == (None, None, None)
    with pytest.raises(ValidationError):
        ContractFilters(rent_min=-1)
    with pytest.raises(ValidationError):
        ContractFilters(unit_status="demoli")
