from datetime import date

from engine.lineage import Lineage
from engine.receivables import filter_unpaid_rents, find_unpaid_rents
from models import Building, Contract, Landlord, PaymentRecord, PaymentStatus, Tenant, Unit


def _pay(contract_id: str, month: date, status: PaymentStatus) -> PaymentRecord:
    return PaymentRecord(
        id=f"{contract_id}-{month.isoformat()}",
        contract_id=contract_id,
        total_amount=100000,
        period_month=month,
        status=status,
    )


def test_missing_and_unpaid_months_are_receivables() -> None:
    contracts = [
        Contract(id="c1", monthly_rent=100000),
        Contract(id="c2", monthly_rent=80000, status="termine"),
    ]
    payments = [
        _pay("c1", date(2025, 3, 1), PaymentStatus.PAID),
        _pay("c1", date(2025, 2, 1), PaymentStatus.UNPAID),
        _pay("c1", date(2024, 12, 1), PaymentStatus.PARTIAL),
    ]
    out = find_unpaid_rents(contracts, payments, date(2025, 3, 10), months=4)

    assert [(u.contract_id, u.period_month, u.has_payment) for u in out] == [
        ("c1", date(2025, 2, 1), True),
        ("c1", date(2025, 1, 1), False),
    ]
    assert all(u.amount_due == 100000 for u in out)


def test_default_lookback_is_six_months() -> None:
    out = find_unpaid_rents([Contract(id="c1", monthly_rent=50000)], [], date(2025, 6, 30))
    assert [u.period_month for u in out] == [date(2025, m, 1) for m in range(6, 0, -1)]


def _labelled_rows():
    lineage = Lineage.from_records(
        contracts=[],
        tenants=[Tenant(id="t1", first_name="Fatou", last_name="Ndiaye", phone="77 000 00 01"),
                 Tenant(id="t2", first_name="Ibrahima", last_name="Sarr")],
        units=[Unit(id="u1", name="Appartement A1", building_id="i1"), Unit(id="u3", name="Studio S1", building_id="i2")],
        buildings=[Building(id="i1", name="Les Palmiers", landlord_id="b1"),
                   Building(id="i2", name="Soleil", landlord_id="b2")],
        landlords=[Landlord(id="b1", first_name="Awa", last_name="Diop"),
                   Landlord(id="b2", first_name="Moussa", last_name="Fall")],
    )
    contracts = [
        Contract(id="c1", tenant_id="t1", unit_id="u1", monthly_rent=100000),
        Contract(id="c2", tenant_id="t2", unit_id="u3", monthly_rent=90000),
        Contract(id="c3", tenant_id="t2", monthly_rent=50000),
    ]
    return find_unpaid_rents(contracts, [], date(2025, 3, 10), months=1, lineage=lineage)


def test_receivables_carry_lineage_labels() -> None:
    rows = {r.contract_id: r for r in _labelled_rows()}
    first = rows["c1"]
    assert (first.tenant_name, first.tenant_phone) == ("Fatou Ndiaye", "77 000 00 01")
    assert (first.unit_name, first.building_name) == ("Appartement A1", "Les Palmiers")
    assert (first.landlord_id, first.landlord_name) == ("b1", "Awa Diop")
    orphan = rows["c3"]
    assert orphan.tenant_name == "Ibrahima Sarr"
    assert (orphan.unit_name, orphan.building_name, orphan.landlord_id) == ("", "", None)


def test_filter_by_landlord_and_search_term() -> None:
    rows = _labelled_rows()
    assert [r.contract_id for r in filter_unpaid_rents(rows, landlord_id="b2")] == ["c2"]
    assert [r.contract_id for r in filter_unpaid_rents(rows, search="  PALMIERS ")] == ["c1"]
    assert [r.contract_id for r in filter_unpaid_rents(rows, search="sarr")] == ["c2", "c3"]
    assert filter_unpaid_rents(rows, landlord_id="b1", search="sarr") == []
    assert filter_unpaid_rents(rows) == rows
