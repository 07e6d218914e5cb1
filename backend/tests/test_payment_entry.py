from datetime import date

import pytest
from pydantic import ValidationError

from db.models import AuditLog, Paiement
from models import PaymentCreate, PaymentStatus
from services.payment_entry import UnknownContractError, record_payment
from services.portfolio_loader import load_payments


def test_contract_rate_takes_precedence(db) -> None:
    out = record_payment(db, PaymentCreate(contract_id="c1", total_amount=120000, period_month="2025-05"))
    assert (out.agency_share, out.owner_share) == (12000, 108000)
    assert out.period_month == date(2025, 5, 1)
    assert out.building_id == "i1"
    assert out.status == PaymentStatus.PAID


def test_landlord_rate_is_used_when_contract_has_none(db) -> None:
    out = record_payment(db, PaymentCreate(contract_id="c2", total_amount=150000, period_month=date(2025, 5, 20)))
    assert out.agency_share == 12000
    assert out.agency_share + out.owner_share == 150000
    assert out.period_month == date(2025, 5, 1)


def test_default_rate_without_lineage(db) -> None:
    out = record_payment(db, PaymentCreate(contract_id="c3", total_amount=50000, period_month="2025-05",
                                           status="impaye"))
    assert out.agency_share == 5000
    assert out.building_id is None
    row = db.get(Paiement, out.id)
    assert row.statut == "impaye"


def test_payment_is_audited_and_readable(db) -> None:
    out = record_payment(db, PaymentCreate(contract_id="c1", total_amount=100000, period_month="2025-06"))
    entries = db.query(AuditLog).filter(AuditLog.resource_id == out.id).all()
    assert len(entries) == 1
    assert entries[0].action == "payment.create"
    assert entries[0].details["commission_rate"] == 10
    loaded = [p for p in load_payments(db, date(2025, 6, 1), date(2025, 7, 1))]
    assert [p.id for p in loaded] == [out.id]


def test_unknown_contract_writes_nothing(db) -> None:
    before = db.query(Paiement).count()
    with pytest.raises(UnknownContractError):
        record_payment(db, PaymentCreate(contract_id="nope", total_amount=1000, period_month="2025-05"))
    assert db.query(Paiement).count() == before
    assert db.query(AuditLog).count() == 0


@pytest.mark.parametrize(
    "payload",
    [
        {"contract_id": "", "total_amount": 1000, "period_month": "2025-05"},
        {"contract_id": "c1", "total_amount": 0, "period_month": "2025-05"},
        {"contract_id": "c1", "total_amount": 1000},
    ],
)
def test_invalid_entries_fail_validation(payload) -> None:
    with pytest.raises(ValidationError):
        PaymentCreate(**payload)
