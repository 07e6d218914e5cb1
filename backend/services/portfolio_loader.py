"""
Bulk reads from the backend into typed records.

All reads for one request go through the caller's session, so they see a
single snapshot. Payment lineage (contract -> unit -> building) is resolved
with outer joins: a broken link anywhere leaves building_id None rather than
dropping the payment.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import Bailleur, Contrat, Depense, Immeuble, Locataire, Paiement, Revenu, Unite
from engine.lineage import Lineage
from models import Building, Contract, Expense, Landlord, PaymentRecord, Revenue, Tenant, Unit

_LOG = logging.getLogger("uvicorn.error")


class BackendReadError(Exception):
    """A backend query failed; surfaced to clients as a generic load error."""


@dataclass
class Portfolio:
    landlords: List[Landlord] = field(default_factory=list)
    buildings: List[Building] = field(default_factory=list)
    units: List[Unit] = field(default_factory=list)
    tenants: List[Tenant] = field(default_factory=list)
    contracts: List[Contract] = field(default_factory=list)
    payments: List[PaymentRecord] = field(default_factory=list)
    expenses: List[Expense] = field(default_factory=list)
    revenues: List[Revenue] = field(default_factory=list)


def _as_dict(row: Any) -> dict[str, Any]:
    return {c.key: getattr(row, c.key) for c in row.__table__.columns}


def _read(what: str, fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except SQLAlchemyError as e:
        _LOG.exception("backend read failed: %s", what)
        raise BackendReadError(f"Could not load {what}") from e


def _select_payments(db: Session, start: Optional[date], end: Optional[date]) -> List[PaymentRecord]:
    stmt = (
        select(Paiement, Unite.id, Immeuble.id)
        .outerjoin(Contrat, Paiement.contrat_id == Contrat.id)
        .outerjoin(Unite, Contrat.unite_id == Unite.id)
        .outerjoin(Immeuble, Unite.immeuble_id == Immeuble.id)
        .order_by(Paiement.mois_concerne, Paiement.created_at)
    )
    if start is not None:
        stmt = stmt.where(Paiement.mois_concerne >= start)
    if end is not None:
        stmt = stmt.where(Paiement.mois_concerne < end)
    out = []
    for paiement, unit_id, building_id in db.execute(stmt).all():
        data = _as_dict(paiement)
        data["unite_id"] = unit_id
        data["immeuble_id"] = building_id
        out.append(PaymentRecord.model_validate(data))
    return out


def load_payments(db: Session, start: Optional[date] = None, end: Optional[date] = None) -> List[PaymentRecord]:
    """Payments whose period month falls in [start, end), lineage resolved."""
    return _read("payments", _select_payments, db, start, end)


def _select_expenses(db: Session, start: Optional[date], end: Optional[date]) -> List[Expense]:
    stmt = select(Depense).order_by(Depense.date_depense)
    if start is not None:
        stmt = stmt.where(Depense.date_depense >= start)
    if end is not None:
        stmt = stmt.where(Depense.date_depense < end)
    return [Expense.model_validate(_as_dict(r)) for r in db.scalars(stmt).all()]


def load_expenses(db: Session, start: Optional[date] = None, end: Optional[date] = None) -> List[Expense]:
    return _read("expenses", _select_expenses, db, start, end)


def _select_revenues(db: Session, start: Optional[date], end: Optional[date]) -> List[Revenue]:
    stmt = select(Revenu).order_by(Revenu.date_revenu)
    if start is not None:
        stmt = stmt.where(Revenu.date_revenu >= start)
    if end is not None:
        stmt = stmt.where(Revenu.date_revenu < end)
    return [Revenue.model_validate(_as_dict(r)) for r in db.scalars(stmt).all()]


def load_revenues(db: Session, start: Optional[date] = None, end: Optional[date] = None) -> List[Revenue]:
    return _read("revenues", _select_revenues, db, start, end)


def _select_all(db: Session, orm_cls, record_cls, order_by) -> list:
    return [record_cls.model_validate(_as_dict(r)) for r in db.scalars(select(orm_cls).order_by(order_by)).all()]


def load_landlords(db: Session) -> List[Landlord]:
    return _read("landlords", _select_all, db, Bailleur, Landlord, Bailleur.nom)


def load_buildings(db: Session) -> List[Building]:
    return _read("buildings", _select_all, db, Immeuble, Building, Immeuble.nom)


def load_units(db: Session) -> List[Unit]:
    return _read("units", _select_all, db, Unite, Unit, Unite.nom)


def load_tenants(db: Session) -> List[Tenant]:
    return _read("tenants", _select_all, db, Locataire, Tenant, Locataire.nom)


def load_contracts(db: Session) -> List[Contract]:
    return _read("contracts", _select_all, db, Contrat, Contract, Contrat.date_debut)


def load_lineage(db: Session) -> Lineage:
    """Contracts, tenants, units, buildings and landlords indexed for label lookups."""
    return Lineage.from_records(
        contracts=load_contracts(db),
        tenants=load_tenants(db),
        units=load_units(db),
        buildings=load_buildings(db),
        landlords=load_landlords(db),
    )


def load_portfolio(db: Session, start: Optional[date] = None, end: Optional[date] = None) -> Portfolio:
    """Reference data in full plus period-scoped payments, expenses and revenues."""
    return Portfolio(
        landlords=load_landlords(db),
        buildings=load_buildings(db),
        units=load_units(db),
        tenants=load_tenants(db),
        contracts=load_contracts(db),
        payments=load_payments(db, start, end),
        expenses=load_expenses(db, start, end),
        revenues=load_revenues(db, start, end),
    )


def _get(db: Session, orm_cls, record_cls, id_: Optional[str]):
    if not id_:
        return None
    row = db.get(orm_cls, id_)
    return record_cls.model_validate(_as_dict(row)) if row is not None else None


def get_landlord(db: Session, landlord_id: str) -> Optional[Landlord]:
    return _read("landlord", _get, db, Bailleur, Landlord, landlord_id)


def _contract_chain(
    db: Session, contract: Contract
) -> Tuple[Optional[Tenant], Optional[Unit], Optional[Building], Optional[Landlord]]:
    tenant = _get(db, Locataire, Tenant, contract.tenant_id)
    unit = _get(db, Unite, Unit, contract.unit_id)
    building = _get(db, Immeuble, Building, unit.building_id if unit else None)
    landlord = _get(db, Bailleur, Landlord, building.landlord_id if building else None)
    return tenant, unit, building, landlord


def get_contract_bundle(db: Session, contract_id: str):
    """(contract, tenant, unit, building, landlord), or None for an unknown contract."""
    def _load():
        contract = _get(db, Contrat, Contract, contract_id)
        if contract is None:
            return None
        return (contract, *_contract_chain(db, contract))

    return _read("contract", _load)


def get_payment_bundle(db: Session, payment_id: str):
    """(payment, contract, tenant, building), or None for an unknown payment."""
    def _load():
        row = db.get(Paiement, payment_id)
        if row is None:
            return None
        contract = _get(db, Contrat, Contract, row.contrat_id)
        tenant = unit = building = None
        if contract is not None:
            tenant, unit, building, _ = _contract_chain(db, contract)
        data = _as_dict(row)
        data["unite_id"] = unit.id if unit else None
        data["immeuble_id"] = building.id if building else None
        return PaymentRecord.model_validate(data), contract, tenant, building

    return _read("payment", _load)
