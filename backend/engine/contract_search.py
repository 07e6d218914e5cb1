"""Multi-criteria contract search over the reference data and payment history."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from models import Contract, ContractFilters, ContractMatch, PaymentRecord, PaymentStatus

from engine.lineage import Lineage


def last_payment_status(payments: Sequence[PaymentRecord]) -> Dict[str, PaymentStatus]:
    """
    Status of each contract's most recently created payment. Rows without a
    creation time sort first; on ties the row read last wins.
    """
    latest: Dict[str, Tuple[datetime, PaymentStatus]] = {}
    for p in payments:
        if p.contract_id is None:
            continue
        created = p.created_at or datetime.min
        seen = latest.get(p.contract_id)
        if seen is None or created >= seen[0]:
            latest[p.contract_id] = (created, p.status)
    return {cid: status for cid, (_, status) in latest.items()}


def _matches(
    contract: Contract,
    lineage: Lineage,
    filters: ContractFilters,
    payment_status: Optional[PaymentStatus],
) -> bool:
    unit = lineage.unit_of(contract)
    building = lineage.building_of(contract)

    if filters.unit_id and contract.unit_id != filters.unit_id:
        return False
    if filters.building_id and (unit is None or unit.building_id != filters.building_id):
        return False
    if filters.landlord_id and (building is None or building.landlord_id != filters.landlord_id):
        return False
    if filters.unit_status is not None and (unit is None or unit.status != filters.unit_status):
        return False
    if filters.rent_min is not None and contract.monthly_rent < filters.rent_min:
        return False
    if filters.rent_max is not None and contract.monthly_rent > filters.rent_max:
        return False
    # A contract without a start date fails any date bound.
    if filters.start_from is not None and (contract.start_date is None or contract.start_date < filters.start_from):
        return False
    if filters.start_to is not None and (contract.start_date is None or contract.start_date > filters.start_to):
        return False
    if filters.payment_status is not None and payment_status != filters.payment_status:
        return False
    return True


def search_contracts(
    contracts: Sequence[Contract],
    lineage: Lineage,
    payments: Sequence[PaymentRecord],
    filters: ContractFilters,
) -> List[ContractMatch]:
    """
    Contracts (any status) matching every given criterion, in input order.

    The payment-status criterion compares against the contract's latest
    payment, so a contract with no payment never matches it.
    """
    statuses = last_payment_status(payments)
    out: List[ContractMatch] = []
    for contract in contracts:
        status = statuses.get(contract.id)
        if not _matches(contract, lineage, filters, status):
            continue
        labels = lineage.labels(contract)
        unit = lineage.unit_of(contract)
        out.append(
            ContractMatch(
                contract_id=contract.id,
                tenant_name=labels.tenant_name,
                tenant_phone=labels.tenant_phone,
                unit_id=labels.unit_id,
                unit_name=labels.unit_name,
                unit_status=unit.status if unit else None,
                building_id=labels.building_id,
                building_name=labels.building_name,
                landlord_id=labels.landlord_id,
                landlord_name=labels.landlord_name,
                monthly_rent=contract.monthly_rent,
                start_date=contract.start_date,
                end_date=contract.end_date,
                status=contract.status,
                last_payment_status=status,
            )
        )
    return out
