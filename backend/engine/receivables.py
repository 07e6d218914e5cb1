"""Outstanding rent: active contracts with no settled payment for a recent month."""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from models import Contract, PaymentRecord, PaymentStatus, UnpaidRent

from engine.lineage import Lineage
from engine.periods import trailing_months

DEFAULT_LOOKBACK_MONTHS = 6


def find_unpaid_rents(
    contracts: Sequence[Contract],
    payments: Sequence[PaymentRecord],
    as_of: date,
    months: int = DEFAULT_LOOKBACK_MONTHS,
    lineage: Optional[Lineage] = None,
) -> List[UnpaidRent]:
    """
    For each active contract and each of the last `months` period months
    (as_of's month included), report the month when there is no payment
    row or the row is marked unpaid. The amount due is the contract rent.

    When several rows exist for one contract/month the last one read wins.
    With a lineage, rows carry tenant, unit, building and landlord labels.
    """
    periods = trailing_months(as_of, months)
    status_by_key: Dict[Tuple[str, date], PaymentStatus] = {}
    for p in payments:
        if p.contract_id is not None:
            status_by_key[(p.contract_id, p.period_month)] = p.status

    lineage = lineage or Lineage()
    out: List[UnpaidRent] = []
    for contract in contracts:
        if not contract.is_active:
            continue
        labels = lineage.labels(contract)
        for period in periods:
            status = status_by_key.get((contract.id, period))
            if status is None or status == PaymentStatus.UNPAID:
                out.append(
                    UnpaidRent(
                        contract_id=contract.id,
                        period_month=period,
                        amount_due=contract.monthly_rent,
                        has_payment=status is not None,
                        tenant_name=labels.tenant_name,
                        tenant_phone=labels.tenant_phone,
                        unit_name=labels.unit_name,
                        building_name=labels.building_name,
                        landlord_id=labels.landlord_id,
                        landlord_name=labels.landlord_name,
                    )
                )
    return out


def filter_unpaid_rents(
    rows: Sequence[UnpaidRent],
    landlord_id: Optional[str] = None,
    search: Optional[str] = None,
) -> List[UnpaidRent]:
    """
    Narrow to one landlord and/or a case-insensitive search term matched
    against the tenant, unit and building labels.
    """
    term = (search or "").strip().lower()
    out = []
    for row in rows:
        if landlord_id and row.landlord_id != landlord_id:
            continue
        if term and term not in f"{row.tenant_name} {row.unit_name} {row.building_name}".lower():
            continue
        out.append(row)
    return out
