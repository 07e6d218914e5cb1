from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from models import (
    AgencyStatement,
    AnnualTotals,
    Building,
    BuildingCommission,
    BuildingReport,
    CommissionLine,
    CommissionSummary,
    Contract,
    DashboardStats,
    Expense,
    Landlord,
    LandlordBuildingLine,
    LandlordStatement,
    MonthlyAggregate,
    PaymentRecord,
    PaymentStatus,
    Revenue,
    Tenant,
    Unit,
    UnitStatus,
)

from engine.lineage import Lineage
from engine.periods import in_window, month_start, month_window, year_months


@dataclass
class _Totals:
    """Running sums for one scope (portfolio, building or landlord)."""
    rent_collected: float = 0.0
    rent_unpaid: float = 0.0
    management_fees: float = 0.0

    def add(self, payment: PaymentRecord) -> None:
        # Partial payments count in neither bucket.
        if payment.status == PaymentStatus.PAID:
            self.rent_collected += payment.total_amount
            self.management_fees += payment.agency_share
        elif payment.status == PaymentStatus.UNPAID:
            self.rent_unpaid += payment.total_amount

    @property
    def net_payout(self) -> float:
        return self.rent_collected - self.management_fees


def _payments_in(payments: Iterable[PaymentRecord], window: Tuple[date, date]) -> List[PaymentRecord]:
    return [p for p in payments if in_window(p.period_month, window)]


def _expenses_in(expenses: Iterable[Expense], window: Tuple[date, date]) -> float:
    return sum((e.amount for e in expenses if in_window(e.expense_date, window)), 0.0)


def aggregate_monthly(
    payments: Sequence[PaymentRecord],
    expenses: Sequence[Expense],
    month: date,
) -> MonthlyAggregate:
    """
    Portfolio-wide rollup for the calendar month containing `month`.

    Every payment in the window counts, including payments whose building or
    landlord lineage cannot be resolved.
    """
    window = month_window(month)
    totals = _Totals()
    for p in _payments_in(payments, window):
        totals.add(p)
    expenses_total = _expenses_in(expenses, window)
    return MonthlyAggregate(
        month=window[0],
        rent_collected=totals.rent_collected,
        rent_unpaid=totals.rent_unpaid,
        management_fees=totals.management_fees,
        expenses=expenses_total,
        net_balance=totals.management_fees - expenses_total,
    )


def aggregate_annual_series(
    payments: Sequence[PaymentRecord],
    expenses: Sequence[Expense],
    year: int,
) -> List[MonthlyAggregate]:
    """Twelve monthly aggregates, January to December of `year`."""
    return [aggregate_monthly(payments, expenses, m) for m in year_months(year)]


def annual_totals(series: Sequence[MonthlyAggregate]) -> AnnualTotals:
    year = series[0].month.year if series else 0
    fees = sum((m.management_fees for m in series), 0.0)
    spent = sum((m.expenses for m in series), 0.0)
    return AnnualTotals(year=year, management_fees=fees, expenses=spent, net_balance=fees - spent)


def _occupancy(units: Sequence[Unit], building_id: str) -> Tuple[int, int]:
    """(total units, occupied units) from the current status snapshot."""
    own = [u for u in units if u.building_id == building_id]
    occupied = sum(1 for u in own if u.status == UnitStatus.OCCUPIED)
    return len(own), occupied


def aggregate_by_building(
    payments: Sequence[PaymentRecord],
    buildings: Sequence[Building],
    units: Sequence[Unit],
    month: date,
    landlords: Sequence[Landlord] = (),
    landlord_id: Optional[str] = None,
) -> List[BuildingReport]:
    """
    One report per active building, in the order buildings were supplied.

    Occupancy is a snapshot of current unit status and ignores the period.
    Payments without a resolvable building are skipped here.
    """
    window = month_window(month)
    landlord_names: Dict[str, str] = {landlord.id: landlord.full_name for landlord in landlords}

    scoped = [
        b for b in buildings
        if b.active and (landlord_id is None or b.landlord_id == landlord_id)
    ]
    totals: Dict[str, _Totals] = {b.id: _Totals() for b in scoped}

    for p in _payments_in(payments, window):
        if p.building_id is not None and p.building_id in totals:
            totals[p.building_id].add(p)

    reports: List[BuildingReport] = []
    for b in scoped:
        t = totals[b.id]
        unit_count, occupied = _occupancy(units, b.id)
        reports.append(
            BuildingReport(
                building_id=b.id,
                building_name=b.name,
                landlord_id=b.landlord_id,
                landlord_name=landlord_names.get(b.landlord_id or "", ""),
                rent_collected=t.rent_collected,
                rent_unpaid=t.rent_unpaid,
                management_fees=t.management_fees,
                net_payout=t.net_payout,
                unit_count=unit_count,
                occupied_units=occupied,
                occupancy_rate=(occupied / unit_count) if unit_count > 0 else 0.0,
            )
        )
    return reports


def aggregate_by_landlord(
    payments: Sequence[PaymentRecord],
    buildings: Sequence[Building],
    landlords: Sequence[Landlord],
    month: date,
) -> List[LandlordStatement]:
    """
    Monthly statement per active landlord that owns at least one active building.

    Each statement carries a per-building breakdown. A breakdown row is created
    the first time a payment for that building is seen, so buildings without
    payments in the period have no row.
    """
    window = month_window(month)
    active_landlords = {landlord.id: landlord for landlord in landlords if landlord.active}
    active_buildings = {b.id: b for b in buildings if b.active}

    order: List[str] = []
    for b in active_buildings.values():
        if b.landlord_id in active_landlords and b.landlord_id not in order:
            order.append(b.landlord_id)

    landlord_totals: Dict[str, _Totals] = {lid: _Totals() for lid in order}
    lines: Dict[str, Dict[str, _Totals]] = {lid: {} for lid in order}

    for p in _payments_in(payments, window):
        if p.status not in (PaymentStatus.PAID, PaymentStatus.UNPAID):
            continue
        building = active_buildings.get(p.building_id or "")
        if building is None or building.landlord_id not in landlord_totals:
            continue
        lid = building.landlord_id
        line = lines[lid].get(building.id)
        if line is None:
            line = lines[lid][building.id] = _Totals()
        line.add(p)
        landlord_totals[lid].add(p)

    statements: List[LandlordStatement] = []
    for lid in order:
        t = landlord_totals[lid]
        statements.append(
            LandlordStatement(
                landlord_id=lid,
                landlord_name=active_landlords[lid].full_name,
                buildings=[
                    LandlordBuildingLine(
                        building_id=bid,
                        building_name=active_buildings[bid].name,
                        rent_collected=bt.rent_collected,
                        rent_unpaid=bt.rent_unpaid,
                        management_fees=bt.management_fees,
                        net_payout=bt.net_payout,
                    )
                    for bid, bt in lines[lid].items()
                ],
                rent_collected=t.rent_collected,
                rent_unpaid=t.rent_unpaid,
                management_fees=t.management_fees,
                net_payout=t.net_payout,
            )
        )
    return statements


def agency_statement(
    payments: Sequence[PaymentRecord],
    expenses: Sequence[Expense],
    revenues: Sequence[Revenue],
    month: date,
) -> AgencyStatement:
    """Agency view of the month: commissions plus other revenue, less expenses."""
    base = aggregate_monthly(payments, expenses, month)
    window = month_window(month)
    other = sum((r.amount for r in revenues if in_window(r.revenue_date, window)), 0.0)
    total_revenue = base.management_fees + other
    return AgencyStatement(
        month=base.month,
        rent_collected=base.rent_collected,
        rent_unpaid=base.rent_unpaid,
        management_fees=base.management_fees,
        other_revenue=other,
        total_revenue=total_revenue,
        expenses=base.expenses,
        agency_balance=total_revenue - base.expenses,
    )


def summarize_commissions(
    payments: Sequence[PaymentRecord],
    buildings: Sequence[Building],
    month: date,
    lineage: Optional[Lineage] = None,
) -> CommissionSummary:
    """
    Paid commissions for the month, with a per-building split in first-seen
    order and one detail line per payment, latest payment date first.
    Labels that cannot be resolved show as "-".
    """
    window = month_window(month)
    names = {b.id: b.name for b in buildings}
    paid = [p for p in _payments_in(payments, window) if p.status == PaymentStatus.PAID]

    by_building: Dict[str, float] = {}
    for p in paid:
        label = names.get(p.building_id or "", "-")
        by_building[label] = by_building.get(label, 0.0) + p.agency_share

    lineage = lineage or Lineage()
    lines: List[CommissionLine] = []
    for p in sorted(paid, key=lambda p: p.payment_date or date.min, reverse=True):
        labels = lineage.labels_for_id(p.contract_id)
        lines.append(
            CommissionLine(
                payment_id=p.id,
                payment_date=p.payment_date,
                tenant_name=labels.tenant_name or "-",
                unit_name=labels.unit_name or "-",
                building_name=labels.building_name or names.get(p.building_id or "", "-"),
                landlord_name=labels.landlord_name or "-",
                total_amount=p.total_amount,
                commission=p.agency_share,
            )
        )

    total = sum((p.agency_share for p in paid), 0.0)
    return CommissionSummary(
        month=window[0],
        total=total,
        count=len(paid),
        average=total / len(paid) if paid else 0.0,
        by_building=[BuildingCommission(building_name=k, commission=v) for k, v in by_building.items()],
        payments=lines,
    )


def portfolio_snapshot(
    landlords: Sequence[Landlord],
    buildings: Sequence[Building],
    units: Sequence[Unit],
    tenants: Sequence[Tenant],
    contracts: Sequence[Contract],
    payments: Sequence[PaymentRecord],
    as_of: date,
) -> DashboardStats:
    """Headline counts plus the current month's collected and unpaid rent."""
    current = aggregate_monthly(payments, [], month_start(as_of))
    occupied = sum(1 for u in units if u.status == UnitStatus.OCCUPIED)
    vacant = sum(1 for u in units if u.status == UnitStatus.VACANT)
    return DashboardStats(
        landlords=len(landlords),
        buildings=len(buildings),
        units=len(units),
        vacant_units=vacant,
        occupied_units=occupied,
        tenants=len(tenants),
        active_contracts=sum(1 for c in contracts if c.is_active),
        rent_collected_month=current.rent_collected,
        rent_unpaid_month=current.rent_unpaid,
        occupancy_rate=(occupied / len(units)) if units else 0.0,
    )
