"""
Normalized report data for the financial exports.

Every builder returns the same shape so one HTML shell can render any report:

    {
        "title": str,
        "filename": str,
        "meta_lines": [str, ...],
        "sections": [{"heading": str, "head": [...], "rows": [[...]], "total_row": [...] | None}],
        "summary": [(label, value, strong), ...],
    }

Cell values are display-ready strings; numbers go through format_utils.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from models import AgencyStatement, AnnualTotals, BuildingReport, CommissionSummary, LandlordStatement, MonthlyAggregate

from engine.periods import month_key
from reporting.format_utils import MONTH_ABBR_FR, format_currency, format_month, format_percent


def _period_line(month: date) -> str:
    return f"Période : {format_month(month)}"


def agency_report_data(statement: AgencyStatement) -> dict[str, Any]:
    rows = [
        ["Total loyers perçus", format_currency(statement.rent_collected)],
        ["Loyers impayés", format_currency(statement.rent_unpaid)],
        ["Commission agence", format_currency(statement.management_fees)],
        ["Autres revenus", format_currency(statement.other_revenue)],
        ["Total revenus", format_currency(statement.total_revenue)],
        ["Total dépenses", format_currency(statement.expenses)],
    ]
    return {
        "title": "BILAN MENSUEL - ENTREPRISE",
        "filename": f"bilan-entreprise-{month_key(statement.month)}.pdf",
        "meta_lines": [_period_line(statement.month)],
        "sections": [{
            "heading": "",
            "head": ["Élément", "Montant"],
            "rows": rows,
            "total_row": ["SOLDE NET", format_currency(statement.agency_balance)],
        }],
        "summary": [],
    }


def landlord_report_data(statement: LandlordStatement, month: date) -> dict[str, Any]:
    rows = [
        [
            line.building_name,
            format_currency(line.rent_collected),
            format_currency(line.rent_unpaid),
            format_currency(line.management_fees),
            format_currency(line.net_payout),
        ]
        for line in statement.buildings
    ]
    last_name = statement.landlord_name.split(" ")[-1] if statement.landlord_name else "bailleur"
    return {
        "title": "BILAN MENSUEL",
        "filename": f"bilan-{last_name}-{month_key(month)}.pdf",
        "meta_lines": [f"Bailleur : {statement.landlord_name}", _period_line(month)],
        "sections": [{
            "heading": "",
            "head": ["Immeuble", "Loyers perçus", "Impayés", "Frais gestion", "Montant net"],
            "rows": rows,
            "total_row": None,
        }],
        "summary": [
            ("Loyers perçus", format_currency(statement.rent_collected), False),
            ("Loyers impayés", format_currency(statement.rent_unpaid), False),
            ("Frais de gestion", format_currency(statement.management_fees), False),
            ("MONTANT À VERSER", format_currency(statement.net_payout), True),
        ],
    }


def buildings_report_data(reports: Sequence[BuildingReport], month: date) -> dict[str, Any]:
    rows = [
        [
            r.building_name,
            r.landlord_name or "—",
            format_currency(r.rent_collected),
            format_currency(r.rent_unpaid),
            format_currency(r.management_fees),
            format_currency(r.net_payout),
            format_percent(r.occupancy_rate),
        ]
        for r in reports
    ]
    total_row = [
        "TOTAL",
        "",
        format_currency(sum(r.rent_collected for r in reports)),
        format_currency(sum(r.rent_unpaid for r in reports)),
        format_currency(sum(r.management_fees for r in reports)),
        format_currency(sum(r.net_payout for r in reports)),
        "",
    ]
    return {
        "title": "Rapports par Immeuble",
        "filename": f"rapports-immeubles-{month_key(month)}.pdf",
        "meta_lines": [_period_line(month)],
        "sections": [{
            "heading": "",
            "head": ["Immeuble", "Bailleur", "Loyers perçus", "Impayés", "Frais", "Résultat net", "Occupation"],
            "rows": rows,
            "total_row": total_row if reports else None,
        }],
        "summary": [],
    }


def accounting_report_data(series: Sequence[MonthlyAggregate], totals: AnnualTotals) -> dict[str, Any]:
    # Monthly figures are shown rounded to whole francs.
    rows = [
        [
            MONTH_ABBR_FR[m.month.month - 1],
            format_currency(round(m.management_fees)),
            format_currency(round(m.expenses)),
            format_currency(round(m.net_balance)),
        ]
        for m in series
    ]
    return {
        "title": "Rapport Comptable",
        "filename": f"comptabilite-{totals.year}.pdf",
        "meta_lines": [f"Exercice : {totals.year}"],
        "sections": [{
            "heading": "",
            "head": ["Mois", "Revenus", "Dépenses", "Solde"],
            "rows": rows,
            "total_row": None,
        }],
        "summary": [
            ("Total revenus", format_currency(totals.management_fees), False),
            ("Total dépenses", format_currency(totals.expenses), False),
            ("Solde net", format_currency(totals.net_balance), True),
        ],
    }


def commissions_report_data(summary: CommissionSummary) -> dict[str, Any]:
    overview = [
        ["Total commissions", format_currency(summary.total)],
        ["Nombre de paiements", str(summary.count)],
        ["Commission moyenne", format_currency(summary.average)],
    ]
    by_building = [[b.building_name, format_currency(b.commission)] for b in summary.by_building]
    details = [
        [
            line.tenant_name,
            line.unit_name,
            line.building_name,
            format_currency(line.total_amount),
            format_currency(line.commission),
        ]
        for line in summary.payments
    ]
    return {
        "title": "RAPPORT DES COMMISSIONS",
        "filename": f"commissions-{month_key(summary.month)}.pdf",
        "meta_lines": [_period_line(summary.month)],
        "sections": [
            {"heading": "", "head": ["Élément", "Valeur"], "rows": overview, "total_row": None},
            {"heading": "Par immeuble", "head": ["Immeuble", "Commission"], "rows": by_building, "total_row": None},
            {
                "heading": "Détails",
                "head": ["Locataire", "Unité", "Immeuble", "Montant", "Commission"],
                "rows": details,
                "total_row": None,
            },
        ],
        "summary": [],
    }
