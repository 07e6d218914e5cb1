"""
Lease contract, management mandate and rent receipt documents.

Each builder maps records to template values, substitutes them, and lays the
result out with bold dynamic values. Builders are pure apart from reading the
template file and the clock (both injectable).
"""
from __future__ import annotations

import logging
import time
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional

from models import Building, Contract, Landlord, PaymentRecord, Tenant, Unit

from reporting.document_renderer import (
    A4,
    DocumentLayout,
    PageGeometry,
    RenderedDocument,
    render_flowed_document,
)
from reporting.format_utils import format_currency, format_date, format_month
from reporting.templating import TemplateNotFoundError, load_template, substitute_tokens

_LOG = logging.getLogger("uvicorn.error")

CONTRACT_TEMPLATE = "contrat_location.txt"
MANDATE_TEMPLATE = "mandat_gerance.txt"
RECEIPT_TEMPLATE = "quittance_loyer.txt"

CONTRACT_TITLE = "CONTRAT DE LOCATION"
MANDATE_TITLE = "MANDAT DE GÉRANCE"
RECEIPT_TITLE = "Quittance Loyer"

EMPTY_MANDATE_BODY = "Contenu du mandat vide."

RECEIPT_MENTIONS = (
    "NB 1 : Le locataire ne peut déménager sans avoir payé l’intégralité du loyer dû "
    "et effectué toutes les réparations à sa charge.",
    "NB 2 : La sous-location est strictement interdite.",
)


def _now_ms() -> int:
    return int(time.time() * 1000)


def lease_duration_years(start: Optional[date], end: Optional[date]) -> str:
    """
    Whole calendar months between start and end, expressed in years.

    "2" for 24 months, "1.5" for 18; "1" when a date is missing or the
    difference is not positive.
    """
    if start is None or end is None:
        return "1"
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if months <= 0:
        return "1"
    if months % 12 == 0:
        return str(months // 12)
    return str((Decimal(months) / 12).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def receipt_reference(payment: PaymentRecord) -> str:
    """The stored reference, else FAC-{YYYY}{MM}-{first 8 id chars} from created_at."""
    if payment.reference:
        return payment.reference
    stamp = payment.created_at or datetime.now()
    suffix = (payment.id or "").replace("-", "")[:8].upper()
    return f"FAC-{stamp.year}{stamp.month:02d}-{suffix or 'XXXXXX'}"


def contract_values(
    contract: Contract,
    tenant: Optional[Tenant],
    unit: Optional[Unit],
    building: Optional[Building],
    landlord: Optional[Landlord],
    today: date,
) -> Dict[str, str]:
    return {
        "bailleur_prenom": landlord.first_name if landlord else "",
        "bailleur_nom": landlord.last_name if landlord else "",
        "locataire_prenom": tenant.first_name if tenant else "",
        "locataire_nom": tenant.last_name if tenant else "",
        "locataire_cni": tenant.id_number if tenant else "",
        "locataire_adresse": tenant.address if tenant else "",
        "designation": f"{unit.name if unit else ''} - {building.name if building else ''}",
        "destination_local": "Habitation",
        "duree_annees": lease_duration_years(contract.start_date, contract.end_date),
        "date_debut": format_date(contract.start_date, missing="…"),
        "date_fin": format_date(contract.end_date, missing="…"),
        "loyer_mensuel": format_currency(contract.monthly_rent),
        "depot_garantie": format_currency(contract.deposit) if contract.deposit else "",
        "date_du_jour": format_date(today),
    }


def mandate_values(landlord: Landlord, today: date) -> Dict[str, str]:
    rate = landlord.commission_rate
    return {
        "bailleur_prenom": landlord.first_name,
        "bailleur_nom": landlord.last_name,
        "bailleur_cni": landlord.id_number,
        "bailleur_adresse": landlord.address,
        "bien_adresse": landlord.property_address,
        "bien_composition": landlord.property_description,
        "taux_honoraires": f"{rate:g}" if rate else "10",
        "date_debut": format_date(landlord.mandate_start or today),
        "duree_annees": f"{landlord.mandate_years:g}" if landlord.mandate_years else "1",
        "date_du_jour": format_date(today),
    }


def receipt_values(
    payment: PaymentRecord,
    tenant: Optional[Tenant],
    building: Optional[Building],
    today: date,
) -> Dict[str, str]:
    return {
        "reference": receipt_reference(payment),
        "date": format_date(payment.payment_date or today),
        "locataire_nom": tenant.full_name if tenant else "—",
        "adresse_logement": (building.address if building else "") or "—",
        "mois_concerne": format_month(payment.period_month),
    }


def build_contract_document(
    contract: Contract,
    tenant: Optional[Tenant],
    unit: Optional[Unit],
    building: Optional[Building],
    landlord: Optional[Landlord],
    today: Optional[date] = None,
    timestamp_ms: Optional[int] = None,
) -> RenderedDocument:
    """Lease contract. Raises TemplateNotFoundError when the template is unreadable."""
    template = load_template(CONTRACT_TEMPLATE)
    values = contract_values(contract, tenant, unit, building, landlord, today or date.today())
    body, dynamic_values = substitute_tokens(template, values)
    name = (tenant.last_name if tenant else "") or "locataire"
    filename = f"contrat-{name}-{timestamp_ms or _now_ms()}.pdf"
    return render_flowed_document(CONTRACT_TITLE, body, dynamic_values, filename)


def build_mandate_document(
    landlord: Landlord,
    today: Optional[date] = None,
    timestamp_ms: Optional[int] = None,
) -> RenderedDocument:
    """
    Management mandate.

    Unlike the contract and receipt, an unreadable template does not abort:
    the document degrades to a short untitled stub naming the landlord.
    """
    filename = f"mandat-{landlord.last_name or 'bailleur'}-{timestamp_ms or _now_ms()}.pdf"
    try:
        template = load_template(MANDATE_TEMPLATE)
    except TemplateNotFoundError:
        _LOG.warning("mandate template unavailable, rendering stub for landlord %s", landlord.id)
        return _mandate_stub(landlord, filename)

    body, dynamic_values = substitute_tokens(template, mandate_values(landlord, today or date.today()))
    if not body.strip():
        body = EMPTY_MANDATE_BODY
    return render_flowed_document(MANDATE_TITLE, body, dynamic_values, filename)


def _mandate_stub(landlord: Landlord, filename: str, geometry: PageGeometry = A4) -> RenderedDocument:
    layout = DocumentLayout(geometry)
    layout.advance(50 - geometry.top_y)
    text = f"Mandat de gérance\nPropriétaire: {landlord.first_name} {landlord.last_name}"
    layout.write_paragraph(text, size=12)
    return layout.finish(MANDATE_TITLE, filename)


def build_receipt_document(
    payment: PaymentRecord,
    contract: Optional[Contract],
    tenant: Optional[Tenant],
    building: Optional[Building],
    today: Optional[date] = None,
    timestamp_ms: Optional[int] = None,
) -> RenderedDocument:
    """
    Rent receipt: flowed header, amounts table, then the two standing clauses.
    Raises TemplateNotFoundError when the template is unreadable.
    """
    template = load_template(RECEIPT_TEMPLATE)
    body, dynamic_values = substitute_tokens(template, receipt_values(payment, tenant, building, today or date.today()))

    rent = contract.monthly_rent if contract else 0.0
    paid = payment.total_amount
    balance = max(rent - paid, 0.0)

    layout = DocumentLayout()
    layout.stamp_title(RECEIPT_TITLE)
    layout.flow(body.rstrip("\n"), dynamic_values)
    layout.advance(3)
    layout.write_table(
        ("Libellé", "Montant"),
        [
            ("Montant du loyer", format_currency(rent)),
            ("Montant payé", format_currency(paid)),
            ("Reliquat (reste à payer)", format_currency(balance)),
        ],
    )
    layout.advance(10)
    layout.write_runs([("Mentions", True)], line_height=6)
    for mention in RECEIPT_MENTIONS:
        layout.write_paragraph(f"- {mention}", line_height=5)

    name = (tenant.last_name if tenant else "") or "locataire"
    filename = f"facture-{name}-{timestamp_ms or _now_ms()}.pdf"
    return layout.finish(RECEIPT_TITLE, filename)
