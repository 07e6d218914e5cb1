"""Payment entry: the commission split is computed once here and stored with the payment."""
from __future__ import annotations

import logging
import uuid
from datetime import date, datetime

from sqlalchemy.orm import Session

import audit
from db.models import Bailleur, Contrat, Immeuble, Paiement, Unite
from engine.commission import resolve_commission_rate, split_payment
from models import PaymentCreate, PaymentRecord

_LOG = logging.getLogger("uvicorn.error")

# Backend rows keep the French enum spellings.
_BACKEND_STATUS = {"paid": "paye", "unpaid": "impaye", "partial": "partiel"}


class UnknownContractError(ValueError):
    """The payment references a contract that does not exist."""


def _landlord_rate(db: Session, contrat: Contrat) -> float | None:
    unite = db.get(Unite, contrat.unite_id) if contrat.unite_id else None
    immeuble = db.get(Immeuble, unite.immeuble_id) if unite is not None and unite.immeuble_id else None
    bailleur = db.get(Bailleur, immeuble.bailleur_id) if immeuble is not None and immeuble.bailleur_id else None
    return bailleur.taux_honoraires if bailleur is not None else None


def record_payment(db: Session, payload: PaymentCreate, actor_id: str = audit.SYSTEM_ACTOR) -> PaymentRecord:
    """
    Insert a payment with its agency/owner split and an audit row.

    payload is already validated (pydantic), so nothing reaches the database
    for a malformed entry. Raises UnknownContractError when contract_id does
    not resolve.
    """
    contrat = db.get(Contrat, payload.contract_id)
    if contrat is None:
        raise UnknownContractError(f"Unknown contract: {payload.contract_id}")

    rate = resolve_commission_rate(contrat.pourcentage_agence, _landlord_rate(db, contrat))
    agency_share, owner_share = split_payment(payload.total_amount, rate)
    period = payload.period_month.replace(day=1)

    row = Paiement(
        id=str(uuid.uuid4()),
        contrat_id=contrat.id,
        montant_total=payload.total_amount,
        part_agence=agency_share,
        part_bailleur=owner_share,
        mois_concerne=period,
        date_paiement=payload.payment_date or date.today(),
        mode_paiement=payload.payment_method,
        statut=_BACKEND_STATUS[payload.status.value],
        reference=payload.reference,
        created_at=datetime.utcnow(),
    )
    db.add(row)
    audit.log(
        db,
        action="payment.create",
        resource_type="paiement",
        resource_id=row.id,
        details={
            "contract_id": contrat.id,
            "period_month": period.isoformat(),
            "total_amount": payload.total_amount,
            "commission_rate": rate,
        },
        actor_id=actor_id,
        commit=False,
    )
    db.commit()
    db.refresh(row)
    _LOG.info("payment recorded id=%s contract=%s period=%s amount=%s", row.id, contrat.id, period, row.montant_total)

    unite = db.get(Unite, contrat.unite_id) if contrat.unite_id else None
    immeuble_id = unite.immeuble_id if unite is not None else None
    if immeuble_id is not None and db.get(Immeuble, immeuble_id) is None:
        immeuble_id = None
    return PaymentRecord(
        id=row.id,
        contract_id=row.contrat_id,
        unit_id=unite.id if unite is not None else None,
        building_id=immeuble_id,
        total_amount=row.montant_total,
        agency_share=row.part_agence,
        owner_share=row.part_bailleur,
        period_month=row.mois_concerne,
        payment_date=row.date_paiement,
        status=payload.status,
        reference=row.reference,
        created_at=row.created_at,
    )
