from __future__ import annotations

from typing import Optional, Tuple

DEFAULT_COMMISSION_RATE = 10.0


def resolve_commission_rate(contract_rate: Optional[float], landlord_rate: Optional[float]) -> float:
    """Contract rate first, then the landlord's mandate rate, then the agency default."""
    if contract_rate is not None:
        return float(contract_rate)
    if landlord_rate is not None:
        return float(landlord_rate)
    return DEFAULT_COMMISSION_RATE


def split_payment(total_amount: float, commission_rate: float) -> Tuple[float, float]:
    """
    Split a rent payment into (agency_share, owner_share) at entry time.

    owner_share is derived by subtraction so the two shares sum to
    total_amount.
    """
    if total_amount < 0:
        raise ValueError("total_amount must be >= 0")
    if not 0 <= commission_rate <= 100:
        raise ValueError("commission_rate must be between 0 and 100")
    agency_share = total_amount * commission_rate / 100.0
    owner_share = total_amount - agency_share
    return agency_share, owner_share
