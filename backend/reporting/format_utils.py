"""Consistent formatting for report numbers and dates (fr-FR, XOF). Never render raw floats."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

CURRENCY_SUFFIX = "F CFA"

MONTH_NAMES_FR = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]

MONTH_ABBR_FR = ["Jan", "Fév", "Mar", "Avr", "Mai", "Juin", "Juil", "Aoû", "Sep", "Oct", "Nov", "Déc"]


def _group_thousands(digits: str) -> str:
    out = []
    while len(digits) > 3:
        out.insert(0, digits[-3:])
        digits = digits[:-3]
    out.insert(0, digits)
    return " ".join(out)


def format_number(value: float, max_decimals: int = 3) -> str:
    """fr-FR grouping: space thousands separator, comma decimals, trailing zeros dropped."""
    negative = value < 0
    text = f"{abs(value):.{max_decimals}f}"
    whole, _, frac = text.partition(".")
    frac = frac.rstrip("0")
    out = _group_thousands(whole)
    if frac:
        out = f"{out},{frac}"
    if negative and (whole.strip("0") or frac):
        out = f"-{out}"
    return out


def format_currency(amount: Any) -> str:
    """
    "75 000 F CFA". Accepts numbers or strings with stray slashes/spaces.
    Falsy input (0, "", None) renders as "0 F CFA".
    """
    if not amount:
        return f"0 {CURRENCY_SUFFIX}"
    if isinstance(amount, str):
        cleaned = "".join(amount.replace("/", "").replace(",", ".").split())
        try:
            num = float(cleaned)
        except ValueError:
            return f"0 {CURRENCY_SUFFIX}"
    else:
        num = float(amount)
    return f"{format_number(num)} {CURRENCY_SUFFIX}"


def format_percent(ratio: float, precision: int = 1) -> str:
    """Ratio in [0, 1] to "66,7 %"."""
    return f"{ratio * 100:.{precision}f}".replace(".", ",") + " %"


def format_date(d: Any, missing: str = "—") -> str:
    """dd/mm/yyyy, as fr-FR toLocaleDateString renders it."""
    if d is None:
        return missing
    if isinstance(d, datetime):
        d = d.date()
    if isinstance(d, date):
        return d.strftime("%d/%m/%Y")
    text = str(d).strip()
    if not text:
        return missing
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(text[:10], fmt).date().strftime("%d/%m/%Y")
        except ValueError:
            continue
    return text


def format_month(d: date | None, missing: str = "—") -> str:
    """Long month label: "mars 2025"."""
    if d is None:
        return missing
    return f"{MONTH_NAMES_FR[d.month - 1]} {d.year}"
