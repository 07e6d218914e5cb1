"""Backend services."""

from services.payment_entry import UnknownContractError, record_payment
from services.portfolio_loader import BackendReadError, Portfolio, load_portfolio
from services.view_state import LoadFailed, LoadStarted, LoadSucceeded, ReportView, apply

__all__ = [
    "record_payment",
    "UnknownContractError",
    "load_portfolio",
    "Portfolio",
    "BackendReadError",
    "ReportView",
    "LoadStarted",
    "LoadSucceeded",
    "LoadFailed",
    "apply",
]
