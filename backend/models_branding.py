"""Agency letterhead configuration for the financial report exports."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class AgencyBrand(BaseModel):
    """Letterhead, colours and footer applied to every exported report."""
    brand_id: str
    company_name: str
    primary_color: str = "#1e3a5f"
    secondary_color: str = "#4a5568"
    font_family: str = "'Helvetica Neue', Arial, sans-serif"
    footer_text: str | None = None
    disclaimer_text: str = "Document généré automatiquement. Les montants sont exprimés en francs CFA (XOF)."
    address: str | None = None
    contact_phone: str | None = None
    support_email: str | None = None
    page_margin_mm: int = 18
    table_density: Literal["compact", "standard", "spacious"] = "standard"
