"""In-repo agency letterhead registry; AGENCY_ID selects the active one."""
from __future__ import annotations

import os

from models_branding import AgencyBrand

DEFAULT_BRAND_ID = "default"

BRANDS: dict[str, AgencyBrand] = {
    "default": AgencyBrand(
        brand_id="default",
        company_name="Agence Immobilière",
        footer_text="Gestion locative",
        page_margin_mm=18,
        table_density="standard",
    ),
    "sample": AgencyBrand(
        brand_id="sample",
        company_name="Sample Immo",
        primary_color="#2c5282",
        secondary_color="#718096",
        font_family="'Segoe UI', system-ui, sans-serif",
        footer_text="Sample Immo · Gestion locative et syndic",
        address="Avenue Cheikh Anta Diop, Dakar",
        contact_phone="+221 33 000 00 00",
        support_email="contact@sample-immo.sn",
        table_density="compact",
    ),
}


def get_brand(brand_id: str) -> AgencyBrand | None:
    return BRANDS.get(brand_id)


def current_brand() -> AgencyBrand:
    """Brand named by AGENCY_ID, falling back to the default letterhead."""
    brand_id = (os.environ.get("AGENCY_ID") or "").strip() or DEFAULT_BRAND_ID
    return get_brand(brand_id) or BRANDS[DEFAULT_BRAND_ID]
