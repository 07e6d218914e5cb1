"""
Render normalized report data (see report_data) into the branded HTML shell,
then to PDF via Playwright.
"""
from __future__ import annotations

import html
from typing import Any

from models_branding import AgencyBrand

from reporting.templating import load_template

REPORT_TEMPLATE = "report.html"


def _escape(s: Any) -> str:
    return html.escape(str(s), quote=True)


def _is_numeric_cell(value: str) -> bool:
    return value.endswith("F CFA") or value.endswith("%") or value.replace(" ", "").isdigit()


def _cell(value: str, tag: str = "td") -> str:
    cls = ' class="num"' if _is_numeric_cell(value) else ""
    return f"<{tag}{cls}>{_escape(value)}</{tag}>"


def _build_table(section: dict[str, Any]) -> str:
    head = "".join(f"<th>{_escape(h)}</th>" for h in section["head"])
    body = "".join("<tr>" + "".join(_cell(v) for v in row) + "</tr>" for row in section["rows"])
    if not section["rows"]:
        body = f'<tr><td colspan="{len(section["head"])}">Aucune donnée pour cette période.</td></tr>'
    total_row = section.get("total_row")
    if total_row:
        body += '<tr class="total">' + "".join(_cell(v) for v in total_row) + "</tr>"
    heading = f"<h2>{_escape(section['heading'])}</h2>" if section.get("heading") else ""
    return f'<section>{heading}<table class="data"><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table></section>'


def _build_summary(summary: list[tuple[str, str, bool]]) -> str:
    if not summary:
        return ""
    items = "".join(
        f'<li class="{"strong" if strong else ""}">{_escape(label)} : {_escape(value)}</li>'
        for label, value, strong in summary
    )
    return f'<h2>Totaux</h2><ul class="summary">{items}</ul>'


def _build_contact(brand: AgencyBrand) -> str:
    parts = [p for p in (brand.address, brand.contact_phone, brand.support_email) if p]
    return "<br/>".join(_escape(p) for p in parts)


def build_report_html(report_data: dict[str, Any], brand: AgencyBrand) -> str:
    """Full HTML document for one report. The template is read on every call."""
    shell = load_template(REPORT_TEMPLATE)
    font_family = brand.font_family
    font_family_css = font_family if font_family.startswith("'") or " " in font_family else f"'{font_family}', sans-serif"
    meta_html = "".join(f'<p class="meta">{_escape(line)}</p>' for line in report_data.get("meta_lines", []))
    sections_html = "".join(_build_table(s) for s in report_data.get("sections", []))
    footer_text = brand.footer_text or brand.company_name

    return (
        shell.replace("__PRIMARY_COLOR__", brand.primary_color)
        .replace("__SECONDARY_COLOR__", brand.secondary_color)
        .replace("__FONT_FAMILY_CSS__", font_family_css)
        .replace("__TABLE_DENSITY_CLASS__", f"density-{brand.table_density}")
        .replace("__COMPANY_NAME__", _escape(brand.company_name))
        .replace("__CONTACT_HTML__", _build_contact(brand))
        .replace("__REPORT_TITLE__", _escape(report_data["title"]))
        .replace("__META_HTML__", meta_html)
        .replace("__SECTIONS_HTML__", sections_html)
        .replace("__SUMMARY_HTML__", _build_summary(report_data.get("summary", [])))
        .replace("__FOOTER_TEXT__", _escape(footer_text))
        .replace("__DISCLAIMER_TEXT__", _escape(brand.disclaimer_text))
    )


def html_to_pdf(html_content: str, page_margin_mm: int = 18) -> bytes:
    """Render HTML to PDF using Playwright. Uses page_margin_mm for margins."""
    from playwright.sync_api import sync_playwright

    margin_in = f"{page_margin_mm / 25.4:.2f}in"
    margin = {"top": margin_in, "bottom": margin_in, "left": margin_in, "right": margin_in}
    with sync_playwright() as p:
        browser = p.chromium.launch()
        page = browser.new_page()
        page.set_content(html_content, wait_until="networkidle")
        page.emulate_media(media="print")
        pdf_bytes = page.pdf(
            format="A4",
            print_background=True,
            margin=margin,
        )
        browser.close()
    return pdf_bytes


def build_report_pdf(report_data: dict[str, Any], brand: AgencyBrand) -> bytes:
    """Render HTML, then PDF. Returns PDF bytes."""
    return html_to_pdf(build_report_html(report_data, brand), page_margin_mm=brand.page_margin_mm)
