"""Report data builders and HTML rendering (no browser needed)."""
from datetime import date

from brands import BRANDS, current_brand, get_brand
from engine.aggregation import annual_totals
from models import (
    AgencyStatement,
    BuildingCommission,
    BuildingReport,
    CommissionLine,
    CommissionSummary,
    LandlordBuildingLine,
    LandlordStatement,
    MonthlyAggregate,
)
from models_branding import AgencyBrand
from reporting.report_builder import build_report_html
from reporting.report_data import (
    accounting_report_data,
    agency_report_data,
    buildings_report_data,
    commissions_report_data,
    landlord_report_data,
)

MARCH = date(2025, 3, 1)


def test_agency_report_data() -> None:
    data = agency_report_data(AgencyStatement(
        month=MARCH, rent_collected=200000, rent_unpaid=50000, management_fees=20000,
        other_revenue=15000, total_revenue=35000, expenses=5000, agency_balance=30000,
    ))
    assert data["filename"] == "bilan-entreprise-2025-03.pdf"
    assert data["meta_lines"] == ["Période : mars 2025"]
    section = data["sections"][0]
    assert ["Total loyers perçus", "200 000 F CFA"] in section["rows"]
    assert section["total_row"] == ["SOLDE NET", "30 000 F CFA"]


def test_landlord_report_data_has_amount_to_pay() -> None:
    statement = LandlordStatement(
        landlord_id="b1", landlord_name="Awa Diop",
        buildings=[LandlordBuildingLine(building_id="i1", building_name="Palmiers", rent_collected=100000,
                                        management_fees=10000, net_payout=90000)],
        rent_collected=100000, management_fees=10000, net_payout=90000,
    )
    data = landlord_report_data(statement, MARCH)
    assert data["filename"] == "bilan-Diop-2025-03.pdf"
    assert data["sections"][0]["rows"] == [["Palmiers", "100 000 F CFA", "0 F CFA", "10 000 F CFA", "90 000 F CFA"]]
    assert ("MONTANT À VERSER", "90 000 F CFA", True) in data["summary"]


def test_buildings_report_data_totals_row() -> None:
    reports = [
        BuildingReport(building_id="i1", building_name="A", rent_collected=100000, management_fees=10000,
                       net_payout=90000, unit_count=2, occupied_units=1, occupancy_rate=0.5),
        BuildingReport(building_id="i2", building_name="B", rent_collected=50000, rent_unpaid=20000,
                       management_fees=5000, net_payout=45000),
    ]
    data = buildings_report_data(reports, MARCH)
    section = data["sections"][0]
    assert section["rows"][0][-1] == "50,0 %"
    assert section["total_row"][2] == "150 000 F CFA"
    assert section["total_row"][5] == "135 000 F CFA"
    assert buildings_report_data([], MARCH)["sections"][0]["total_row"] is None


def test_accounting_report_rounds_monthly_values() -> None:
    series = [MonthlyAggregate(month=date(2025, m, 1)) for m in range(1, 13)]
    series[0] = MonthlyAggregate(month=date(2025, 1, 1), management_fees=1234.6, expenses=0.4, net_balance=1234.2)
    data = accounting_report_data(series, annual_totals(series))
    assert data["filename"] == "comptabilite-2025.pdf"
    assert data["sections"][0]["rows"][0] == ["Jan", "1 235 F CFA", "0 F CFA", "1 234 F CFA"]
    assert len(data["sections"][0]["rows"]) == 12


def test_commissions_report_data() -> None:
    summary = CommissionSummary(month=MARCH, total=20000, count=2, average=10000,
                                by_building=[BuildingCommission(building_name="-", commission=20000)],
                                payments=[CommissionLine(payment_id="p1", tenant_name="Fatou Ndiaye", unit_name="A1",
                                                         building_name="Palmiers", total_amount=100000,
                                                         commission=10000)])
    data = commissions_report_data(summary)
    assert data["filename"] == "commissions-2025-03.pdf"
    assert data["sections"][0]["rows"][1] == ["Nombre de paiements", "2"]
    assert data["sections"][1]["rows"] == [["-", "20 000 F CFA"]]
    assert data["sections"][2]["heading"] == "Détails"
    assert data["sections"][2]["rows"] == [["Fatou Ndiaye", "A1", "Palmiers", "100 000 F CFA", "10 000 F CFA"]]


def test_report_html_applies_brand_and_escapes() -> None:
    brand = AgencyBrand(brand_id="t", company_name="Immo <Test>", primary_color="#123456", address="Dakar")
    statement = LandlordStatement(landlord_id="b1", landlord_name="Awa <Diop>")
    html_out = build_report_html(landlord_report_data(statement, MARCH), brand)
    assert "#123456" in html_out
    assert "Immo &lt;Test&gt;" in html_out
    assert "Bailleur : Awa &lt;Diop&gt;" in html_out
    assert "Aucune donnée pour cette période." in html_out
    assert '<li class="strong">MONTANT À VERSER : 0 F CFA</li>' in html_out
    assert "__" not in html_out


def test_current_brand_follows_agency_id(monkeypatch) -> None:
    monkeypatch.setenv("AGENCY_ID", "sample")
    assert current_brand() is BRANDS["sample"]
    monkeypatch.setenv("AGENCY_ID", "unknown")
    assert current_brand().brand_id == "default"
    assert get_brand("nope") is None
