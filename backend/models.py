from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class PaymentStatus(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"
    PARTIAL = "partial"


class UnitStatus(str, Enum):
    VACANT = "vacant"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


# Backend rows use the French enum spellings.
_PAYMENT_STATUS_ALIASES = {
    "paye": PaymentStatus.PAID,
    "payé": PaymentStatus.PAID,
    "impaye": PaymentStatus.UNPAID,
    "impayé": PaymentStatus.UNPAID,
    "partiel": PaymentStatus.PARTIAL,
}

_UNIT_STATUS_ALIASES = {
    "libre": UnitStatus.VACANT,
    "loue": UnitStatus.OCCUPIED,
    "loué": UnitStatus.OCCUPIED,
}


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class BackendRecord(BaseModel):
    """Base for rows read from the backend: accept English or backend column names."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class Landlord(BackendRecord):
    id: str
    first_name: str = Field(default="", validation_alias=_alias("first_name", "prenom"))
    last_name: str = Field(default="", validation_alias=_alias("last_name", "nom"))
    commission_rate: float = Field(
        default=10.0, ge=0.0, le=100.0,
        validation_alias=_alias("commission_rate", "taux_honoraires"),
    )
    active: bool = Field(default=True, validation_alias=_alias("active", "actif"))
    # Management mandate fields
    id_number: str = Field(default="", validation_alias=_alias("id_number", "piece_identite"))
    address: str = Field(default="", validation_alias=_alias("address", "adresse"))
    property_address: str = Field(default="", validation_alias=_alias("property_address", "bien_adresse"))
    property_description: str = Field(
        default="", validation_alias=_alias("property_description", "bien_composition"),
    )
    mandate_start: Optional[date] = Field(default=None, validation_alias=_alias("mandate_start", "date_debut"))
    mandate_years: Optional[float] = Field(default=None, validation_alias=_alias("mandate_years", "duree_annees"))

    @field_validator("first_name", "last_name", "id_number", "address", "property_address",
                     "property_description", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("commission_rate", mode="before")
    @classmethod
    def default_rate(cls, v: Any) -> Any:
        return 10.0 if v in (None, "") else v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Building(BackendRecord):
    id: str
    name: str = Field(default="", validation_alias=_alias("name", "nom"))
    landlord_id: Optional[str] = Field(default=None, validation_alias=_alias("landlord_id", "bailleur_id"))
    unit_count: int = Field(default=0, ge=0, validation_alias=_alias("unit_count", "nombre_unites"))
    address: str = Field(default="", validation_alias=_alias("address", "adresse"))
    active: bool = Field(default=True, validation_alias=_alias("active", "actif"))

    @field_validator("unit_count", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("name", "address", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class Unit(BackendRecord):
    id: str
    name: str = Field(default="", validation_alias=_alias("name", "nom"))
    building_id: Optional[str] = Field(default=None, validation_alias=_alias("building_id", "immeuble_id"))
    base_rent: float = Field(default=0.0, ge=0.0, validation_alias=_alias("base_rent", "loyer_base"))
    status: UnitStatus = Field(default=UnitStatus.VACANT, validation_alias=_alias("status", "statut"))

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _UNIT_STATUS_ALIASES.get(v.strip().lower(), v.strip().lower())
        return v

    @field_validator("base_rent", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0.0 if v is None else v


class Tenant(BackendRecord):
    id: str
    first_name: str = Field(default="", validation_alias=_alias("first_name", "prenom"))
    last_name: str = Field(default="", validation_alias=_alias("last_name", "nom"))
    id_number: str = Field(default="", validation_alias=_alias("id_number", "piece_identite"))
    address: str = Field(default="", validation_alias=_alias("address", "adresse_personnelle"))
    phone: str = Field(default="", validation_alias=_alias("phone", "telephone"))

    @field_validator("first_name", "last_name", "id_number", "address", "phone", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Contract(BackendRecord):
    id: str
    tenant_id: Optional[str] = Field(default=None, validation_alias=_alias("tenant_id", "locataire_id"))
    unit_id: Optional[str] = Field(default=None, validation_alias=_alias("unit_id", "unite_id"))
    start_date: Optional[date] = Field(default=None, validation_alias=_alias("start_date", "date_debut"))
    end_date: Optional[date] = Field(default=None, validation_alias=_alias("end_date", "date_fin"))
    monthly_rent: float = Field(default=0.0, ge=0.0, validation_alias=_alias("monthly_rent", "loyer_mensuel"))
    deposit: Optional[float] = Field(default=None, validation_alias=_alias("deposit", "caution"))
    commission_rate: Optional[float] = Field(
        default=None, ge=0.0, le=100.0,
        validation_alias=_alias("commission_rate", "pourcentage_agence"),
    )
    status: str = Field(default="actif", validation_alias=_alias("status", "statut"))

    @field_validator("monthly_rent", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @property
    def is_active(self) -> bool:
        return self.status.strip().lower() in ("actif", "active")


class PaymentRecord(BackendRecord):
    """
    One rent payment. building_id is the lineage resolved through
    contract -> unit -> building; None when any link is broken.
    """
    id: str
    contract_id: Optional[str] = Field(default=None, validation_alias=_alias("contract_id", "contrat_id"))
    unit_id: Optional[str] = Field(default=None, validation_alias=_alias("unit_id", "unite_id"))
    building_id: Optional[str] = Field(default=None, validation_alias=_alias("building_id", "immeuble_id"))
    total_amount: float = Field(validation_alias=_alias("total_amount", "montant_total"))
    agency_share: float = Field(default=0.0, validation_alias=_alias("agency_share", "part_agence"))
    owner_share: float = Field(default=0.0, validation_alias=_alias("owner_share", "part_bailleur"))
    period_month: date = Field(validation_alias=_alias("period_month", "mois_concerne"))
    payment_date: Optional[date] = Field(default=None, validation_alias=_alias("payment_date", "date_paiement"))
    status: PaymentStatus = Field(validation_alias=_alias("status", "statut"))
    reference: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _PAYMENT_STATUS_ALIASES.get(v.strip().lower(), v.strip().lower())
        return v

    @field_validator("agency_share", "owner_share", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @field_validator("period_month", mode="before")
    @classmethod
    def accept_year_month(cls, v: Any) -> Any:
        # "2025-03" from a month picker
        if isinstance(v, str) and len(v.strip()) == 7:
            return v.strip() + "-01"
        return v

    @field_validator("period_month")
    @classmethod
    def first_of_month(cls, v: date) -> date:
        return v.replace(day=1)


class Expense(BackendRecord):
    id: str
    amount: float = Field(validation_alias=_alias("amount", "montant"))
    expense_date: date = Field(validation_alias=_alias("expense_date", "date", "date_depense"))
    category: str = Field(default="", validation_alias=_alias("category", "categorie"))
    building_id: Optional[str] = Field(default=None, validation_alias=_alias("building_id", "immeuble_id"))

    @field_validator("category", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class Revenue(BackendRecord):
    """Agency revenue other than rent commissions."""
    id: str
    amount: float = Field(validation_alias=_alias("amount", "montant"))
    revenue_date: date = Field(validation_alias=_alias("revenue_date", "date", "date_revenu"))
    label: str = Field(default="", validation_alias=_alias("label", "libelle", "source"))

    @field_validator("label", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


# --- Derived summaries (never persisted) ---

class MonthlyAggregate(BaseModel):
    """Portfolio-wide rollup for one calendar month."""
    month: date
    rent_collected: float = 0.0
    rent_unpaid: float = 0.0
    management_fees: float = 0.0
    expenses: float = 0.0
    net_balance: float = 0.0


class BuildingReport(BaseModel):
    building_id: str
    building_name: str
    landlord_id: Optional[str] = None
    landlord_name: str = ""
    rent_collected: float = 0.0
    rent_unpaid: float = 0.0
    management_fees: float = 0.0
    net_payout: float = 0.0
    unit_count: int = 0
    occupied_units: int = 0
    occupancy_rate: float = Field(default=0.0, description="occupied_units / unit_count, 0 when no units")


class LandlordBuildingLine(BaseModel):
    building_id: str
    building_name: str
    rent_collected: float = 0.0
    rent_unpaid: float = 0.0
    management_fees: float = 0.0
    net_payout: float = 0.0


class LandlordStatement(BaseModel):
    landlord_id: str
    landlord_name: str
    buildings: List[LandlordBuildingLine] = Field(default_factory=list)
    rent_collected: float = 0.0
    rent_unpaid: float = 0.0
    management_fees: float = 0.0
    net_payout: float = 0.0


class AgencyStatement(BaseModel):
    """Agency income statement for one month: commissions plus other revenue, less expenses."""
    month: date
    rent_collected: float = 0.0
    rent_unpaid: float = 0.0
    management_fees: float = 0.0
    other_revenue: float = 0.0
    total_revenue: float = 0.0
    expenses: float = 0.0
    agency_balance: float = 0.0


class AnnualTotals(BaseModel):
    year: int
    management_fees: float = 0.0
    expenses: float = 0.0
    net_balance: float = 0.0


class BuildingCommission(BaseModel):
    building_name: str
    commission: float = 0.0


class CommissionLine(BaseModel):
    """One paid payment behind the commission total, newest payment date first."""
    payment_id: str
    payment_date: Optional[date] = None
    tenant_name: str = "-"
    unit_name: str = "-"
    building_name: str = "-"
    landlord_name: str = "-"
    total_amount: float = 0.0
    commission: float = 0.0


class CommissionSummary(BaseModel):
    month: date
    total: float = 0.0
    count: int = 0
    average: float = 0.0
    by_building: List[BuildingCommission] = Field(default_factory=list)
    payments: List[CommissionLine] = Field(default_factory=list)


class UnpaidRent(BaseModel):
    contract_id: str
    period_month: date
    amount_due: float = 0.0
    has_payment: bool = Field(default=False, description="True when an unpaid payment row exists")
    tenant_name: str = ""
    tenant_phone: str = ""
    unit_name: str = ""
    building_name: str = ""
    landlord_id: Optional[str] = None
    landlord_name: str = ""


class ContractMatch(BaseModel):
    """A contract row from the advanced search, with its lineage labels."""
    contract_id: str
    tenant_name: str = ""
    tenant_phone: str = ""
    unit_id: Optional[str] = None
    unit_name: str = ""
    unit_status: Optional[UnitStatus] = None
    building_id: Optional[str] = None
    building_name: str = ""
    landlord_id: Optional[str] = None
    landlord_name: str = ""
    monthly_rent: float = 0.0
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: str = ""
    last_payment_status: Optional[PaymentStatus] = Field(
        default=None, description="Status of the most recently created payment; None when there is none",
    )


class DashboardStats(BaseModel):
    landlords: int = 0
    buildings: int = 0
    units: int = 0
    vacant_units: int = 0
    occupied_units: int = 0
    tenants: int = 0
    active_contracts: int = 0
    rent_collected_month: float = 0.0
    rent_unpaid_month: float = 0.0
    occupancy_rate: float = 0.0


# --- Request models ---

class PaymentCreate(BaseModel):
    """Payment entry form. The commission split is computed server-side."""
    model_config = ConfigDict(populate_by_name=True)

    contract_id: str = Field(min_length=1, validation_alias=_alias("contract_id", "contrat_id"))
    total_amount: float = Field(gt=0.0, validation_alias=_alias("total_amount", "montant_total"))
    period_month: date = Field(validation_alias=_alias("period_month", "mois_concerne"))
    payment_date: Optional[date] = Field(default=None, validation_alias=_alias("payment_date", "date_paiement"))
    payment_method: str = Field(default="especes", validation_alias=_alias("payment_method", "mode_paiement"))
    status: PaymentStatus = Field(default=PaymentStatus.PAID, validation_alias=_alias("status", "statut"))
    reference: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _PAYMENT_STATUS_ALIASES.get(v.strip().lower(), v.strip().lower())
        return v

    @field_validator("period_month", mode="before")
    @classmethod
    def accept_year_month(cls, v: Any) -> Any:
        if isinstance(v, str) and len(v.strip()) == 7:
            return v.strip() + "-01"
        return v

    @field_validator("reference", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ContractFilters(BaseModel):
    """
    Advanced contract search. Every criterion is optional and they combine
    with AND; landlord, building and unit narrow the same lineage.
    Rent and start-date bounds are inclusive.
    """
    landlord_id: Optional[str] = None
    building_id: Optional[str] = None
    unit_id: Optional[str] = None
    unit_status: Optional[UnitStatus] = None
    payment_status: Optional[PaymentStatus] = None
    rent_min: Optional[float] = Field(default=None, ge=0.0)
    rent_max: Optional[float] = Field(default=None, ge=0.0)
    start_from: Optional[date] = None
    start_to: Optional[date] = None

    @field_validator("landlord_id", "building_id", "unit_id", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("unit_status", mode="before")
    @classmethod
    def normalize_unit_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            key = v.strip().lower()
            return None if not key else _UNIT_STATUS_ALIASES.get(key, key)
        return v

    @field_validator("payment_status", mode="before")
    @classmethod
    def normalize_payment_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            key = v.strip().lower()
            return None if not key else _PAYMENT_STATUS_ALIASES.get(key, key)
        return v


class MonthlyComputeRequest(BaseModel):
    """Stateless compute: caller supplies the fetched rows."""
    month: str = Field(description="YYYY-MM")
    payments: List[PaymentRecord] = Field(default_factory=list)
    expenses: List[Expense] = Field(default_factory=list)


class AnnualComputeRequest(BaseModel):
    year: int = Field(ge=1900, le=9999)
    payments: List[PaymentRecord] = Field(default_factory=list)
    expenses: List[Expense] = Field(default_factory=list)


class BuildingComputeRequest(BaseModel):
    month: str = Field(description="YYYY-MM")
    payments: List[PaymentRecord] = Field(default_factory=list)
    buildings: List[Building] = Field(default_factory=list)
    units: List[Unit] = Field(default_factory=list)
    landlords: List[Landlord] = Field(default_factory=list)
    landlord_id: Optional[str] = None


class LandlordComputeRequest(BaseModel):
    month: str = Field(description="YYYY-MM")
    payments: List[PaymentRecord] = Field(default_factory=list)
    buildings: List[Building] = Field(default_factory=list)
    landlords: List[Landlord] = Field(default_factory=list)
