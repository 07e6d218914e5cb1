"""Contract -> tenant / unit / building / landlord lookups for labelled report rows."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from models import Building, Contract, Landlord, Tenant, Unit


@dataclass(frozen=True)
class ContractLabels:
    """Display labels along one contract's lineage. Missing links give empty labels."""
    tenant_name: str = ""
    tenant_phone: str = ""
    unit_id: Optional[str] = None
    unit_name: str = ""
    building_id: Optional[str] = None
    building_name: str = ""
    landlord_id: Optional[str] = None
    landlord_name: str = ""


@dataclass
class Lineage:
    """Id-indexed reference data; build once per request with `from_records`."""
    contracts: Dict[str, Contract] = field(default_factory=dict)
    tenants: Dict[str, Tenant] = field(default_factory=dict)
    units: Dict[str, Unit] = field(default_factory=dict)
    buildings: Dict[str, Building] = field(default_factory=dict)
    landlords: Dict[str, Landlord] = field(default_factory=dict)

    @classmethod
    def from_records(
        cls,
        contracts: Sequence[Contract] = (),
        tenants: Sequence[Tenant] = (),
        units: Sequence[Unit] = (),
        buildings: Sequence[Building] = (),
        landlords: Sequence[Landlord] = (),
    ) -> "Lineage":
        return cls(
            contracts={c.id: c for c in contracts},
            tenants={t.id: t for t in tenants},
            units={u.id: u for u in units},
            buildings={b.id: b for b in buildings},
            landlords={landlord.id: landlord for landlord in landlords},
        )

    def unit_of(self, contract: Contract) -> Optional[Unit]:
        return self.units.get(contract.unit_id or "")

    def building_of(self, contract: Contract) -> Optional[Building]:
        unit = self.unit_of(contract)
        return self.buildings.get(unit.building_id or "") if unit else None

    def labels(self, contract: Optional[Contract]) -> ContractLabels:
        if contract is None:
            return ContractLabels()
        tenant = self.tenants.get(contract.tenant_id or "")
        unit = self.unit_of(contract)
        building = self.building_of(contract)
        landlord = self.landlords.get(building.landlord_id or "") if building else None
        return ContractLabels(
            tenant_name=tenant.full_name if tenant else "",
            tenant_phone=tenant.phone if tenant else "",
            unit_id=unit.id if unit else None,
            unit_name=unit.name if unit else "",
            building_id=building.id if building else None,
            building_name=building.name if building else "",
            landlord_id=landlord.id if landlord else None,
            landlord_name=landlord.full_name if landlord else "",
        )

    def labels_for_id(self, contract_id: Optional[str]) -> ContractLabels:
        return self.labels(self.contracts.get(contract_id or ""))
