from __future__ import annotations

import math
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

VM_MARKER = "Virtual Machines"

PRIMARY = "Primary"
REDUNDANT = "N+1 Redundancy"


def round_half_up(value: float) -> int:
    """Round halves towards +inf (Python's round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


class DeviceCategory(str, Enum):
    STANDARD = "standard"
    VIRTUALIZATION_HOST = "virtualization_host"


class DeviceType(BaseModel):
    model_config = ConfigDict(frozen=True)

    instances: float = Field(0.0, description="Average monitored instances per device.")
    count: int = Field(0, description="Number of devices of this type at the site.")
    additional_count: Optional[int] = Field(
        None,
        description="Management hosts (vCenters) for virtualization inventories. <= 0 means 1.",
    )
    methods: Dict[str, float] = Field(
        default_factory=dict, description="Protocol -> fraction of instances collected with it."
    )
    category: Optional[DeviceCategory] = Field(
        None,
        description="Explicit scoring category. If omitted, derived from the device-type name.",
    )


def is_virtualization_host(name: str, device: DeviceType) -> bool:
    """
    Explicit category wins; otherwise fall back to the name heuristic
    (any device type whose name contains "Virtual Machines").
    """
    if device.category is not None:
        return device.category == DeviceCategory.VIRTUALIZATION_HOST
    return VM_MARKER in name


class CollectorCapacity(BaseModel):
    model_config = ConfigDict(frozen=True)

    weight: float = Field(..., description="Max polling load units per collector.")
    eps: float = Field(..., description="Max log events per second per collector.")


class SiteLogs(BaseModel):
    model_config = ConfigDict(frozen=True)

    netflow: float = Field(0.0, description="NetFlow EPS.")
    syslog: float = Field(0.0, description="Syslog EPS.")
    traps: float = Field(0.0, description="SNMP trap EPS.")


class Site(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field("New Site", description="Site name.")
    devices: Dict[str, DeviceType] = Field(default_factory=dict)
    logs: SiteLogs = Field(default_factory=SiteLogs)


class SizingConfig(BaseModel):
    """Session-wide settings. Serialized with the camelCase names of the export format."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    max_load: float = Field(85, ge=1, le=100, alias="maxLoad", description="Max load % per collector.")
    method_weights: Dict[str, float] = Field(default_factory=dict, alias="methodWeights")
    device_defaults: Dict[str, DeviceType] = Field(default_factory=dict, alias="deviceDefaults")
    collector_capacities: Dict[str, CollectorCapacity] = Field(
        default_factory=dict, alias="collectorCapacities"
    )
    enable_polling_failover: bool = Field(False, alias="enablePollingFailover")
    enable_logs_failover: bool = Field(False, alias="enableLogsFailover")
    deployment_name: str = Field("New Deployment", alias="deploymentName")
    show_advanced_settings: bool = Field(False, alias="showAdvancedSettings")


class CollectorAllocation(BaseModel):
    size: str
    type: Literal["Primary", "N+1 Redundancy"]
    load: int = Field(..., description="Integer load percentage.")


class CollectorGroup(BaseModel):
    collectors: List[CollectorAllocation] = Field(default_factory=list)

    @property
    def primaries(self) -> List[CollectorAllocation]:
        return [c for c in self.collectors if c.type == PRIMARY]

    @property
    def redundant(self) -> List[CollectorAllocation]:
        return [c for c in self.collectors if c.type == REDUNDANT]

    @property
    def size(self) -> Optional[str]:
        return self.collectors[0].size if self.collectors else None

    @property
    def average_load(self) -> int:
        # Redundant units carry no load and are left out of the average.
        primaries = self.primaries
        if not primaries:
            return 0
        return round_half_up(sum(c.load for c in primaries) / len(primaries))


class AllocationResult(BaseModel):
    polling: CollectorGroup
    logs: CollectorGroup


class SiteSizing(BaseModel):
    site_name: str
    total_weight: float
    total_eps: float
    device_total: int
    allocation: AllocationResult

    @property
    def polling_average_load(self) -> int:
        return self.allocation.polling.average_load

    @property
    def logs_average_load(self) -> int:
        return self.allocation.logs.average_load


class DeploymentSizing(BaseModel):
    deployment_name: str
    sites: List[SiteSizing] = Field(default_factory=list)

    def collector_totals(self) -> Dict[str, Dict[str, int]]:
        """
        Collectors per dimension, keyed by "<size> <type>", e.g.
        {"polling": {"XXL Primary": 3, "XXL N+1 Redundancy": 1}, "logs": {...}}.
        """
        totals: Dict[str, Dict[str, int]] = {"polling": {}, "logs": {}}
        for s in self.sites:
            for dim, group in (("polling", s.allocation.polling), ("logs", s.allocation.logs)):
                for c in group.collectors:
                    key = f"{c.size} {c.type}"
                    totals[dim][key] = totals[dim].get(key, 0) + 1
        return totals
