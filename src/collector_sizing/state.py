"""
Configuration & site reducers
=============================

Every edit the UI can make, as a pure function: snapshots in, new snapshots
out. Inputs are never mutated, so a previous Config/Site can always be kept
for undo or comparison.

Rejected edits raise ConfigurationError with a message suitable for display.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from .defaults import new_device_type
from .errors import ConfigurationError
from .models import DeviceCategory, DeviceType, Site, SiteLogs, SizingConfig

logger = logging.getLogger(__name__)

RATIO_TOLERANCE = 0.001


# ---------------------------------------------------------------------------
# Sites
# ---------------------------------------------------------------------------

def _zeroed_devices(config: SizingConfig) -> Dict[str, DeviceType]:
    return {name: d.model_copy(update={"count": 0}) for name, d in config.device_defaults.items()}


def new_site(config: SizingConfig, sites: Sequence[Site] = (), name: Optional[str] = None) -> Site:
    """A site seeded from the device defaults, every count and log counter at 0."""
    return Site(
        name=name or f"Site {len(sites) + 1}",
        devices=_zeroed_devices(config),
        logs=SiteLogs(),
    )


def add_site(config: SizingConfig, sites: Sequence[Site], name: Optional[str] = None) -> List[Site]:
    return [*sites, new_site(config, sites, name)]


def remove_site(sites: Sequence[Site], index: int) -> List[Site]:
    if not 0 <= index < len(sites):
        raise ConfigurationError(f"No site at position {index}")
    return [s for i, s in enumerate(sites) if i != index]


def replace_site(sites: Sequence[Site], index: int, site: Site) -> List[Site]:
    if not 0 <= index < len(sites):
        raise ConfigurationError(f"No site at position {index}")
    return [site if i == index else s for i, s in enumerate(sites)]


def rename_site(site: Site, name: str) -> Site:
    return site.model_copy(update={"name": name})


def reset_site_devices(site: Site, config: SizingConfig) -> Site:
    return site.model_copy(update={"devices": _zeroed_devices(config)})


def reset_site_logs(site: Site) -> Site:
    return site.model_copy(update={"logs": SiteLogs()})


def set_device_count(
    site: Site,
    device_type: str,
    count: int,
    additional_count: Optional[int] = None,
) -> Site:
    if device_type not in site.devices:
        raise ConfigurationError(f"Unknown device type: {device_type}")
    update: Dict[str, object] = {"count": count}
    if additional_count is not None:
        update["additional_count"] = additional_count
    devices = dict(site.devices)
    devices[device_type] = devices[device_type].model_copy(update=update)
    return site.model_copy(update={"devices": devices})


def set_site_logs(
    site: Site,
    *,
    netflow: Optional[float] = None,
    syslog: Optional[float] = None,
    traps: Optional[float] = None,
) -> Site:
    update = {
        k: v for k, v in (("netflow", netflow), ("syslog", syslog), ("traps", traps)) if v is not None
    }
    return site.model_copy(update={"logs": site.logs.model_copy(update=update)})


# ---------------------------------------------------------------------------
# Device defaults
# ---------------------------------------------------------------------------

def _with_defaults(config: SizingConfig, defaults: Dict[str, DeviceType]) -> SizingConfig:
    return config.model_copy(update={"device_defaults": defaults})


def _propagate(sites: Sequence[Site], device_type: str, template: DeviceType) -> List[Site]:
    """Push instances/methods of a default onto every site, keeping site counts."""
    out: List[Site] = []
    for site in sites:
        devices = dict(site.devices)
        current = devices.get(device_type)
        if current is None:
            devices[device_type] = template.model_copy(update={"count": 0})
        else:
            devices[device_type] = current.model_copy(
                update={"instances": template.instances, "methods": dict(template.methods)}
            )
        out.append(site.model_copy(update={"devices": devices}))
    return out


def add_device_type(
    config: SizingConfig,
    sites: Sequence[Site],
    name: str,
    category: Optional[DeviceCategory] = None,
) -> Tuple[SizingConfig, List[Site]]:
    if not name or not name.strip():
        raise ConfigurationError("Device type name is required")
    if name in config.device_defaults:
        raise ConfigurationError("Device type already exists")

    template = new_device_type()
    if category is not None:
        template = template.model_copy(update={"category": category})

    fresh = template.model_copy(update={"count": 0})
    # Replaces any entry a site kept from an earlier type of the same name.
    updated = [s.model_copy(update={"devices": {**s.devices, name: fresh}}) for s in sites]

    defaults = {**config.device_defaults, name: template}
    logger.debug("Added device type %r", name)
    return _with_defaults(config, defaults), updated


def remove_device_type(config: SizingConfig, name: str) -> SizingConfig:
    """Drop a device type from the defaults. Existing sites keep their entry."""
    if len(config.device_defaults) <= 1:
        raise ConfigurationError("Cannot delete the last device type")
    defaults = {k: v for k, v in config.device_defaults.items() if k != name}
    return _with_defaults(config, defaults)


def update_device_default(
    config: SizingConfig,
    sites: Sequence[Site],
    device_type: str,
    *,
    instances: Optional[float] = None,
    methods: Optional[Mapping[str, float]] = None,
) -> Tuple[SizingConfig, List[Site]]:
    current = config.device_defaults.get(device_type)
    if current is None:
        raise ConfigurationError(f"Unknown device type: {device_type}")

    update: Dict[str, object] = {}
    if instances is not None:
        update["instances"] = instances
    if methods is not None:
        update["methods"] = dict(methods)
    template = current.model_copy(update=update)

    defaults = {**config.device_defaults, device_type: template}
    return _with_defaults(config, defaults), _propagate(sites, device_type, template)


def add_collection_method(
    config: SizingConfig,
    sites: Sequence[Site],
    device_type: str,
    method: str,
) -> Tuple[SizingConfig, List[Site]]:
    """Add a protocol to a device type with ratio 0; ratios then need rebalancing."""
    if not method or method not in config.method_weights:
        raise ConfigurationError("Please select a valid protocol")
    current = config.device_defaults.get(device_type)
    if current is None:
        raise ConfigurationError(f"Unknown device type: {device_type}")
    if method in current.methods:
        raise ConfigurationError("Protocol already exists for this device type")
    return update_device_default(config, sites, device_type, methods={**current.methods, method: 0})


def remove_collection_method(
    config: SizingConfig,
    sites: Sequence[Site],
    device_type: str,
    method: str,
) -> Tuple[SizingConfig, List[Site]]:
    current = config.device_defaults.get(device_type)
    if current is None:
        raise ConfigurationError(f"Unknown device type: {device_type}")
    methods = {k: v for k, v in current.methods.items() if k != method}
    return update_device_default(config, sites, device_type, methods=methods)


def set_method_ratio(
    config: SizingConfig,
    sites: Sequence[Site],
    device_type: str,
    method: str,
    value: float,
) -> Tuple[SizingConfig, List[Site]]:
    """Applied even if the ratios no longer sum to 1; see ratio_warning()."""
    current = config.device_defaults.get(device_type)
    if current is None:
        raise ConfigurationError(f"Unknown device type: {device_type}")
    return update_device_default(config, sites, device_type, methods={**current.methods, method: value})


def methods_sum_to_one(methods: Mapping[str, float]) -> bool:
    return abs(sum(methods.values()) - 1) < RATIO_TOLERANCE


def ratio_warning(methods: Mapping[str, float]) -> Optional[str]:
    if methods_sum_to_one(methods):
        return None
    return "Collection method ratios must sum to 1"


# ---------------------------------------------------------------------------
# Protocol weights
# ---------------------------------------------------------------------------

def add_protocol(config: SizingConfig, name: str, weight: Optional[float] = None) -> SizingConfig:
    if not name or not name.strip():
        raise ConfigurationError("Protocol name is required")
    if name in config.method_weights:
        raise ConfigurationError("Protocol already exists")
    # Blank or zero weight falls back to 1.
    weights = {**config.method_weights, name: weight or 1}
    return config.model_copy(update={"method_weights": weights})


def set_protocol_weight(config: SizingConfig, name: str, weight: float) -> SizingConfig:
    if name not in config.method_weights:
        raise ConfigurationError(f"Unknown protocol: {name}")
    return config.model_copy(update={"method_weights": {**config.method_weights, name: weight}})


def _strip_method(devices: Mapping[str, DeviceType], method: str) -> Dict[str, DeviceType]:
    out: Dict[str, DeviceType] = {}
    for name, device in devices.items():
        if method in device.methods:
            methods = {k: v for k, v in device.methods.items() if k != method}
            device = device.model_copy(update={"methods": methods})
        out[name] = device
    return out


def remove_protocol(
    config: SizingConfig,
    sites: Sequence[Site],
    name: str,
) -> Tuple[SizingConfig, List[Site]]:
    """Remove a protocol and strip it from every device default and site inventory."""
    if len(config.method_weights) <= 1:
        raise ConfigurationError("Cannot delete the last protocol")
    weights = {k: v for k, v in config.method_weights.items() if k != name}
    new_config = config.model_copy(
        update={
            "method_weights": weights,
            "device_defaults": _strip_method(config.device_defaults, name),
        }
    )
    new_sites = [s.model_copy(update={"devices": _strip_method(s.devices, name)}) for s in sites]
    logger.debug("Removed protocol %r", name)
    return new_config, new_sites


# ---------------------------------------------------------------------------
# Capacities & general settings
# ---------------------------------------------------------------------------

def set_collector_capacity(
    config: SizingConfig,
    size: str,
    *,
    weight: Optional[float] = None,
    eps: Optional[float] = None,
) -> SizingConfig:
    """Edit one tier in place; declaration order is preserved."""
    current = config.collector_capacities.get(size)
    if current is None:
        raise ConfigurationError(f"Unknown collector size: {size}")
    update = {k: v for k, v in (("weight", weight), ("eps", eps)) if v is not None}
    capacities = {**config.collector_capacities, size: current.model_copy(update=update)}
    return config.model_copy(update={"collector_capacities": capacities})


def _validated(config: SizingConfig, **update) -> SizingConfig:
    data = {**config.model_dump(), **update}
    try:
        return SizingConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


def set_max_load(config: SizingConfig, value: float) -> SizingConfig:
    return _validated(config, max_load=value)


def set_failover(
    config: SizingConfig,
    *,
    polling: Optional[bool] = None,
    logs: Optional[bool] = None,
) -> SizingConfig:
    update: Dict[str, bool] = {}
    if polling is not None:
        update["enable_polling_failover"] = polling
    if logs is not None:
        update["enable_logs_failover"] = logs
    return config.model_copy(update=update)


def rename_deployment(config: SizingConfig, name: str) -> SizingConfig:
    return config.model_copy(update={"deployment_name": name})


def toggle_advanced_settings(config: SizingConfig) -> SizingConfig:
    return config.model_copy(update={"show_advanced_settings": not config.show_advanced_settings})
