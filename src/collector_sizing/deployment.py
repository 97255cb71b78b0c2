"""
Deployment Export / Import
==========================

A deployment is saved as one JSON document:

{
    "deploymentName": "...",
    "sites": [
        {
            "name": "...",
            "devices": {"<device type>": {"count": 12, "additional_count": 2}, ...},
            "logs": {"netflow": 0, "syslog": 0, "traps": 0}
        },
        ...
    ],
    "methodWeights": {"<protocol>": 1.0, ...},
    "deviceDefaults": {"<device type>": {"instances": .., "count": 0, "methods": {..}}, ...},
    "collectorCapacities": {"SMALL": {"weight": .., "eps": ..}, ...},
    "timestamp": "ISO-8601",
    "version": "1.0"
}

Sites only carry counts. On import each site's inventory is rebuilt from the
file's deviceDefaults: instances and methods always come from the template,
count / additional_count from the site.

Structural problems abort the import (DeploymentImportError, nothing
applied). Cosmetic ones (missing names) are replaced with defaults and
reported as warnings.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from .defaults import DEFAULT_DEPLOYMENT_NAME, DEFAULT_SITE_NAME, EXPORT_VERSION
from .errors import DeploymentImportError
from .models import CollectorCapacity, DeviceType, Site, SiteLogs, SizingConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportResult:
    sites: List[Site]
    config: SizingConfig
    warnings: List[str] = field(default_factory=list)


def _simplified_site(site: Site) -> Dict[str, Any]:
    return {
        "name": site.name,
        "devices": {
            name: {k: v for k, v in (("count", d.count), ("additional_count", d.additional_count)) if v is not None}
            for name, d in site.devices.items()
        },
        "logs": site.logs.model_dump(),
    }


def export_deployment(
    sites: Sequence[Site],
    config: SizingConfig,
    timestamp: Optional[datetime] = None,
) -> Dict[str, Any]:
    ts = timestamp or datetime.now(timezone.utc)
    return {
        "deploymentName": config.deployment_name,
        "sites": [_simplified_site(s) for s in sites],
        "methodWeights": dict(config.method_weights),
        "deviceDefaults": {
            name: d.model_dump(mode="json", exclude_none=True) for name, d in config.device_defaults.items()
        },
        "collectorCapacities": {
            size: c.model_dump(mode="json") for size, c in config.collector_capacities.items()
        },
        "timestamp": ts.isoformat().replace("+00:00", "Z"),
        "version": EXPORT_VERSION,
    }


def export_filename(timestamp: Optional[datetime] = None) -> str:
    ts = timestamp or datetime.now(timezone.utc)
    return f"collector-config-{ts.date().isoformat()}.json"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate(data: Any, warnings: List[str]) -> List[str]:
    """Collect fatal problems; fills `warnings` with recoverable ones."""
    if not isinstance(data, dict):
        return ["Invalid data format"]

    problems: List[str] = []

    if not data.get("deploymentName"):
        warnings.append("Deployment name missing, using default")

    sites = data.get("sites")
    if not isinstance(sites, list):
        return ["Invalid sites format - expected array"]

    for site in sites:
        if not isinstance(site, dict):
            problems.append("Invalid site entry - expected object")
            continue
        name = site.get("name") or DEFAULT_SITE_NAME
        if not site.get("name"):
            warnings.append("Site missing name, using default")
        if not isinstance(site.get("devices"), dict):
            problems.append(f"Site {name}: Invalid devices format")
        if not isinstance(site.get("logs"), dict):
            problems.append(f"Site {name}: Invalid logs format")

    weights = data.get("methodWeights")
    if isinstance(weights, dict):
        for method, weight in weights.items():
            if not _is_number(weight):
                problems.append(f"Invalid weight for method {method}")
    else:
        problems.append("Invalid method weights format")

    defaults = data.get("deviceDefaults")
    if isinstance(defaults, dict):
        for device_type, settings in defaults.items():
            if not isinstance(settings, dict):
                problems.append(f"Invalid settings for device type {device_type}")
                continue
            try:
                DeviceType.model_validate(settings)
            except ValidationError:
                problems.append(f"Invalid settings for device type {device_type}")
    else:
        problems.append("Invalid device defaults format")

    capacities = data.get("collectorCapacities")
    if isinstance(capacities, dict):
        for size, limits in capacities.items():
            if not isinstance(limits, dict):
                problems.append(f"Invalid limits for collector size {size}")
    else:
        problems.append("Invalid collector capacities format")

    return problems


def _is_finite(value: Any) -> bool:
    return _is_number(value) and math.isfinite(value)


def _count(value: Any) -> int:
    # Missing, null, non-numeric or non-finite counts import as 0.
    return int(value) if _is_finite(value) else 0


def _rebuild_site(raw: Dict[str, Any], defaults: Dict[str, DeviceType]) -> Site:
    raw_devices: Dict[str, Any] = raw["devices"]
    devices: Dict[str, DeviceType] = {}
    for device_type, template in defaults.items():
        entry = raw_devices.get(device_type)
        if not isinstance(entry, dict):
            entry = {}
        additional = entry.get("additional_count")
        devices[device_type] = template.model_copy(
            update={
                "count": _count(entry.get("count")),
                "additional_count": int(additional) if _is_finite(additional) else None,
            }
        )

    raw_logs: Dict[str, Any] = raw["logs"]
    logs = SiteLogs(**{k: raw_logs.get(k) if _is_finite(raw_logs.get(k)) else 0 for k in ("netflow", "syslog", "traps")})

    return Site(name=raw.get("name") or DEFAULT_SITE_NAME, devices=devices, logs=logs)


def import_deployment(
    data: Any,
    current: SizingConfig,
    apply_capacities: bool = False,
) -> ImportResult:
    """
    Rebuild sites and config from an exported document.

    The returned config keeps everything from `current` except deployment
    name, method weights and device defaults. Capacities in the file are
    validated but only applied with apply_capacities=True.
    """
    warnings: List[str] = []
    problems = _validate(data, warnings)
    if problems:
        for p in problems:
            logger.error("Import rejected: %s", p)
        raise DeploymentImportError("Invalid configuration file format", problems)

    defaults = {name: DeviceType.model_validate(d) for name, d in data["deviceDefaults"].items()}
    sites = [_rebuild_site(raw, defaults) for raw in data["sites"]]

    update: Dict[str, Any] = {
        "deployment_name": data.get("deploymentName") or DEFAULT_DEPLOYMENT_NAME,
        "method_weights": dict(data["methodWeights"]),
        "device_defaults": defaults,
    }
    if apply_capacities:
        try:
            update["collector_capacities"] = {
                size: CollectorCapacity.model_validate(limits)
                for size, limits in data["collectorCapacities"].items()
            }
        except ValidationError as e:
            raise DeploymentImportError("Invalid collector capacities", [str(e)]) from e

    for w in warnings:
        logger.warning("Import: %s", w)
    logger.info("Imported %d site(s) for deployment %r", len(sites), update["deployment_name"])

    return ImportResult(sites=sites, config=current.model_copy(update=update), warnings=warnings)


def loads_deployment(text: str, current: SizingConfig, apply_capacities: bool = False) -> ImportResult:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DeploymentImportError("Failed to import configuration. Please check the file format.", [str(e)]) from e
    return import_deployment(data, current, apply_capacities=apply_capacities)


def load_deployment_file(path: str, current: SizingConfig, apply_capacities: bool = False) -> ImportResult:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Deployment file not found: {path}")
    return loads_deployment(p.read_text(encoding="utf-8"), current, apply_capacities=apply_capacities)


def dumps_deployment(sites: Sequence[Site], config: SizingConfig, timestamp: Optional[datetime] = None) -> str:
    return json.dumps(export_deployment(sites, config, timestamp), indent=2)


def save_deployment_file(
    path: str,
    sites: Sequence[Site],
    config: SizingConfig,
    timestamp: Optional[datetime] = None,
) -> Path:
    p = Path(path)
    p.write_text(dumps_deployment(sites, config, timestamp), encoding="utf-8")
    logger.info("Exported %d site(s) to %s", len(sites), p)
    return p
