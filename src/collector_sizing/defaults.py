from __future__ import annotations

from typing import Dict

from .models import CollectorCapacity, DeviceCategory, DeviceType, SizingConfig

DEFAULT_DEPLOYMENT_NAME = "New Deployment"
DEFAULT_SITE_NAME = "New Site"
DEFAULT_MAX_LOAD = 85
EXPORT_VERSION = "1.0"

# Relative collector cost of one instance collected with each protocol.
DEFAULT_METHOD_WEIGHTS: Dict[str, float] = {
    "snmpv2c": 0.8,
    "snmpv3": 1.0,
    "http": 0.5,
    "api": 1.0,
    "jmx": 1.2,
    "jdbc": 1.5,
    "perfmon": 2.0,
    "wmi": 2.5,
    "script": 2.0,
}

# Smallest -> largest. Order matters to the allocator.
DEFAULT_COLLECTOR_CAPACITIES: Dict[str, Dict[str, float]] = {
    "SMALL": {"weight": 21000, "eps": 7500},
    "MEDIUM": {"weight": 28000, "eps": 10000},
    "LARGE": {"weight": 56000, "eps": 20000},
    "XL": {"weight": 112000, "eps": 35000},
    "XXL": {"weight": 224000, "eps": 50000},
}

DEFAULT_DEVICE_TYPES: Dict[str, Dict] = {
    "Windows Servers": {"instances": 150, "methods": {"wmi": 0.7, "perfmon": 0.2, "script": 0.1}},
    "Linux Servers": {"instances": 100, "methods": {"snmpv3": 0.5, "script": 0.5}},
    "Network Devices": {"instances": 250, "methods": {"snmpv2c": 0.6, "snmpv3": 0.4}},
    "Firewalls": {"instances": 120, "methods": {"snmpv3": 0.7, "api": 0.3}},
    "Load Balancers": {"instances": 200, "methods": {"snmpv3": 0.6, "api": 0.4}},
    "Storage Arrays": {"instances": 300, "methods": {"api": 0.8, "snmpv2c": 0.2}},
    "Databases": {"instances": 80, "methods": {"jdbc": 0.7, "script": 0.3}},
    "Application Servers": {"instances": 60, "methods": {"jmx": 0.6, "http": 0.4}},
    "Wireless Access Points": {"instances": 20, "methods": {"snmpv2c": 1.0}},
    "Virtual Machines (vCenter)": {
        "instances": 12,
        "methods": {"api": 1.0},
        "additional_count": 1,
        "category": DeviceCategory.VIRTUALIZATION_HOST,
    },
}


def new_device_type() -> DeviceType:
    """Template for a device type added by the user."""
    return DeviceType(instances=0, count=0, methods={"script": 1})


def default_device_defaults() -> Dict[str, DeviceType]:
    return {name: DeviceType(count=0, **data) for name, data in DEFAULT_DEVICE_TYPES.items()}


def default_collector_capacities() -> Dict[str, CollectorCapacity]:
    return {size: CollectorCapacity(**limits) for size, limits in DEFAULT_COLLECTOR_CAPACITIES.items()}


def default_config() -> SizingConfig:
    return SizingConfig(
        max_load=DEFAULT_MAX_LOAD,
        method_weights=dict(DEFAULT_METHOD_WEIGHTS),
        device_defaults=default_device_defaults(),
        collector_capacities=default_collector_capacities(),
        enable_polling_failover=False,
        enable_logs_failover=False,
        deployment_name=DEFAULT_DEPLOYMENT_NAME,
        show_advanced_settings=False,
    )
