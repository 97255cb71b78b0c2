import pytest

from collector_sizing.models import CollectorCapacity, DeviceType, Site, SiteLogs, SizingConfig


@pytest.fixture
def capacities():
    return {
        "SMALL": CollectorCapacity(weight=50, eps=100),
        "MEDIUM": CollectorCapacity(weight=100, eps=200),
        "LARGE": CollectorCapacity(weight=200, eps=400),
        "XL": CollectorCapacity(weight=400, eps=800),
        "XXL": CollectorCapacity(weight=800, eps=1600),
    }


@pytest.fixture
def config(capacities):
    return SizingConfig(
        max_load=85,
        method_weights={"snmp": 2, "wmi": 3, "script": 4},
        device_defaults={
            "Switch": DeviceType(instances=10, methods={"snmp": 1}),
            "Windows Servers": DeviceType(instances=4, methods={"wmi": 0.5, "script": 0.5}),
            "Virtual Machines": DeviceType(instances=2, additional_count=1, methods={"snmp": 0.5, "wmi": 0.5}),
        },
        collector_capacities=capacities,
        deployment_name="Lab",
    )


@pytest.fixture
def site(config):
    devices = {name: d.model_copy(update={"count": 0}) for name, d in config.device_defaults.items()}
    devices["Switch"] = devices["Switch"].model_copy(update={"count": 2})
    devices["Windows Servers"] = devices["Windows Servers"].model_copy(update={"count": 5})
    return Site(name="HQ", devices=devices, logs=SiteLogs(netflow=300, syslog=150, traps=50))
