import pytest

from collector_sizing import state
from collector_sizing.errors import ConfigurationError
from collector_sizing.models import DeviceCategory


def test_new_site_is_seeded_from_defaults(config):
    site = state.new_site(config)

    assert site.name == "Site 1"
    assert list(site.devices) == list(config.device_defaults)
    assert all(d.count == 0 for d in site.devices.values())
    assert site.devices["Switch"].instances == 10
    assert site.devices["Virtual Machines"].additional_count == 1
    assert site.logs.model_dump() == {"netflow": 0, "syslog": 0, "traps": 0}


def test_add_site_numbers_sites(config):
    sites = state.add_site(config, [])
    sites = state.add_site(config, sites)
    assert [s.name for s in sites] == ["Site 1", "Site 2"]


def test_remove_and_replace_site(config):
    sites = state.add_site(config, state.add_site(config, []))
    renamed = state.rename_site(sites[1], "Branch")

    assert [s.name for s in state.replace_site(sites, 1, renamed)] == ["Site 1", "Branch"]
    assert [s.name for s in state.remove_site(sites, 0)] == ["Site 2"]
    with pytest.raises(ConfigurationError):
        state.remove_site(sites, 5)


def test_set_device_count_returns_new_site(config, site):
    updated = state.set_device_count(site, "Virtual Machines", 2500, additional_count=2)

    assert updated.devices["Virtual Machines"].count == 2500
    assert updated.devices["Virtual Machines"].additional_count == 2
    assert site.devices["Virtual Machines"].count == 0
    with pytest.raises(ConfigurationError):
        state.set_device_count(site, "Toasters", 1)


def test_reset_site(config, site):
    assert all(d.count == 0 for d in state.reset_site_devices(site, config).devices.values())
    cleared = state.reset_site_logs(site)
    assert cleared.logs.netflow == 0 and cleared.logs.syslog == 0 and cleared.logs.traps == 0
    assert site.logs.netflow == 300


def test_set_site_logs_updates_only_given_counters(site):
    updated = state.set_site_logs(site, syslog=1000)
    assert updated.logs.model_dump() == {"netflow": 300, "syslog": 1000, "traps": 50}


def test_add_device_type_propagates_to_sites(config, site):
    new_config, sites = state.add_device_type(config, [site], "Printers")

    template = new_config.device_defaults["Printers"]
    assert template.instances == 0
    assert template.methods == {"script": 1}
    assert sites[0].devices["Printers"].count == 0
    assert "Printers" not in config.device_defaults


def test_re_adding_removed_device_type_resets_site_entry(config, site):
    trimmed = state.remove_device_type(config, "Switch")
    assert site.devices["Switch"].count == 2

    new_config, sites = state.add_device_type(trimmed, [site], "Switch")

    switch = sites[0].devices["Switch"]
    assert switch.count == 0
    assert switch.instances == 0
    assert switch.methods == {"script": 1}
    assert new_config.device_defaults["Switch"] == switch
    assert sites[0].devices["Windows Servers"].count == 5


def test_add_device_type_with_category(config):
    new_config, _ = state.add_device_type(config, [], "Hyper-V Guests", DeviceCategory.VIRTUALIZATION_HOST)
    assert new_config.device_defaults["Hyper-V Guests"].category == DeviceCategory.VIRTUALIZATION_HOST


@pytest.mark.parametrize(
    "name,message",
    [("", "Device type name is required"), ("   ", "Device type name is required"), ("Switch", "Device type already exists")],
)
def test_add_device_type_rejects(config, name, message):
    with pytest.raises(ConfigurationError, match=message):
        state.add_device_type(config, [], name)


def test_remove_device_type(config):
    new_config = state.remove_device_type(config, "Switch")
    assert "Switch" not in new_config.device_defaults

    only_one = config.model_copy(update={"device_defaults": {"Switch": config.device_defaults["Switch"]}})
    with pytest.raises(ConfigurationError, match="Cannot delete the last device type"):
        state.remove_device_type(only_one, "Switch")


def test_update_device_default_keeps_site_counts(config, site):
    new_config, sites = state.update_device_default(
        config, [site], "Switch", instances=48, methods={"snmp": 0.5, "script": 0.5}
    )

    assert new_config.device_defaults["Switch"].instances == 48
    assert sites[0].devices["Switch"].instances == 48
    assert sites[0].devices["Switch"].methods == {"snmp": 0.5, "script": 0.5}
    assert sites[0].devices["Switch"].count == 2
    assert site.devices["Switch"].instances == 10


def test_add_protocol(config):
    new_config = state.add_protocol(config, "jmx", 1.5)
    assert list(new_config.method_weights)[-1] == "jmx"
    assert state.add_protocol(config, "http", 0).method_weights["http"] == 1

    with pytest.raises(ConfigurationError, match="Protocol already exists"):
        state.add_protocol(config, "snmp", 2)
    with pytest.raises(ConfigurationError, match="Protocol name is required"):
        state.add_protocol(config, "", 2)


def test_remove_protocol_strips_methods(config, site):
    new_config, sites = state.remove_protocol(config, [site], "wmi")

    assert "wmi" not in new_config.method_weights
    assert new_config.device_defaults["Windows Servers"].methods == {"script": 0.5}
    assert sites[0].devices["Windows Servers"].methods == {"script": 0.5}
    assert "wmi" in config.method_weights


def test_cannot_remove_last_protocol(config):
    single = config.model_copy(update={"method_weights": {"snmp": 2}})
    with pytest.raises(ConfigurationError, match="Cannot delete the last protocol"):
        state.remove_protocol(single, [], "snmp")


def test_collection_methods(config, site):
    new_config, sites = state.add_collection_method(config, [site], "Switch", "wmi")
    assert new_config.device_defaults["Switch"].methods == {"snmp": 1, "wmi": 0}
    assert sites[0].devices["Switch"].methods == {"snmp": 1, "wmi": 0}

    with pytest.raises(ConfigurationError, match="Please select a valid protocol"):
        state.add_collection_method(config, [], "Switch", "telnet")
    with pytest.raises(ConfigurationError, match="Protocol already exists for this device type"):
        state.add_collection_method(config, [], "Switch", "snmp")

    new_config, sites = state.set_method_ratio(new_config, sites, "Switch", "wmi", 0.25)
    assert state.ratio_warning(new_config.device_defaults["Switch"].methods) == "Collection method ratios must sum to 1"

    new_config, sites = state.remove_collection_method(new_config, sites, "Switch", "wmi")
    assert sites[0].devices["Switch"].methods == {"snmp": 1}


def test_ratio_tolerance():
    assert state.methods_sum_to_one({"a": 0.3333, "b": 0.3333, "c": 0.3334})
    assert state.ratio_warning({"a": 0.5, "b": 0.5}) is None
    assert not state.methods_sum_to_one({"a": 0.5, "b": 0.49})


def test_set_protocol_weight(config):
    assert state.set_protocol_weight(config, "snmp", 7).method_weights["snmp"] == 7
    with pytest.raises(ConfigurationError):
        state.set_protocol_weight(config, "telnet", 1)


def test_set_collector_capacity_keeps_order(config):
    new_config = state.set_collector_capacity(config, "LARGE", weight=250)
    assert list(new_config.collector_capacities) == ["SMALL", "MEDIUM", "LARGE", "XL", "XXL"]
    assert new_config.collector_capacities["LARGE"].weight == 250
    assert new_config.collector_capacities["LARGE"].eps == 400


@pytest.mark.parametrize("value", [0, 101])
def test_set_max_load_rejects_out_of_range(config, value):
    with pytest.raises(ConfigurationError):
        state.set_max_load(config, value)


def test_general_settings(config):
    assert state.set_max_load(config, 70).max_load == 70
    assert state.set_max_load(config, 72.5).max_load == 72.5
    failover = state.set_failover(config, polling=True)
    assert failover.enable_polling_failover and not failover.enable_logs_failover
    assert state.rename_deployment(config, "Prod").deployment_name == "Prod"
    assert state.toggle_advanced_settings(config).show_advanced_settings is True
    assert config.max_load == 85
