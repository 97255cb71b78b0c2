from pathlib import Path

from collector_sizing.defaults import default_config
from collector_sizing.deployment import load_deployment_file
from collector_sizing.models import CollectorAllocation, CollectorGroup, Site
from collector_sizing.sizer import size_deployment, size_site


def test_size_site(config, site):
    result = size_site(site, config)

    assert result.site_name == "HQ"
    assert result.device_total == 7
    assert result.total_weight == 110
    assert result.total_eps == 500
    # 110 / 800 = 13.75% on one XXL
    assert [(c.size, c.load) for c in result.allocation.polling.collectors] == [("XXL", 14)]
    assert [(c.size, c.load) for c in result.allocation.logs.collectors] == [("XXL", 31)]
    assert result.polling_average_load == 14
    assert result.logs_average_load == 31


def test_size_site_max_load_override(config, site):
    # At 10% an XXL holds 80 units of polling load, so 110 needs two
    result = size_site(site, config, max_load=10)
    assert len(result.allocation.polling.primaries) == 2


def test_size_site_is_repeatable(config, site):
    assert size_site(site, config) == size_site(site, config)


def test_average_load_ignores_redundant_units():
    group = CollectorGroup(
        collectors=[
            CollectorAllocation(size="XL", type="Primary", load=40),
            CollectorAllocation(size="XL", type="Primary", load=41),
            CollectorAllocation(size="XL", type="N+1 Redundancy", load=0),
        ]
    )
    assert group.average_load == 41  # 40.5 rounds up
    assert len(group.redundant) == 1
    assert CollectorGroup().average_load == 0
    assert CollectorGroup().size is None


def test_size_deployment_totals(config, site):
    config = config.model_copy(update={"enable_polling_failover": True})
    empty = Site(name="Branch")

    sizing = size_deployment([site, empty], config)

    assert sizing.deployment_name == "Lab"
    assert [s.site_name for s in sizing.sites] == ["HQ", "Branch"]
    assert sizing.collector_totals() == {
        "polling": {"XXL Primary": 1, "XXL N+1 Redundancy": 2},
        "logs": {"XXL Primary": 1},
    }


def test_example_deployment_sizes():
    path = Path(__file__).resolve().parents[1] / "examples" / "example_deployment.json"
    result = load_deployment_file(str(path), default_config())
    sizing = size_deployment(result.sites, result.config)

    hq, branch = sizing.sites
    assert hq.site_name == "Headquarters"
    # 4500 VMs over 2 vCenters -> 2250 per host -> one LARGE at 85% per vCenter
    vm = result.sites[0].devices["Virtual Machines (vCenter)"]
    assert (vm.count, vm.additional_count) == (4500, 2)
    assert hq.total_weight > 56000 * 0.85 * 2
    assert hq.total_eps == 23500
    assert branch.allocation.logs.primaries[0].load == 1  # 320 / 50000
    assert all(c.size == "XXL" for c in hq.allocation.polling.collectors)
