from collector_sizing.report import collectors_frame, sites_frame, totals_frame, write_csv
from collector_sizing.sizer import size_deployment


def test_sites_frame(config, site):
    config = config.model_copy(update={"enable_logs_failover": True})
    df = sites_frame(size_deployment([site], config))

    assert len(df) == 1
    row = df.iloc[0]
    assert row["site"] == "HQ"
    assert row["devices"] == 7
    assert row["polling_load"] == 110
    assert row["polling_size"] == "XXL"
    assert row["polling_collectors"] == 1
    assert row["polling_redundant"] == 0
    assert row["polling_avg_load_pct"] == 14
    assert row["logs_collectors"] == 1
    assert row["logs_redundant"] == 1


def test_collectors_frame_and_totals(config, site):
    config = config.model_copy(update={"enable_polling_failover": True})
    sizing = size_deployment([site, site.model_copy(update={"name": "Copy"})], config)

    df = collectors_frame(sizing)
    assert len(df) == 6
    assert list(df[df["site"] == "HQ"]["type"]) == ["Primary", "N+1 Redundancy", "Primary"]

    totals = totals_frame(sizing)
    polling_primary = totals[(totals["dimension"] == "polling") & (totals["type"] == "Primary")]
    assert int(polling_primary["collectors"].iloc[0]) == 2


def test_empty_deployment(config):
    sizing = size_deployment([], config)
    assert sites_frame(sizing).empty
    assert totals_frame(sizing).empty


def test_write_csv(tmp_path, config, site):
    path = write_csv(sites_frame(size_deployment([site], config)), str(tmp_path / "sites.csv"))
    lines = path.read_text().splitlines()
    assert lines[0].startswith("site,devices,polling_load")
    assert lines[1].startswith("HQ,7,")
