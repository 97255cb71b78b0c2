"""
Tabular views of a sizing run (pandas), for the UI tables and CSV export.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from .models import DeploymentSizing

SITE_COLUMNS = [
    "site",
    "devices",
    "polling_load",
    "polling_size",
    "polling_collectors",
    "polling_redundant",
    "polling_avg_load_pct",
    "log_eps",
    "logs_size",
    "logs_collectors",
    "logs_redundant",
    "logs_avg_load_pct",
]

COLLECTOR_COLUMNS = ["site", "dimension", "index", "size", "type", "load_pct"]


def sites_frame(sizing: DeploymentSizing) -> pd.DataFrame:
    rows = []
    for s in sizing.sites:
        polling = s.allocation.polling
        logs = s.allocation.logs
        rows.append(
            {
                "site": s.site_name,
                "devices": s.device_total,
                "polling_load": round(s.total_weight, 2),
                "polling_size": polling.size,
                "polling_collectors": len(polling.primaries),
                "polling_redundant": len(polling.redundant),
                "polling_avg_load_pct": polling.average_load,
                "log_eps": s.total_eps,
                "logs_size": logs.size,
                "logs_collectors": len(logs.primaries),
                "logs_redundant": len(logs.redundant),
                "logs_avg_load_pct": logs.average_load,
            }
        )
    return pd.DataFrame(rows, columns=SITE_COLUMNS)


def collectors_frame(sizing: DeploymentSizing) -> pd.DataFrame:
    rows = []
    for s in sizing.sites:
        for dim, group in (("polling", s.allocation.polling), ("logs", s.allocation.logs)):
            for i, c in enumerate(group.collectors, start=1):
                rows.append(
                    {
                        "site": s.site_name,
                        "dimension": dim,
                        "index": i,
                        "size": c.size,
                        "type": c.type,
                        "load_pct": c.load,
                    }
                )
    return pd.DataFrame(rows, columns=COLLECTOR_COLUMNS)


def totals_frame(sizing: DeploymentSizing) -> pd.DataFrame:
    """Collector counts across every site, per dimension / size / type."""
    df = collectors_frame(sizing)
    if df.empty:
        return pd.DataFrame(columns=["dimension", "size", "type", "collectors"])
    return (
        df.groupby(["dimension", "size", "type"], sort=False)
        .size()
        .reset_index(name="collectors")
    )


def write_csv(frame: pd.DataFrame, path: str) -> Path:
    p = Path(path)
    frame.to_csv(p, index=False)
    return p
