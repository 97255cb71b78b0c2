"""
Collector Sizing
================

Sizing calculator for monitoring-collector deployments: describe sites
(device inventories, log / NetFlow volumes) and global configuration
(protocol weights, device defaults, collector capacity tiers), and get the
number and size of polling and log collectors each site needs.

Architecture:
- scoring.py: site inventory -> polling load / EPS
- allocator.py: load -> collector tier, count and per-unit load
- sizer.py: per-site and per-deployment sizing runs
- state.py: immutable config / site edits
- deployment.py: JSON export / import
- report.py: pandas tables and CSV
- cli.py: command-line interface
- ui/: Streamlit interface
"""

from .allocator import calculate_collectors, capacity_for
from .models import (
    AllocationResult,
    CollectorAllocation,
    CollectorCapacity,
    CollectorGroup,
    DeploymentSizing,
    DeviceCategory,
    DeviceType,
    Site,
    SiteLogs,
    SiteSizing,
    SizingConfig,
)
from .scoring import calculate_total_eps, calculate_weighted_score
from .sizer import size_deployment, size_site

__version__ = "1.0.0"

__all__ = [
    "AllocationResult",
    "CollectorAllocation",
    "CollectorCapacity",
    "CollectorGroup",
    "DeploymentSizing",
    "DeviceCategory",
    "DeviceType",
    "Site",
    "SiteLogs",
    "SiteSizing",
    "SizingConfig",
    "calculate_collectors",
    "calculate_total_eps",
    "calculate_weighted_score",
    "capacity_for",
    "size_deployment",
    "size_site",
]
