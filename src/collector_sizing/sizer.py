from __future__ import annotations

import logging
from typing import Optional, Sequence

from .allocator import calculate_collectors
from .models import DeploymentSizing, Site, SiteSizing, SizingConfig
from .scoring import calculate_total_eps, calculate_weighted_score

logger = logging.getLogger(__name__)


def size_site(site: Site, config: SizingConfig, max_load: Optional[float] = None) -> SiteSizing:
    """
    Score one site and allocate its polling and log collectors.

    `max_load` overrides config.max_load for what-if runs.
    """
    ceiling = config.max_load if max_load is None else max_load
    total_weight = calculate_weighted_score(site.devices, config.method_weights, config)
    total_eps = calculate_total_eps(site.logs)
    allocation = calculate_collectors(total_weight, total_eps, ceiling, config)

    return SiteSizing(
        site_name=site.name,
        total_weight=total_weight,
        total_eps=total_eps,
        device_total=sum(d.count for d in site.devices.values()),
        allocation=allocation,
    )


def size_deployment(
    sites: Sequence[Site],
    config: SizingConfig,
    max_load: Optional[float] = None,
) -> DeploymentSizing:
    results = [size_site(s, config, max_load) for s in sites]
    logger.info("Sized %d site(s) for deployment %r", len(results), config.deployment_name)
    return DeploymentSizing(deployment_name=config.deployment_name, sites=results)
