"""
Load Scorer
===========

Turns a site's inventory into the two numbers the allocator works with:

- polling load ("weight"): instances x method ratio x method weight x count,
  summed over every device type and collection method
- log load (EPS): netflow + syslog + traps

Nothing here raises on bad numbers. A method with no weight, a missing
capacity tier or a negative count simply propagates as NaN / an odd total,
which the caller renders as-is.
"""

from __future__ import annotations

import logging
import math
from typing import Mapping, Optional

from .models import CollectorCapacity, DeviceType, SiteLogs, SizingConfig, is_virtualization_host

logger = logging.getLogger(__name__)

# (minimum average VMs per management host, tier whose full capacity is consumed)
VM_TIER_BREAKPOINTS = (
    (5000, "XXL"),
    (3000, "XL"),
    (2000, "LARGE"),
)


def _method_score(device: DeviceType, method_weights: Mapping[str, float], multiplier: float = 1.0) -> float:
    score = 0.0
    for method, ratio in device.methods.items():
        score += multiplier * device.instances * ratio * method_weights.get(method, math.nan)
    return score


def _tier_override(avg_per_host: int, config: SizingConfig) -> Optional[float]:
    for threshold, tier in VM_TIER_BREAKPOINTS:
        if avg_per_host >= threshold:
            capacity: Optional[CollectorCapacity] = config.collector_capacities.get(tier)
            if capacity is None:
                logger.warning("Capacity tier %s is not configured; VM score is NaN", tier)
                return math.nan
            return capacity.weight * (config.max_load / 100)
    return None


def virtualization_score(device: DeviceType, method_weights: Mapping[str, float], config: SizingConfig) -> float:
    """
    Score a VM inventory spread over one or more management hosts.

    `count` is the total VM count and `additional_count` the number of
    vCenters. Past 2000 / 3000 / 5000 VMs per host, a whole LARGE / XL / XXL
    collector (at max load) is assumed consumed per host regardless of the
    protocol mix; below that the normal per-method formula is applied to the
    per-host average.
    """
    hosts = device.additional_count if device.additional_count and device.additional_count > 0 else 1
    avg_per_host = math.ceil(device.count / hosts)

    per_host = _tier_override(avg_per_host, config)
    if per_host is None:
        per_host = _method_score(device, method_weights, multiplier=avg_per_host)
    return per_host * hosts


def device_score(device: DeviceType, method_weights: Mapping[str, float]) -> float:
    """Polling load of a single device of this type."""
    return _method_score(device, method_weights)


def calculate_weighted_score(
    devices: Mapping[str, DeviceType],
    method_weights: Mapping[str, float],
    config: SizingConfig,
) -> float:
    total = 0.0
    for name, device in devices.items():
        if device.count == 0:
            continue
        if is_virtualization_host(name, device):
            total += virtualization_score(device, method_weights, config)
        else:
            total += device_score(device, method_weights) * device.count

    if not math.isfinite(total):
        logger.warning("Polling load is not finite (%s); check method weights and capacities", total)
    return total


def calculate_total_eps(logs: SiteLogs) -> float:
    return logs.netflow + logs.syslog + logs.traps
