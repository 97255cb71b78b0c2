"""
Collector Allocator
===================

Converts an aggregate polling load or EPS value into a collector list:
the smallest collector count any tier can serve the load with (at the
configured max load %), the total split evenly across that many units, plus
an optional idle N+1 unit.

Tier search walks the capacity table in declared order and keeps a tier when
its count is <= the best so far, so on ties the *later* tier wins. With the
usual SMALL..XXL ordering that means the largest tier that reaches the
minimum count. Keep the table ordered.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Mapping, Union

from .models import (
    PRIMARY,
    REDUNDANT,
    AllocationResult,
    CollectorAllocation,
    CollectorCapacity,
    CollectorGroup,
    SizingConfig,
    round_half_up,
)

logger = logging.getLogger(__name__)

FALLBACK_TIER = "XXL"

Number = Union[int, float]


@dataclass(frozen=True)
class TierChoice:
    size: str
    count: Number  # int when a tier was adopted, +inf when none could serve the load


def _divide(num: float, den: float) -> float:
    # IEEE-754 semantics: x/0 -> +-inf, 0/0 -> nan
    if den == 0:
        if num == 0 or math.isnan(num):
            return math.nan
        return math.inf if num > 0 else -math.inf
    return num / den


def _ceil(value: float) -> Number:
    return math.ceil(value) if math.isfinite(value) else value


def capacity_for(
    total: float,
    is_eps: bool,
    capacities: Mapping[str, CollectorCapacity],
    max_load: float,
) -> TierChoice:
    """
    Find the tier needing the fewest collectors for `total`.

    total == 0 gives count 0 on every tier, so the last declared tier is
    returned with count 0. NaN counts are never adopted.
    """
    size = list(capacities)[-1] if capacities else FALLBACK_TIER
    min_collectors: Number = math.inf

    for tier, limits in capacities.items():
        limit = limits.eps if is_eps else limits.weight
        needed = _ceil(_divide(total, limit * (max_load / 100)))
        if needed <= min_collectors:
            min_collectors = needed
            size = tier

    return TierChoice(size=size, count=min_collectors)


def _build_group(
    total: float,
    choice: TierChoice,
    limit: float,
    failover: bool,
) -> CollectorGroup:
    collectors: List[CollectorAllocation] = []

    if isinstance(choice.count, int) and choice.count > 0:
        pct = (total / choice.count / limit) * 100
        load = round_half_up(pct) if math.isfinite(pct) else 0
        collectors = [CollectorAllocation(size=choice.size, type=PRIMARY, load=load) for _ in range(choice.count)]
    elif choice.count != 0:
        logger.warning("Collector count %s for load %s; no primaries allocated", choice.count, total)

    if failover:
        collectors.append(CollectorAllocation(size=choice.size, type=REDUNDANT, load=0))

    return CollectorGroup(collectors=collectors)


def _limit_of(capacities: Mapping[str, CollectorCapacity], size: str, is_eps: bool) -> float:
    limits = capacities.get(size)
    if limits is None:
        return math.nan
    return limits.eps if is_eps else limits.weight


def calculate_collectors(
    total_weight: float,
    total_eps: float,
    max_load: float,
    config: SizingConfig,
) -> AllocationResult:
    """
    Allocate polling and log collectors independently.

    `max_load` is passed separately from `config` so callers can evaluate
    what-if ceilings without building a new config.
    """
    capacities = config.collector_capacities

    polling = capacity_for(total_weight, False, capacities, max_load)
    logs = capacity_for(total_eps, True, capacities, max_load)
    logger.debug(
        "Polling %s -> %s x %s; logs %s EPS -> %s x %s",
        total_weight, polling.count, polling.size, total_eps, logs.count, logs.size,
    )

    return AllocationResult(
        polling=_build_group(
            total_weight, polling, _limit_of(capacities, polling.size, False), config.enable_polling_failover
        ),
        logs=_build_group(
            total_eps, logs, _limit_of(capacities, logs.size, True), config.enable_logs_failover
        ),
    )
