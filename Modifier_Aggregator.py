"""
Modifier_Aggregator.py
----------------------
Combines the per-modifier deltas of one calculation into a single raw delta.
"""

import logging

from DDA_Models import AggregationKind, AggregationStrategy, SignalResult
from difficulty_config import (
    DEFAULT_SIGNAL_WEIGHT,
    DIMINISHING_FACTOR_DEFAULT,
    DIMINISHING_FACTOR_MAX,
    DIMINISHING_FACTOR_MIN,
    clamp,
    is_finite_number,
)

logger = logging.getLogger(__name__)


def simple_sum(signals: list[SignalResult]) -> float:
    return sum(signal.value for signal in signals)


def weighted_average(signals: list[SignalResult], weights: dict | None = None) -> float:
    """Average of the values weighted per modifier name (missing names weigh 1.0)."""
    weights = weights or {}
    total = 0.0
    weight_sum = 0.0
    for signal in signals:
        weight = weights.get(signal.name, DEFAULT_SIGNAL_WEIGHT)
        if not is_finite_number(weight) or weight < 0:
            weight = DEFAULT_SIGNAL_WEIGHT
        total += signal.value * weight
        weight_sum += weight
    if weight_sum <= 0:
        return 0.0
    return total / weight_sum


def diminishing_returns(signals: list[SignalResult], factor: float = DIMINISHING_FACTOR_DEFAULT) -> float:
    """
    Strongest signal counts fully, the i-th strongest is scaled by factor**i.

    sorted() is stable, so equal magnitudes keep their evaluation order.
    """
    if not is_finite_number(factor):
        factor = DIMINISHING_FACTOR_DEFAULT
    factor = clamp(factor, DIMINISHING_FACTOR_MIN, DIMINISHING_FACTOR_MAX)
    ordered = sorted(signals, key=lambda signal: abs(signal.value), reverse=True)
    return sum(signal.value * factor**index for index, signal in enumerate(ordered))


def max_absolute(signals: list[SignalResult]) -> float:
    strongest = None
    for signal in signals:
        # strict > keeps the first of equal magnitudes
        if strongest is None or abs(signal.value) > abs(strongest.value):
            strongest = signal
    return strongest.value if strongest is not None else 0.0


def aggregate(
    signals: list[SignalResult],
    strategy: AggregationStrategy | None = None,
    weights: dict | None = None,
) -> float:
    """Reduce signals to one delta with the selected strategy. Empty input gives 0.0."""
    if strategy is None:
        strategy = AggregationStrategy()
    if not signals:
        return 0.0

    if strategy.kind is AggregationKind.SIMPLE_SUM:
        raw = simple_sum(signals)
    elif strategy.kind is AggregationKind.WEIGHTED_AVERAGE:
        raw = weighted_average(signals, weights)
    elif strategy.kind is AggregationKind.DIMINISHING_RETURNS:
        raw = diminishing_returns(signals, strategy.factor)
    elif strategy.kind is AggregationKind.MAX_ABSOLUTE:
        raw = max_absolute(signals)
    else:
        raise ValueError(f"Unsupported aggregation strategy: {strategy.kind!r}")

    logger.debug({"event": "aggregate", "strategy": strategy.kind.value, "signals": len(signals), "raw": round(raw, 4)})
    return raw
