"""
DDA_Models.py
-------------
Value types passed between the providers, the modifiers, the aggregator and
the calculator. Every instance is created for one calculation and discarded
once the caller has consumed the DifficultyResult.
"""

import math
from dataclasses import dataclass, field
from enum import Enum

from difficulty_config import DIMINISHING_FACTOR_DEFAULT, NO_CHANGE_REASON

_QUIT_ALIASES = {
    "normal": "normal",
    "quit": "normal",
    "ragequit": "rage_quit",
    "midplay": "mid_play",
}

_STRATEGY_ALIASES = {
    "sum": "simple_sum",
    "simplesum": "simple_sum",
    "weighted": "weighted_average",
    "weightedaverage": "weighted_average",
    "diminishing": "diminishing_returns",
    "diminishingreturns": "diminishing_returns",
    "max": "max_absolute",
    "maxabsolute": "max_absolute",
}


def _normalize(value) -> str:
    return "".join(ch for ch in str(value).lower() if ch.isalnum())


class QuitType(Enum):
    NORMAL = "normal"
    RAGE_QUIT = "rage_quit"
    MID_PLAY = "mid_play"

    @classmethod
    def parse(cls, value) -> "QuitType | None":
        """Accept members, values ("rage_quit") or names ("RageQuit", "RAGE_QUIT")."""
        if value is None or isinstance(value, cls):
            return value
        key = _normalize(value)
        if not key or key == "none":
            return None
        if key in _QUIT_ALIASES:
            return cls(_QUIT_ALIASES[key])
        raise ValueError(f"Unknown quit type: {value!r}")

    @classmethod
    def parse_or_none(cls, value) -> "QuitType | None":
        """Like parse, but an unrecognised classification counts as no quit."""
        try:
            return cls.parse(value)
        except ValueError:
            return None


class AggregationKind(Enum):
    SIMPLE_SUM = "simple_sum"
    WEIGHTED_AVERAGE = "weighted_average"
    DIMINISHING_RETURNS = "diminishing_returns"
    MAX_ABSOLUTE = "max_absolute"


@dataclass(frozen=True)
class AggregationStrategy:
    kind: AggregationKind = AggregationKind.DIMINISHING_RETURNS
    # Only read by DIMINISHING_RETURNS
    factor: float = DIMINISHING_FACTOR_DEFAULT

    @classmethod
    def simple_sum(cls) -> "AggregationStrategy":
        return cls(AggregationKind.SIMPLE_SUM)

    @classmethod
    def weighted_average(cls) -> "AggregationStrategy":
        return cls(AggregationKind.WEIGHTED_AVERAGE)

    @classmethod
    def diminishing_returns(cls, factor: float = DIMINISHING_FACTOR_DEFAULT) -> "AggregationStrategy":
        return cls(AggregationKind.DIMINISHING_RETURNS, factor)

    @classmethod
    def max_absolute(cls) -> "AggregationStrategy":
        return cls(AggregationKind.MAX_ABSOLUTE)

    @classmethod
    def from_name(cls, name, factor: float = DIMINISHING_FACTOR_DEFAULT) -> "AggregationStrategy":
        if isinstance(name, AggregationKind):
            return cls(name, factor)
        key = _normalize(name)
        if key in _STRATEGY_ALIASES:
            return cls(AggregationKind(_STRATEGY_ALIASES[key]), factor)
        raise ValueError(f"Unknown aggregation strategy: {name!r}")


@dataclass(frozen=True)
class SignalResult:
    name: str
    value: float = 0.0
    reason: str = NO_CHANGE_REASON
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        # A non-finite delta never leaves a modifier.
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)) or not math.isfinite(self.value):
            object.__setattr__(self, "value", 0.0)

    @classmethod
    def no_change(cls, name: str, reason: str = NO_CHANGE_REASON, **metadata) -> "SignalResult":
        return cls(name=name, value=0.0, reason=reason, metadata=dict(metadata))

    @property
    def error(self) -> str | None:
        return self.metadata.get("error")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "value": round(self.value, 4),
            "reason": self.reason,
            "metadata": {key: _jsonable(val) for key, val in self.metadata.items()},
        }


@dataclass(frozen=True)
class DifficultyResult:
    previous_difficulty: float
    new_difficulty: float
    applied_signals: list = field(default_factory=list)
    primary_reason: str = NO_CHANGE_REASON
    had_errors: bool = False
    error_messages: list = field(default_factory=list)

    @property
    def total_adjustment(self) -> float:
        return self.new_difficulty - self.previous_difficulty

    @property
    def has_changed(self) -> bool:
        return abs(self.total_adjustment) > 0.01

    def to_dict(self) -> dict:
        return {
            "previous_difficulty": round(self.previous_difficulty, 3),
            "new_difficulty": round(self.new_difficulty, 3),
            "total_adjustment": round(self.total_adjustment, 3),
            "applied_signals": [signal.to_dict() for signal in self.applied_signals],
            "primary_reason": self.primary_reason,
            "had_errors": self.had_errors,
            "error_messages": list(self.error_messages),
        }


def _jsonable(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, float):
        return round(value, 4)
    if isinstance(value, (str, int, bool)) or value is None:
        return value
    return str(value)
