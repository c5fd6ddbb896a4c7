"""
DDA_Algo.py
-----------
Dynamic Difficulty Adjustment calculator. Runs every enabled modifier against
the same provider snapshot, combines their deltas and returns the new
difficulty clamped to the configured range and per-session cap.
"""

import logging
import math

from DDA_Models import DifficultyResult, SignalResult
from Modifier_Aggregator import aggregate
from Modifier_Configs import DifficultyConfig
from difficulty_config import NEGLIGIBLE_CHANGE, NO_CHANGE_REASON, clamp_difficulty, is_finite_number

logger = logging.getLogger(__name__)


class DifficultyCalculator:

    __slots__ = (
        "_modifiers",
        "_config",
    )

    def __init__(self, modifiers=None, config: DifficultyConfig | None = None):
        self._config = (config or DifficultyConfig()).sanitize()
        self._modifiers = list(modifiers or [])

    @property
    def config(self) -> DifficultyConfig:
        return self._config

    @property
    def modifiers(self) -> list:
        return list(self._modifiers)

    def _active_modifiers(self) -> list:
        active = [m for m in self._modifiers if getattr(m, "enabled", True)]
        # sorted() is stable: equal priorities keep registration order
        return sorted(active, key=lambda m: getattr(m, "priority", 0))

    def _sanitize_difficulty(self, current_difficulty) -> float:
        if not is_finite_number(current_difficulty):
            current_difficulty = self._config.default_difficulty
        return self._clamp_to_range(float(current_difficulty))

    def _clamp_to_range(self, difficulty: float) -> float:
        return clamp_difficulty(difficulty, self._config.min_difficulty, self._config.max_difficulty)

    @staticmethod
    def _modifier_name(modifier) -> str:
        return getattr(modifier, "name", None) or type(modifier).__name__

    def _evaluate(self, modifier) -> tuple[SignalResult, str | None]:
        name = self._modifier_name(modifier)
        try:
            result = modifier.calculate()
        except Exception as e:
            logger.warning({"event": "modifier_error", "modifier": name, "error": str(e)})
            return SignalResult.no_change(name, reason=f"Error in {name}: {e}", error=str(e)), f"{name}: {e}"
        if result is None:
            return SignalResult.no_change(name), None
        if not isinstance(result, SignalResult):
            message = f"{name}: returned {type(result).__name__} instead of SignalResult"
            return SignalResult.no_change(name, reason=f"Error in {name}", error=message), message
        if result.error:
            return result, f"{result.name}: {result.error}"
        return result, None

    def _collect_signals(self) -> tuple[list[SignalResult], list[str]]:
        signals = []
        errors = []
        for modifier in self._active_modifiers():
            result, error = self._evaluate(modifier)
            signals.append(result)
            if error is not None:
                errors.append(error)
        return signals, errors

    def _cap_change(self, previous: float, target: float) -> float:
        max_change = self._config.max_change_per_session
        if abs(target - previous) > max_change:
            direction = 1 if target > previous else -1
            return self._clamp_to_range(previous + direction * max_change)
        return target

    @staticmethod
    def _primary_reason(applied: list[SignalResult]) -> str:
        strongest = None
        for signal in applied:
            if strongest is None or abs(signal.value) > abs(strongest.value):
                strongest = signal
        return strongest.reason if strongest is not None else NO_CHANGE_REASON

    def _log_calculation(self, result: DifficultyResult, raw_delta: float) -> None:
        logger.info(
            {
                "event": "difficulty_calculated",
                "previous": round(result.previous_difficulty, 3),
                "new": round(result.new_difficulty, 3),
                "raw_delta": round(raw_delta, 3),
                "strategy": self._config.aggregation.kind.value,
                "applied": [signal.name for signal in result.applied_signals],
                "primary_reason": result.primary_reason,
                "had_errors": result.had_errors,
            }
        )

    def calculate_difficulty(self, current_difficulty: float) -> DifficultyResult:
        """Run all enabled modifiers and return the clamped new difficulty. Never raises."""
        previous = self._sanitize_difficulty(current_difficulty)
        signals, errors = self._collect_signals()

        contributing = [signal for signal in signals if signal.value != 0]
        applied = [signal for signal in contributing if abs(signal.value) >= NEGLIGIBLE_CHANGE]

        raw_delta = aggregate(contributing, self._config.aggregation, self._config.signal_weights)
        if not math.isfinite(raw_delta):
            errors.append(f"Aggregation: non-finite delta {raw_delta!r}")
            raw_delta = 0.0

        target = self._clamp_to_range(previous + raw_delta)
        new_difficulty = self._cap_change(previous, target)

        result = DifficultyResult(
            previous_difficulty=previous,
            new_difficulty=new_difficulty,
            applied_signals=applied,
            primary_reason=self._primary_reason(applied),
            had_errors=bool(errors),
            error_messages=errors,
        )
        self._log_calculation(result, raw_delta)
        return result
