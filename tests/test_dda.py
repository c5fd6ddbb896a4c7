import math

import pytest

from DDA_Algo import DifficultyCalculator
from DDA_Models import AggregationStrategy, SignalResult
from Modifier_Bases.Base import BaseModifier
from Modifier_Configs import DifficultyConfig, ModifierConfig
from difficulty_config import MAX_CHANGE_PER_SESSION, MAX_DIFFICULTY, MIN_DIFFICULTY, NO_CHANGE_REASON


class FixedModifier:
	"""Duck-typed modifier returning a fixed value."""

	def __init__(self, name, value, priority=0, enabled=True, reason=None):
		self.name = name
		self.value = value
		self.priority = priority
		self.enabled = enabled
		self.reason = reason or f"{name} fired"
		self.calls = 0

	def calculate(self):
		self.calls += 1
		return SignalResult(self.name, self.value, self.reason)


class ExplodingModifier:
	name = "Exploding"
	priority = 0
	enabled = True

	def calculate(self):
		raise RuntimeError("provider offline")


class BrokenBaseModifier(BaseModifier):
	name = "Broken"

	def _evaluate(self):
		raise ZeroDivisionError("bad data")


def make_calculator(*modifiers, **config_kwargs):
	return DifficultyCalculator(list(modifiers), DifficultyConfig(**config_kwargs))


def test_no_modifiers_keeps_difficulty():
	res = make_calculator().calculate_difficulty(5.0)
	assert res.previous_difficulty == 5.0
	assert res.new_difficulty == 5.0
	assert res.applied_signals == []
	assert res.primary_reason == NO_CHANGE_REASON
	assert not res.had_errors


def test_single_positive_signal_applied():
	res = make_calculator(FixedModifier("WinStreak", 1.5)).calculate_difficulty(3.0)
	assert abs(res.new_difficulty - 4.5) < 1e-6
	assert [s.name for s in res.applied_signals] == ["WinStreak"]
	assert res.primary_reason == "WinStreak fired"


def test_default_strategy_is_diminishing_returns():
	calc = make_calculator(
		FixedModifier("A", 1.5, priority=1),
		FixedModifier("B", -1.0, priority=2),
		FixedModifier("C", -0.5, priority=3),
	)
	res = calc.calculate_difficulty(5.0)
	assert abs(res.new_difficulty - 5.72) < 1e-6


def test_simple_sum_strategy_cancels_out():
	calc = make_calculator(
		FixedModifier("A", 1.5, priority=1),
		FixedModifier("B", -1.0, priority=2),
		FixedModifier("C", -0.5, priority=3),
		aggregation=AggregationStrategy.simple_sum(),
	)
	res = calc.calculate_difficulty(5.0)
	assert abs(res.new_difficulty - 5.0) < 1e-6


def test_change_capped_per_session():
	calc = make_calculator(FixedModifier("Big", 9.0), aggregation=AggregationStrategy.simple_sum())
	res = calc.calculate_difficulty(3.0)
	assert abs(res.new_difficulty - (3.0 + MAX_CHANGE_PER_SESSION)) < 1e-6


def test_drop_capped_per_session():
	calc = make_calculator(FixedModifier("Big", -9.0), aggregation=AggregationStrategy.simple_sum())
	res = calc.calculate_difficulty(8.0)
	assert abs(res.new_difficulty - (8.0 - MAX_CHANGE_PER_SESSION)) < 1e-6


def test_range_clamp_at_top():
	calc = make_calculator(FixedModifier("Up", 1.5))
	res = calc.calculate_difficulty(9.8)
	assert res.new_difficulty == MAX_DIFFICULTY


def test_range_clamp_at_bottom():
	calc = make_calculator(FixedModifier("Down", -1.5))
	res = calc.calculate_difficulty(1.2)
	assert res.new_difficulty == MIN_DIFFICULTY


@pytest.mark.parametrize("current", [-50.0, 0.0, 1.0, 4.4, 9.99, 42.0, float("nan"), float("inf")])
@pytest.mark.parametrize("delta", [-100.0, -2.5, -0.3, 0.0, 0.7, 3.3, 100.0])
def test_result_always_in_range_and_capped(current, delta):
	calc = make_calculator(FixedModifier("X", delta), aggregation=AggregationStrategy.simple_sum())
	res = calc.calculate_difficulty(current)
	assert MIN_DIFFICULTY <= res.new_difficulty <= MAX_DIFFICULTY
	assert MIN_DIFFICULTY <= res.previous_difficulty <= MAX_DIFFICULTY
	assert abs(res.new_difficulty - res.previous_difficulty) <= MAX_CHANGE_PER_SESSION + 1e-6


def test_non_finite_current_uses_default():
	res = make_calculator(default_difficulty=4.0).calculate_difficulty(float("nan"))
	assert res.previous_difficulty == 4.0


def test_custom_range_and_cap():
	calc = make_calculator(
		FixedModifier("Up", 5.0),
		min_difficulty=0.0,
		max_difficulty=5.0,
		max_change_per_session=0.5,
	)
	res = calc.calculate_difficulty(4.8)
	assert abs(res.new_difficulty - 5.0) < 1e-6
	res = calc.calculate_difficulty(2.0)
	assert abs(res.new_difficulty - 2.5) < 1e-6


def test_exception_is_collected_and_others_still_run():
	good = FixedModifier("Good", 0.5, priority=5)
	calc = make_calculator(ExplodingModifier(), good)
	res = calc.calculate_difficulty(3.0)
	assert res.had_errors
	assert len(res.error_messages) == 1
	assert res.error_messages[0].startswith("Exploding:")
	assert "provider offline" in res.error_messages[0]
	assert good.calls == 1
	assert abs(res.new_difficulty - 3.5) < 1e-6


def test_base_modifier_failure_reported_with_name():
	calc = make_calculator(BrokenBaseModifier(ModifierConfig()))
	res = calc.calculate_difficulty(3.0)
	assert res.had_errors
	assert res.error_messages[0].startswith("Broken:")
	assert res.new_difficulty == 3.0
	assert res.applied_signals == []


def test_disabled_modifier_not_called():
	disabled = FixedModifier("Off", 2.0, enabled=False)
	res = make_calculator(disabled).calculate_difficulty(3.0)
	assert disabled.calls == 0
	assert res.new_difficulty == 3.0
	assert not res.had_errors


def test_none_result_is_not_an_error():
	class SilentModifier:
		name = "Silent"
		priority = 0
		enabled = True

		def calculate(self):
			return None

	res = make_calculator(SilentModifier()).calculate_difficulty(3.0)
	assert not res.had_errors
	assert res.new_difficulty == 3.0


def test_negligible_signal_not_applied_but_aggregated():
	calc = make_calculator(FixedModifier("Tiny", 0.0005), aggregation=AggregationStrategy.simple_sum())
	res = calc.calculate_difficulty(3.0)
	assert res.applied_signals == []
	assert res.primary_reason == NO_CHANGE_REASON
	assert abs(res.new_difficulty - 3.0005) < 1e-9


def test_primary_reason_is_largest_absolute_value():
	calc = make_calculator(
		FixedModifier("Small", 0.3, priority=1, reason="small"),
		FixedModifier("Large", -1.2, priority=2, reason="large"),
	)
	res = calc.calculate_difficulty(5.0)
	assert res.primary_reason == "large"


def test_primary_reason_tie_goes_to_lower_priority():
	calc = make_calculator(
		FixedModifier("Second", 0.5, priority=9, reason="second"),
		FixedModifier("First", -0.5, priority=1, reason="first"),
	)
	res = calc.calculate_difficulty(5.0)
	assert res.primary_reason == "first"
	assert [s.name for s in res.applied_signals] == ["First", "Second"]


def test_modifiers_run_in_priority_order():
	order = []

	class Recording(FixedModifier):
		def calculate(self):
			order.append(self.name)
			return super().calculate()

	make_calculator(
		Recording("C", 0.1, priority=3),
		Recording("A", 0.1, priority=1),
		Recording("B", 0.1, priority=2),
	).calculate_difficulty(3.0)
	assert order == ["A", "B", "C"]


def test_calculation_is_idempotent():
	calc = make_calculator(
		FixedModifier("A", 1.0, priority=1),
		FixedModifier("B", -0.4, priority=2),
		ExplodingModifier(),
	)
	first = calc.calculate_difficulty(4.0)
	second = calc.calculate_difficulty(4.0)
	assert first == second


def test_result_helpers():
	res = make_calculator(FixedModifier("Up", 1.0)).calculate_difficulty(3.0)
	assert abs(res.total_adjustment - 1.0) < 1e-6
	assert res.has_changed
	payload = res.to_dict()
	assert payload["new_difficulty"] == 4.0
	assert payload["applied_signals"][0]["name"] == "Up"
	assert not math.isnan(payload["total_adjustment"])
