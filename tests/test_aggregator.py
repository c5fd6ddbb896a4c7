import pytest

from DDA_Models import AggregationKind, AggregationStrategy, SignalResult
from Modifier_Aggregator import aggregate, diminishing_returns, max_absolute, simple_sum, weighted_average


def make_signals(*values):
	return [SignalResult(f"S{i}", value) for i, value in enumerate(values)]


def test_diminishing_returns_example():
	signals = make_signals(1.5, -1.0, -0.5)
	assert abs(aggregate(signals, AggregationStrategy.diminishing_returns(0.6)) - 0.72) < 1e-9


def test_simple_sum_example():
	signals = make_signals(1.5, -1.0, -0.5)
	assert abs(aggregate(signals, AggregationStrategy.simple_sum())) < 1e-9


def test_default_strategy_is_diminishing():
	strategy = AggregationStrategy()
	assert strategy.kind is AggregationKind.DIMINISHING_RETURNS
	assert strategy.factor == 0.6
	assert abs(aggregate(make_signals(1.5, -1.0, -0.5)) - 0.72) < 1e-9


def test_diminishing_returns_independent_of_input_order():
	a = diminishing_returns(make_signals(-0.5, 1.5, -1.0), 0.6)
	b = diminishing_returns(make_signals(-1.0, -0.5, 1.5), 0.6)
	assert abs(a - b) < 1e-12
	assert abs(a - 0.72) < 1e-9


def test_diminishing_returns_ties_keep_evaluation_order():
	# Equal magnitudes: the first evaluated counts fully
	assert abs(diminishing_returns(make_signals(1.0, -1.0), 0.5) - 0.5) < 1e-12
	assert abs(diminishing_returns(make_signals(-1.0, 1.0), 0.5) - (-0.5)) < 1e-12


def test_diminishing_factor_is_clamped():
	signals = make_signals(1.0, 1.0)
	assert abs(diminishing_returns(signals, 5.0) - 1.99) < 1e-9
	assert abs(diminishing_returns(signals, 0.0) - 1.01) < 1e-9
	assert abs(diminishing_returns(signals, float("nan")) - 1.6) < 1e-9


def test_max_absolute_keeps_sign():
	assert max_absolute(make_signals(0.4, -1.2, 1.0)) == -1.2


def test_max_absolute_tie_keeps_first():
	assert max_absolute(make_signals(0.8, -0.8)) == 0.8


def test_weighted_average_defaults_to_plain_mean():
	assert abs(weighted_average(make_signals(1.0, 0.0, -0.4)) - 0.2) < 1e-9


def test_weighted_average_uses_name_weights():
	signals = [SignalResult("WinStreak", 1.0), SignalResult("TimeDecay", -1.0)]
	raw = weighted_average(signals, {"WinStreak": 3.0})
	assert abs(raw - 0.5) < 1e-9


def test_weighted_average_all_zero_weights():
	signals = [SignalResult("A", 1.0)]
	assert weighted_average(signals, {"A": 0.0}) == 0.0


@pytest.mark.parametrize("strategy", [
	AggregationStrategy.simple_sum(),
	AggregationStrategy.weighted_average(),
	AggregationStrategy.diminishing_returns(),
	AggregationStrategy.max_absolute(),
])
def test_empty_input_is_zero(strategy):
	assert aggregate([], strategy) == 0.0


def test_single_signal_passes_through_every_strategy():
	signals = make_signals(-0.7)
	for kind in AggregationKind:
		assert abs(aggregate(signals, AggregationStrategy(kind)) - (-0.7)) < 1e-9


def test_simple_sum_adds_everything():
	assert abs(simple_sum(make_signals(0.1, 0.2, 0.3)) - 0.6) < 1e-9


@pytest.mark.parametrize("name,kind", [
	("sum", AggregationKind.SIMPLE_SUM),
	("SimpleSum", AggregationKind.SIMPLE_SUM),
	("weighted_average", AggregationKind.WEIGHTED_AVERAGE),
	("DiminishingReturns", AggregationKind.DIMINISHING_RETURNS),
	("max", AggregationKind.MAX_ABSOLUTE),
])
def test_strategy_from_name(name, kind):
	assert AggregationStrategy.from_name(name).kind is kind


def test_strategy_from_unknown_name():
	with pytest.raises(ValueError):
		AggregationStrategy.from_name("median")
