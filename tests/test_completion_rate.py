from DDA_Providers import PlayerSnapshot
from Modifier_Bases.CompletionRate import CompletionRateModifier
from Modifier_Configs import CompletionRateConfig


def make_completion(wins, losses, level_rate=None, **config_kwargs):
	player = PlayerSnapshot(total_wins=wins, total_losses=losses, completion_rate=level_rate if level_rate is not None else 0.5)
	level_provider = player if level_rate is not None else None
	return CompletionRateModifier(CompletionRateConfig(**config_kwargs), player, level_provider)


def test_low_completion_rate_decreases():
	res = make_completion(2, 8, min_attempts_required=5).calculate()
	assert res.value == -0.5
	assert res.reason.startswith("Low completion rate (20%)")


def test_high_completion_rate_increases():
	res = make_completion(9, 1).calculate()
	assert res.value == 0.5


def test_normal_rate_no_change():
	res = make_completion(11, 9).calculate()
	assert res.value == 0.0
	assert res.reason == "Completion rate normal"


def test_not_enough_data():
	res = make_completion(1, 2).calculate()
	assert res.value == 0.0
	assert res.reason == "Not enough data (3/10 attempts)"


def test_level_rate_blended_in():
	# overall 0.8, level 0.1, weight 0.3 -> 0.59: normal
	res = make_completion(8, 2, level_rate=0.1).calculate()
	assert res.value == 0.0
	assert abs(res.metadata["blended_rate"] - 0.59) < 1e-9


def test_blend_weight_zero_uses_overall_rate():
	res = make_completion(8, 2, level_rate=0.1, total_stats_weight=0.0).calculate()
	assert res.value == 0.5


def test_custom_adjustment_sizes():
	res = make_completion(1, 9, low_completion_decrease=0.8).calculate()
	assert res.value == -0.8


def test_zero_level_rate_drags_blend_down():
	# overall 0.5, level 0.0, weight 0.3 -> 0.35: low
	res = make_completion(5, 5, level_rate=0.0).calculate()
	assert abs(res.metadata["blended_rate"] - 0.35) < 1e-9
	assert res.value == -0.5
