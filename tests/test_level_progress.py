from DDA_Providers import PlayerSnapshot
from Modifier_Bases.LevelProgress import LevelProgressModifier
from Modifier_Configs import LevelProgressConfig


def make_level(config=None, **player_kwargs):
	# Neutral defaults: on-time completion, mid difficulty, no time data
	player_kwargs.setdefault("current_level_time_percentage", 1.0)
	player_kwargs.setdefault("current_level_difficulty", 2.5)
	player_kwargs.setdefault("completion_rate", 0.5)
	return LevelProgressModifier(config or LevelProgressConfig(), PlayerSnapshot(**player_kwargs))


def test_neutral_progress_no_change():
	res = make_level().calculate()
	assert res.value == 0.0
	assert res.reason == "Normal level progression"


def test_high_attempts_penalty():
	res = make_level(attempts_on_current_level=8).calculate()
	assert abs(res.value - (-(8 - 5) * 0.2)) < 1e-9
	assert "High attempts (8)" in res.reason


def test_attempts_at_threshold_no_penalty():
	assert make_level(attempts_on_current_level=5).calculate().value == 0.0


def test_fast_completion_bonus_scaled():
	res = make_level(current_level_time_percentage=0.35).calculate()
	# half the fast ratio -> bonus * 1.5
	assert abs(res.value - 0.45) < 1e-9
	assert "Fast completion" in res.reason


def test_slow_completion_penalty():
	res = make_level(current_level_time_percentage=2.4).calculate()
	assert abs(res.value - (-0.3 * 1.6)) < 1e-9
	assert "Slow completion" in res.reason


def test_slow_completion_penalty_capped():
	res = make_level(current_level_time_percentage=10.0).calculate()
	assert abs(res.value - (-0.3 * 2.0)) < 1e-9


def test_fast_progression():
	# 20 levels at 90s = half an hour -> expected level 7 at 15 levels/hour
	res = make_level(current_level=20, average_completion_time=90.0).calculate()
	assert abs(res.value - (20 - 7) * 0.1) < 1e-9
	assert "Fast progression (L20 vs expected L7)" in res.reason


def test_slow_progression():
	# 10 levels at 720s = 2 hours -> expected level 30
	res = make_level(current_level=10, average_completion_time=720.0).calculate()
	assert abs(res.value - (10 - 30) * 0.1) < 1e-9
	assert "Slow progression" in res.reason


def test_mastery_bonus():
	res = make_level(current_level_difficulty=4.0, completion_rate=0.9).calculate()
	assert abs(res.value - 0.3) < 1e-9
	assert res.reason == "Mastering hard levels"


def test_struggle_penalty():
	res = make_level(current_level_difficulty=1.0, completion_rate=0.1).calculate()
	assert abs(res.value - (-0.3)) < 1e-9
	assert res.reason == "Struggling on easy levels"


def test_mastery_and_struggle_never_both_fire():
	# Overlapping thresholds make both conditions true for the same level
	config = LevelProgressConfig(
		hard_level_threshold=1.0,
		easy_level_threshold=5.0,
		mastery_completion_rate=0.2,
		struggle_completion_rate=0.8,
	)
	res = make_level(config, current_level_difficulty=3.0, completion_rate=0.5).calculate()
	assert abs(res.value - 0.3) < 1e-9
	assert "Struggling" not in res.reason


def test_factors_are_additive():
	res = make_level(
		attempts_on_current_level=7,
		current_level_time_percentage=2.4,
		current_level_difficulty=1.0,
		completion_rate=0.1,
	).calculate()
	expected = -(2 * 0.2) - 0.3 * 1.6 - 0.3
	assert abs(res.value - expected) < 1e-9
	assert res.reason.count(", ") == 2


def test_zero_config_divisors_do_not_crash():
	config = LevelProgressConfig(fast_completion_ratio=0.0, slow_completion_ratio=0.0, expected_levels_per_hour=0.0)
	res = make_level(config, current_level=3, average_completion_time=30.0, current_level_time_percentage=0.5).calculate()
	assert res.error is None
