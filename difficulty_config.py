"""
Central configuration for difficulty bounds, thresholds and mappings.
Keep all tunable constants here so the calculator, modifiers and tests can rely
on one source.
"""

import math

# Difficulty bounds
MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0
DEFAULT_DIFFICULTY = 3.0

# Cap per-session absolute difficulty change
MAX_CHANGE_PER_SESSION = 2.0

# Difficulty labels (map difficulty to Easy/Medium/Hard)
# Easy: difficulty <= EASY_MAX
# Medium: EASY_MAX < difficulty <= MEDIUM_MAX
# Hard: difficulty > MEDIUM_MAX
EASY_MAX = 3.0
MEDIUM_MAX = 7.0

# Signals below this magnitude are not reported as applied
NEGLIGIBLE_CHANGE = 0.001

# Smallest value a divisor-like config field may take
DIVISOR_FLOOR = 1e-4

# Aggregation
DIMINISHING_FACTOR_DEFAULT = 0.6
DIMINISHING_FACTOR_MIN = 0.01
DIMINISHING_FACTOR_MAX = 0.99
DEFAULT_SIGNAL_WEIGHT = 1.0

# Streak acceleration bounds
ACCELERATION_MIN = 1.0
ACCELERATION_MAX = 1.5
ACCELERATION_DEFAULT = 1.15

# Time
HOURS_IN_DAY = 24.0
DAYS_IN_WEEK = 7.0
SECONDS_IN_HOUR = 3600.0

NO_CHANGE_REASON = "No change"


def clamp(value: float, low: float, high: float) -> float:
	"""Clamp value to [low, high]."""
	if value < low:
		return low
	if value > high:
		return high
	return value


def clamp_difficulty(
	difficulty: float,
	min_difficulty: float = MIN_DIFFICULTY,
	max_difficulty: float = MAX_DIFFICULTY,
) -> float:
	"""Clamp difficulty to allowed range."""
	return clamp(difficulty, min_difficulty, max_difficulty)


def floor_divisor(value: float, floor: float = DIVISOR_FLOOR) -> float:
	"""Keep divisor-like values strictly positive (NaN counts as invalid)."""
	if value is None or math.isnan(value) or value < floor:
		return floor
	return value


def is_finite_number(value) -> bool:
	return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def difficulty_from_value(difficulty: float) -> str:
	"""Map difficulty to difficulty label."""
	if difficulty <= EASY_MAX:
		return "Easy"
	if difficulty <= MEDIUM_MAX:
		return "Medium"
	return "Hard"


def difficulty_percentage(
	difficulty: float,
	min_difficulty: float = MIN_DIFFICULTY,
	max_difficulty: float = MAX_DIFFICULTY,
) -> float:
	"""Position of difficulty inside the range, 0.0 at min and 1.0 at max."""
	if max_difficulty <= min_difficulty:
		return 0.0
	clamped = clamp_difficulty(difficulty, min_difficulty, max_difficulty)
	return (clamped - min_difficulty) / (max_difficulty - min_difficulty)
