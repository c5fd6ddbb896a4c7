"""
Game_Stats.py
-------------
Design-time game statistics and the rules that turn them into a starting
DifficultyConfig. With create_default() the generated config matches the
built-in defaults closely.
"""

import logging
import math
from dataclasses import dataclass, fields

from Modifier_Configs import (
    CompletionRateConfig,
    DifficultyConfig,
    LevelProgressConfig,
    LossStreakConfig,
    RageQuitConfig,
    SessionPatternConfig,
    TimeDecayConfig,
    WinStreakConfig,
)
from difficulty_config import clamp, floor_divisor

logger = logging.getLogger(__name__)


@dataclass
class GameStats:
    # Player behaviour
    avg_consecutive_wins: float = 3.5
    avg_consecutive_losses: float = 2.0
    win_rate_percentage: float = 65.0
    avg_attempts_per_level: float = 2.5

    # Session and time
    avg_hours_between_sessions: float = 24.0
    avg_session_duration_minutes: float = 15.0
    avg_levels_per_session: float = 5.0
    rage_quit_percentage: float = 10.0

    # Level design
    difficulty_min: float = 1.0
    difficulty_max: float = 10.0
    difficulty_default: float = 3.0
    avg_level_completion_time_seconds: float = 60.0

    # Progression
    total_levels: int = 100
    difficulty_increase_start_level: int = 20
    target_retention_days: int = 7
    max_difficulty_change_per_session: float = 2.0
    game_completion_rate: float = 5.0

    @classmethod
    def create_default(cls) -> "GameStats":
        """Typical values for a casual mobile game."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> "GameStats":
        if not isinstance(data, dict):
            raise TypeError("game stats must be a dictionary")
        defaults = cls()
        kwargs = {}
        for f in fields(cls):
            if f.name in data:
                kind = type(getattr(defaults, f.name))
                kwargs[f.name] = kind(data[f.name])
        return cls(**kwargs)

    def validate(self) -> tuple[bool, str]:
        if self.avg_consecutive_wins <= 0:
            return False, "Average consecutive wins must be greater than 0"
        if self.avg_consecutive_losses <= 0:
            return False, "Average consecutive losses must be greater than 0"
        if not 0 <= self.win_rate_percentage <= 100:
            return False, "Win rate percentage must be between 0 and 100"
        if self.difficulty_min >= self.difficulty_max:
            return False, "Difficulty min must be less than difficulty max"
        if not self.difficulty_min <= self.difficulty_default <= self.difficulty_max:
            return False, "Difficulty default must be between min and max"
        if self.avg_hours_between_sessions <= 0:
            return False, "Average hours between sessions must be greater than 0"
        if self.total_levels <= 0:
            return False, "Total levels must be greater than 0"
        if self.max_difficulty_change_per_session <= 0:
            return False, "Max difficulty change per session must be greater than 0"
        return True, ""


def _win_streak_from_stats(stats: GameStats) -> WinStreakConfig:
    threshold = clamp(stats.avg_consecutive_wins, 2.0, 10.0)
    max_bonus = clamp(stats.max_difficulty_change_per_session, 0.5, 5.0)
    # Reach the full bonus after roughly one average streak past the threshold
    step_size = clamp(max_bonus / threshold, 0.1, 2.0)
    return WinStreakConfig(win_threshold=threshold, step_size=step_size, max_bonus=max_bonus)


def _loss_streak_from_stats(stats: GameStats) -> LossStreakConfig:
    threshold = clamp(stats.avg_consecutive_losses, 1.0, 10.0)
    max_reduction = clamp(stats.max_difficulty_change_per_session * 0.75, 0.5, 5.0)
    step_size = clamp(max_reduction / threshold / 2.5, 0.1, 2.0)
    return LossStreakConfig(loss_threshold=threshold, step_size=step_size, max_reduction=max_reduction)


def _time_decay_from_stats(stats: GameStats) -> TimeDecayConfig:
    # Full decay is reached over the retention window; regular players never decay
    retention_days = floor_divisor(float(stats.target_retention_days), 1.0)
    return TimeDecayConfig(
        decay_per_day=clamp(stats.max_difficulty_change_per_session / retention_days, 0.1, 2.0),
        max_decay=clamp(stats.max_difficulty_change_per_session, 0.5, 5.0),
        grace_hours=clamp(stats.avg_hours_between_sessions, 0.0, 48.0),
    )


def _rage_quit_from_stats(stats: GameStats) -> RageQuitConfig:
    rage_quit_reduction = clamp(stats.max_difficulty_change_per_session * 0.5, 0.25, 3.0)
    return RageQuitConfig(
        rage_quit_reduction=rage_quit_reduction,
        quit_reduction=rage_quit_reduction * 0.5,
        mid_play_reduction=rage_quit_reduction * 0.3,
    )


def _completion_rate_from_stats(stats: GameStats) -> CompletionRateConfig:
    win_rate = clamp(stats.win_rate_percentage / 100.0, 0.0, 1.0)
    low = clamp(win_rate - 0.25, 0.05, 0.9)
    high = clamp(win_rate + 0.05, low + 0.05, 0.95)
    return CompletionRateConfig(
        low_completion_threshold=low,
        high_completion_threshold=high,
        min_attempts_required=int(clamp(round(stats.avg_attempts_per_level * 4), 5, 50)),
    )


def _level_progress_from_stats(stats: GameStats) -> LevelProgressConfig:
    session_hours = floor_divisor(stats.avg_session_duration_minutes / 60.0)
    return LevelProgressConfig(
        high_attempts_threshold=max(2, math.ceil(stats.avg_attempts_per_level * 2)),
        expected_levels_per_hour=clamp(stats.avg_levels_per_session / session_hours, 1.0, 120.0),
    )


def _session_pattern_from_stats(stats: GameStats) -> SessionPatternConfig:
    # A fifth of the average session is treated as the shortest normal one
    min_normal = clamp(stats.avg_session_duration_minutes * 60.0 * 0.2, 60.0, 600.0)
    rage_share = clamp(stats.rage_quit_percentage / 100.0, 0.0, 1.0)
    return SessionPatternConfig(
        min_normal_session_duration=min_normal,
        very_short_session_threshold=min_normal / 3.0,
        rage_quit_count_threshold=2 if rage_share <= 0.2 else 3,
    )


def generate_config(stats: GameStats | None = None, base: DifficultyConfig | None = None) -> DifficultyConfig:
    """
    Derive a full DifficultyConfig from game statistics.

    Raises ValueError when the stats fail validate(). Aggregation and signal
    weights are carried over from ``base``.
    """
    stats = stats or GameStats.create_default()
    ok, message = stats.validate()
    if not ok:
        raise ValueError(message)

    base = base or DifficultyConfig()
    config = DifficultyConfig(
        min_difficulty=stats.difficulty_min,
        max_difficulty=stats.difficulty_max,
        default_difficulty=stats.difficulty_default,
        max_change_per_session=stats.max_difficulty_change_per_session,
        aggregation=base.aggregation,
        signal_weights=dict(base.signal_weights),
        win_streak=_win_streak_from_stats(stats),
        loss_streak=_loss_streak_from_stats(stats),
        time_decay=_time_decay_from_stats(stats),
        rage_quit=_rage_quit_from_stats(stats),
        completion_rate=_completion_rate_from_stats(stats),
        level_progress=_level_progress_from_stats(stats),
        session_pattern=_session_pattern_from_stats(stats),
    ).sanitize()

    logger.info(
        {
            "event": "config_generated",
            "min_difficulty": config.min_difficulty,
            "max_difficulty": config.max_difficulty,
            "win_threshold": round(config.win_streak.win_threshold, 3),
            "loss_threshold": round(config.loss_streak.loss_threshold, 3),
            "decay_per_day": round(config.time_decay.decay_per_day, 3),
        }
    )
    return config
