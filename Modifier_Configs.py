"""
Modifier_Configs.py
-------------------
Typed parameter blocks, one per modifier, plus the DifficultyConfig root that
holds them together with the global range, per-session cap and aggregation
strategy. Configs are immutable; sanitize() returns a corrected copy with every
divisor-like field floored and every range ordered.
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path

from DDA_Models import AggregationKind, AggregationStrategy
from difficulty_config import (
    ACCELERATION_DEFAULT,
    ACCELERATION_MAX,
    ACCELERATION_MIN,
    DEFAULT_DIFFICULTY,
    DIMINISHING_FACTOR_DEFAULT,
    DIMINISHING_FACTOR_MAX,
    DIMINISHING_FACTOR_MIN,
    MAX_CHANGE_PER_SESSION,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    clamp,
    floor_divisor,
    is_finite_number,
)

logger = logging.getLogger(__name__)

MODIFIER_WIN_STREAK = "WinStreak"
MODIFIER_LOSS_STREAK = "LossStreak"
MODIFIER_TIME_DECAY = "TimeDecay"
MODIFIER_RAGE_QUIT = "RageQuit"
MODIFIER_COMPLETION_RATE = "CompletionRate"
MODIFIER_LEVEL_PROGRESS = "LevelProgress"
MODIFIER_SESSION_PATTERN = "SessionPattern"


@dataclass(frozen=True)
class ModifierConfig:
    enabled: bool = True
    # Lower runs first and wins ties
    priority: int = 0

    def sanitized(self):
        return self


@dataclass(frozen=True)
class WinStreakConfig(ModifierConfig):
    priority: int = 1
    win_threshold: float = 3.0
    step_size: float = 0.5
    max_bonus: float = 2.0
    use_acceleration: bool = False
    acceleration_factor: float = ACCELERATION_DEFAULT

    def sanitized(self):
        return replace(
            self,
            win_threshold=max(1.0, _finite(self.win_threshold, 3.0)),
            step_size=max(0.0, _finite(self.step_size, 0.5)),
            max_bonus=max(0.0, _finite(self.max_bonus, 2.0)),
            acceleration_factor=clamp(
                _finite(self.acceleration_factor, ACCELERATION_DEFAULT), ACCELERATION_MIN, ACCELERATION_MAX
            ),
        )


@dataclass(frozen=True)
class LossStreakConfig(ModifierConfig):
    priority: int = 2
    loss_threshold: float = 2.0
    step_size: float = 0.3
    max_reduction: float = 1.5
    use_acceleration: bool = False
    acceleration_factor: float = ACCELERATION_DEFAULT

    def sanitized(self):
        return replace(
            self,
            loss_threshold=max(1.0, _finite(self.loss_threshold, 2.0)),
            step_size=max(0.0, _finite(self.step_size, 0.3)),
            max_reduction=max(0.0, _finite(self.max_reduction, 1.5)),
            acceleration_factor=clamp(
                _finite(self.acceleration_factor, ACCELERATION_DEFAULT), ACCELERATION_MIN, ACCELERATION_MAX
            ),
        )


@dataclass(frozen=True)
class TimeDecayConfig(ModifierConfig):
    priority: int = 3
    decay_per_day: float = 0.5
    max_decay: float = 2.0
    grace_hours: float = 6.0

    def sanitized(self):
        return replace(
            self,
            decay_per_day=max(0.0, _finite(self.decay_per_day, 0.5)),
            max_decay=max(0.0, _finite(self.max_decay, 2.0)),
            grace_hours=max(0.0, _finite(self.grace_hours, 6.0)),
        )


@dataclass(frozen=True)
class RageQuitConfig(ModifierConfig):
    priority: int = 4
    rage_quit_reduction: float = 1.0
    quit_reduction: float = 0.5
    mid_play_reduction: float = 0.3

    def sanitized(self):
        return replace(
            self,
            rage_quit_reduction=max(0.0, _finite(self.rage_quit_reduction, 1.0)),
            quit_reduction=max(0.0, _finite(self.quit_reduction, 0.5)),
            mid_play_reduction=max(0.0, _finite(self.mid_play_reduction, 0.3)),
        )


@dataclass(frozen=True)
class CompletionRateConfig(ModifierConfig):
    priority: int = 5
    low_completion_threshold: float = 0.4
    high_completion_threshold: float = 0.7
    low_completion_decrease: float = 0.5
    high_completion_increase: float = 0.5
    min_attempts_required: int = 10
    # Weight of the level-specific rate in the blend
    total_stats_weight: float = 0.3

    def sanitized(self):
        low = clamp(_finite(self.low_completion_threshold, 0.4), 0.0, 1.0)
        high = clamp(_finite(self.high_completion_threshold, 0.7), 0.0, 1.0)
        if low > high:
            low, high = high, low
        return replace(
            self,
            low_completion_threshold=low,
            high_completion_threshold=high,
            low_completion_decrease=max(0.0, _finite(self.low_completion_decrease, 0.5)),
            high_completion_increase=max(0.0, _finite(self.high_completion_increase, 0.5)),
            min_attempts_required=max(1, int(_finite(self.min_attempts_required, 10))),
            total_stats_weight=clamp(_finite(self.total_stats_weight, 0.3), 0.0, 1.0),
        )


@dataclass(frozen=True)
class LevelProgressConfig(ModifierConfig):
    priority: int = 6
    high_attempts_threshold: int = 5
    difficulty_decrease_per_attempt: float = 0.2
    fast_completion_ratio: float = 0.7
    slow_completion_ratio: float = 1.5
    fast_completion_bonus: float = 0.3
    slow_completion_penalty: float = 0.3
    max_penalty_multiplier: float = 2.0
    expected_levels_per_hour: float = 15.0
    level_progression_factor: float = 0.1
    hard_level_threshold: float = 3.0
    mastery_completion_rate: float = 0.7
    mastery_bonus: float = 0.3
    easy_level_threshold: float = 2.0
    struggle_completion_rate: float = 0.3
    struggle_penalty: float = 0.3

    def sanitized(self):
        fast = floor_divisor(_finite(self.fast_completion_ratio, 0.7))
        slow = floor_divisor(_finite(self.slow_completion_ratio, 1.5))
        if fast > slow:
            fast, slow = slow, fast
        return replace(
            self,
            high_attempts_threshold=max(0, int(_finite(self.high_attempts_threshold, 5))),
            difficulty_decrease_per_attempt=max(0.0, _finite(self.difficulty_decrease_per_attempt, 0.2)),
            fast_completion_ratio=fast,
            slow_completion_ratio=slow,
            fast_completion_bonus=max(0.0, _finite(self.fast_completion_bonus, 0.3)),
            slow_completion_penalty=max(0.0, _finite(self.slow_completion_penalty, 0.3)),
            max_penalty_multiplier=max(1.0, _finite(self.max_penalty_multiplier, 2.0)),
            expected_levels_per_hour=floor_divisor(_finite(self.expected_levels_per_hour, 15.0)),
            level_progression_factor=max(0.0, _finite(self.level_progression_factor, 0.1)),
            mastery_bonus=max(0.0, _finite(self.mastery_bonus, 0.3)),
            struggle_penalty=max(0.0, _finite(self.struggle_penalty, 0.3)),
        )


@dataclass(frozen=True)
class SessionPatternConfig(ModifierConfig):
    priority: int = 7
    min_normal_session_duration: float = 180.0
    very_short_session_threshold: float = 60.0
    very_short_session_decrease: float = 0.5
    session_history_size: int = 5
    short_session_ratio: float = 0.5
    consistent_short_sessions_decrease: float = 0.8
    rage_quit_pattern_decrease: float = 1.0
    rage_quit_count_threshold: int = 2
    rage_quit_penalty_multiplier: float = 0.5
    mid_level_quit_decrease: float = 0.4
    mid_level_quit_ratio: float = 0.3
    difficulty_improvement_threshold: float = 1.2
    ineffective_adjustment_decrease: float = 0.3
    oscillation_max_streak: int = 2
    oscillation_min_games: int = 10
    oscillation_nudge: float = 0.1

    def sanitized(self):
        return replace(
            self,
            min_normal_session_duration=floor_divisor(_finite(self.min_normal_session_duration, 180.0)),
            very_short_session_threshold=max(0.0, _finite(self.very_short_session_threshold, 60.0)),
            very_short_session_decrease=max(0.0, _finite(self.very_short_session_decrease, 0.5)),
            session_history_size=max(1, int(_finite(self.session_history_size, 5))),
            short_session_ratio=clamp(_finite(self.short_session_ratio, 0.5), 0.0, 1.0),
            consistent_short_sessions_decrease=max(0.0, _finite(self.consistent_short_sessions_decrease, 0.8)),
            rage_quit_pattern_decrease=max(0.0, _finite(self.rage_quit_pattern_decrease, 1.0)),
            rage_quit_count_threshold=max(1, int(_finite(self.rage_quit_count_threshold, 2))),
            rage_quit_penalty_multiplier=max(0.0, _finite(self.rage_quit_penalty_multiplier, 0.5)),
            mid_level_quit_decrease=max(0.0, _finite(self.mid_level_quit_decrease, 0.4)),
            mid_level_quit_ratio=clamp(_finite(self.mid_level_quit_ratio, 0.3), 0.0, 1.0),
            difficulty_improvement_threshold=floor_divisor(_finite(self.difficulty_improvement_threshold, 1.2)),
            ineffective_adjustment_decrease=max(0.0, _finite(self.ineffective_adjustment_decrease, 0.3)),
            oscillation_max_streak=max(0, int(_finite(self.oscillation_max_streak, 2))),
            oscillation_min_games=max(0, int(_finite(self.oscillation_min_games, 10))),
            oscillation_nudge=max(0.0, _finite(self.oscillation_nudge, 0.1)),
        )


# JSON section key (also the DifficultyConfig attribute) -> config class
MODIFIER_SECTIONS = {
    "win_streak": WinStreakConfig,
    "loss_streak": LossStreakConfig,
    "time_decay": TimeDecayConfig,
    "rage_quit": RageQuitConfig,
    "completion_rate": CompletionRateConfig,
    "level_progress": LevelProgressConfig,
    "session_pattern": SessionPatternConfig,
}


@dataclass(frozen=True)
class DifficultyConfig:
    min_difficulty: float = MIN_DIFFICULTY
    max_difficulty: float = MAX_DIFFICULTY
    default_difficulty: float = DEFAULT_DIFFICULTY
    max_change_per_session: float = MAX_CHANGE_PER_SESSION
    aggregation: AggregationStrategy = field(default_factory=AggregationStrategy)
    # Modifier name -> weight, read by the weighted-average strategy
    signal_weights: dict = field(default_factory=dict)

    win_streak: WinStreakConfig = field(default_factory=WinStreakConfig)
    loss_streak: LossStreakConfig = field(default_factory=LossStreakConfig)
    time_decay: TimeDecayConfig = field(default_factory=TimeDecayConfig)
    rage_quit: RageQuitConfig = field(default_factory=RageQuitConfig)
    completion_rate: CompletionRateConfig = field(default_factory=CompletionRateConfig)
    level_progress: LevelProgressConfig = field(default_factory=LevelProgressConfig)
    session_pattern: SessionPatternConfig = field(default_factory=SessionPatternConfig)

    def modifier_configs(self) -> dict:
        return {section: getattr(self, section) for section in MODIFIER_SECTIONS}

    def sanitize(self) -> "DifficultyConfig":
        low = _finite(self.min_difficulty, MIN_DIFFICULTY)
        high = _finite(self.max_difficulty, MAX_DIFFICULTY)
        if low > high:
            low, high = high, low
        default = clamp(_finite(self.default_difficulty, DEFAULT_DIFFICULTY), low, high)

        factor = self.aggregation.factor
        if self.aggregation.kind is AggregationKind.DIMINISHING_RETURNS:
            factor = clamp(
                _finite(factor, DIMINISHING_FACTOR_DEFAULT), DIMINISHING_FACTOR_MIN, DIMINISHING_FACTOR_MAX
            )

        weights = {
            str(name): max(0.0, float(weight))
            for name, weight in (self.signal_weights or {}).items()
            if is_finite_number(weight)
        }

        sections = {section: cfg.sanitized() for section, cfg in self.modifier_configs().items()}
        return replace(
            self,
            min_difficulty=low,
            max_difficulty=high,
            default_difficulty=default,
            max_change_per_session=max(0.0, _finite(self.max_change_per_session, MAX_CHANGE_PER_SESSION)),
            aggregation=replace(self.aggregation, factor=factor),
            signal_weights=weights,
            **sections,
        )


def _finite(value, fallback: float) -> float:
    if is_finite_number(value):
        return float(value)
    return fallback


def _coerce(value, template):
    if isinstance(template, bool):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if isinstance(template, int):
        return int(value)
    if isinstance(template, float):
        return float(value)
    return value


def _section_from_dict(config_cls, data) -> ModifierConfig:
    if data is None:
        return config_cls()
    if not isinstance(data, dict):
        raise TypeError(f"{config_cls.__name__} section must be a dictionary")
    defaults = config_cls()
    kwargs = {}
    for f in fields(config_cls):
        if f.name in data:
            kwargs[f.name] = _coerce(data[f.name], getattr(defaults, f.name))
    return config_cls(**kwargs)


def config_from_dict(data: dict) -> DifficultyConfig:
    """
    Build a sanitized DifficultyConfig from a JSON-style dictionary.

    Modifier sections may sit at the top level ("win_streak": {...}) or under
    "modifiers". Unknown keys are ignored.
    """
    if not isinstance(data, dict):
        raise ValueError("difficulty config root must be a JSON object")

    aggregation_data = data.get("aggregation") or {}
    if isinstance(aggregation_data, str):
        aggregation_data = {"strategy": aggregation_data}
    strategy_name = aggregation_data.get("strategy", data.get("aggregation_strategy", AggregationKind.DIMINISHING_RETURNS.value))
    factor = aggregation_data.get("factor", data.get("diminishing_factor", DIMINISHING_FACTOR_DEFAULT))
    aggregation = AggregationStrategy.from_name(strategy_name, float(factor))

    modifiers = data.get("modifiers") or {}
    sections = {}
    for section, config_cls in MODIFIER_SECTIONS.items():
        sections[section] = _section_from_dict(config_cls, modifiers.get(section, data.get(section)))

    config = DifficultyConfig(
        min_difficulty=float(data.get("min_difficulty", MIN_DIFFICULTY)),
        max_difficulty=float(data.get("max_difficulty", MAX_DIFFICULTY)),
        default_difficulty=float(data.get("default_difficulty", DEFAULT_DIFFICULTY)),
        max_change_per_session=float(data.get("max_change_per_session", MAX_CHANGE_PER_SESSION)),
        aggregation=aggregation,
        signal_weights=dict(data.get("signal_weights") or {}),
        **sections,
    )
    return config.sanitize()


def config_to_dict(config: DifficultyConfig) -> dict:
    return {
        "min_difficulty": config.min_difficulty,
        "max_difficulty": config.max_difficulty,
        "default_difficulty": config.default_difficulty,
        "max_change_per_session": config.max_change_per_session,
        "aggregation": {
            "strategy": config.aggregation.kind.value,
            "factor": config.aggregation.factor,
        },
        "signal_weights": dict(config.signal_weights),
        "modifiers": {section: asdict(cfg) for section, cfg in config.modifier_configs().items()},
    }


def load_config(path) -> DifficultyConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    config = config_from_dict(data)
    logger.info({"event": "config_loaded", "path": str(path), "strategy": config.aggregation.kind.value})
    return config


def save_config(config: DifficultyConfig, path) -> None:
    with open(Path(path), "w", encoding="utf-8") as f:
        json.dump(config_to_dict(config), f, indent=2)
