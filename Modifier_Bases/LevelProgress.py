from DDA_Providers import LevelProgressProvider
from Modifier_Bases.Base import BaseModifier
from Modifier_Configs import MODIFIER_LEVEL_PROGRESS, LevelProgressConfig
from difficulty_config import SECONDS_IN_HOUR, floor_divisor

# Progression differences smaller than this are ignored
MIN_PROGRESSION_ADJUSTMENT = 0.01


class LevelProgressModifier(BaseModifier):
    """
    Multi-factor read of level progress. Each factor adds to the total:

    1. attempts above the high-attempts threshold lower difficulty per extra attempt
    2. beating the expected level time raises it, overrunning lowers it
    3. progressing faster/slower than expected levels-per-hour moves it proportionally
    4. mastering hard levels raises it, struggling on easy levels lowers it
       (at most one of the two per call)
    """

    name = MODIFIER_LEVEL_PROGRESS

    def __init__(self, config: LevelProgressConfig, level_progress_provider: LevelProgressProvider):
        super().__init__(config)
        self.provider = level_progress_provider

    def _attempts_adjustment(self, attempts: int) -> float:
        cfg = self.config
        if attempts > cfg.high_attempts_threshold:
            return -(attempts - cfg.high_attempts_threshold) * cfg.difficulty_decrease_per_attempt
        return 0.0

    def _completion_time_adjustment(self, time_percentage: float) -> float:
        cfg = self.config
        if time_percentage <= 0:
            return 0.0
        if time_percentage < cfg.fast_completion_ratio:
            fast_ratio = floor_divisor(cfg.fast_completion_ratio)
            speed = (fast_ratio - time_percentage) / fast_ratio
            return cfg.fast_completion_bonus * (1.0 + speed)
        if time_percentage > cfg.slow_completion_ratio:
            slowness = time_percentage / floor_divisor(cfg.slow_completion_ratio)
            return -cfg.slow_completion_penalty * min(slowness, cfg.max_penalty_multiplier)
        return 0.0

    def _expected_level(self, current_level: int, average_completion_time: float) -> int:
        # Hours spent reaching the current level at the observed pace
        hours_played = current_level * average_completion_time / SECONDS_IN_HOUR
        return int(hours_played * floor_divisor(self.config.expected_levels_per_hour))

    def _mastery_adjustment(self, level_difficulty: float, completion_rate: float) -> tuple[float, str | None]:
        cfg = self.config
        if level_difficulty >= cfg.hard_level_threshold and completion_rate > cfg.mastery_completion_rate:
            return cfg.mastery_bonus, "Mastering hard levels"
        if level_difficulty <= cfg.easy_level_threshold and completion_rate < cfg.struggle_completion_rate:
            return -cfg.struggle_penalty, "Struggling on easy levels"
        return 0.0, None

    def _evaluate(self):
        if self.provider is None:
            return self._result(0.0, "No level progress data")

        cfg = self.config
        value = 0.0
        reasons = []

        attempts = int(self.provider.get_attempts_on_current_level())
        adjustment = self._attempts_adjustment(attempts)
        if adjustment:
            value += adjustment
            reasons.append(f"High attempts ({attempts})")

        time_percentage = float(self.provider.get_current_level_time_percentage())
        adjustment = self._completion_time_adjustment(time_percentage)
        if adjustment > 0:
            value += adjustment
            reasons.append(f"Fast completion ({time_percentage:.0%} of expected)")
        elif adjustment < 0:
            value += adjustment
            reasons.append(f"Slow completion ({time_percentage:.0%} of expected)")

        current_level = int(self.provider.get_current_level())
        average_completion_time = float(self.provider.get_average_completion_time())
        expected_level = 0
        if average_completion_time > 0 and current_level > 0:
            expected_level = self._expected_level(current_level, average_completion_time)
            if expected_level > 0:
                level_difference = current_level - expected_level
                adjustment = level_difference * cfg.level_progression_factor
                if abs(adjustment) > MIN_PROGRESSION_ADJUSTMENT:
                    value += adjustment
                    pace = "Fast" if level_difference > 0 else "Slow"
                    reasons.append(f"{pace} progression (L{current_level} vs expected L{expected_level})")

        level_difficulty = float(self.provider.get_current_level_difficulty())
        completion_rate = float(self.provider.get_completion_rate())
        adjustment, mastery_reason = self._mastery_adjustment(level_difficulty, completion_rate)
        if mastery_reason is not None:
            value += adjustment
            reasons.append(mastery_reason)

        return self._result(
            value,
            ", ".join(reasons) if reasons else "Normal level progression",
            attempts=attempts,
            time_percentage=round(time_percentage, 4),
            current_level=current_level,
            expected_level=expected_level,
            level_difficulty=level_difficulty,
            completion_rate=round(completion_rate, 4),
            average_completion_time=average_completion_time,
            applied=abs(value) > 0,
        )
