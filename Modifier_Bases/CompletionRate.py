from DDA_Providers import LevelProgressProvider, WinStreakProvider
from Modifier_Bases.Base import BaseModifier
from Modifier_Configs import MODIFIER_COMPLETION_RATE, CompletionRateConfig
from difficulty_config import clamp


class CompletionRateModifier(BaseModifier):
    """
    Adjusts difficulty from the player's overall win rate, blended with the
    completion rate of the current level when a level provider is available.
    """

    name = MODIFIER_COMPLETION_RATE

    def __init__(
        self,
        config: CompletionRateConfig,
        win_streak_provider: WinStreakProvider,
        level_progress_provider: LevelProgressProvider | None = None,
    ):
        super().__init__(config)
        self.provider = win_streak_provider
        self.level_provider = level_progress_provider

    def _evaluate(self):
        if self.provider is None:
            return self._result(0.0, "No completion data")

        cfg = self.config
        total_wins = max(0, int(self.provider.get_total_wins()))
        total_losses = max(0, int(self.provider.get_total_losses()))
        total_attempts = total_wins + total_losses

        if total_attempts < cfg.min_attempts_required:
            return self._result(
                0.0,
                f"Not enough data ({total_attempts}/{cfg.min_attempts_required} attempts)",
                total_attempts=total_attempts,
                required=cfg.min_attempts_required,
                applied=False,
            )

        completion_rate = total_wins / total_attempts
        if self.level_provider is not None:
            level_rate = clamp(float(self.level_provider.get_completion_rate()), 0.0, 1.0)
            weight = cfg.total_stats_weight
        else:
            level_rate = completion_rate
            weight = 0.0
        blended = completion_rate * (1.0 - weight) + level_rate * weight

        value = 0.0
        reason = "Completion rate normal"
        if blended < cfg.low_completion_threshold:
            value = -cfg.low_completion_decrease
            reason = f"Low completion rate ({blended:.0%}) - decreasing difficulty"
        elif blended > cfg.high_completion_threshold:
            value = cfg.high_completion_increase
            reason = f"High completion rate ({blended:.0%}) - increasing difficulty"

        return self._result(
            value,
            reason,
            completion_rate=round(completion_rate, 4),
            level_completion_rate=round(level_rate, 4),
            blended_rate=round(blended, 4),
            total_wins=total_wins,
            total_losses=total_losses,
            applied=value != 0,
        )
