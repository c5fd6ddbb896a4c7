from DDA_Providers import WinStreakProvider
from Modifier_Bases.Base import BaseModifier
from Modifier_Bases.WinStreak import streak_magnitude
from Modifier_Configs import MODIFIER_LOSS_STREAK, LossStreakConfig


class LossStreakModifier(BaseModifier):
    """Lowers difficulty after consecutive losses. Never positive."""

    name = MODIFIER_LOSS_STREAK

    def __init__(self, config: LossStreakConfig, win_streak_provider: WinStreakProvider):
        super().__init__(config)
        self.provider = win_streak_provider

    def _evaluate(self):
        if self.provider is None:
            return self._result(0.0, "No loss streak data")

        streak = int(self.provider.get_loss_streak())
        cfg = self.config
        magnitude = streak_magnitude(
            streak,
            cfg.loss_threshold,
            cfg.step_size,
            cfg.max_reduction,
            cfg.use_acceleration,
            cfg.acceleration_factor,
        )
        value = -magnitude if magnitude > 0 else 0.0
        reason = f"Loss streak: {streak} consecutive losses" if value < 0 else "No loss streak"
        return self._result(
            value,
            reason,
            streak=streak,
            threshold=cfg.loss_threshold,
            accelerated=cfg.use_acceleration,
            applied=value < 0,
        )
