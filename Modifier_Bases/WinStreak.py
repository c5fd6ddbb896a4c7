from DDA_Providers import WinStreakProvider
from Modifier_Bases.Base import BaseModifier
from Modifier_Configs import MODIFIER_WIN_STREAK, WinStreakConfig


def streak_magnitude(
    streak: int,
    threshold: float,
    step_size: float,
    cap: float,
    use_acceleration: bool = False,
    acceleration_factor: float = 1.0,
) -> float:
    """
    Unsigned streak adjustment shared by the win and loss modifiers.

    Below threshold -> 0. Otherwise (streak - threshold + 1) * step, optionally
    multiplied by acceleration_factor ** (streak - threshold), capped at cap.
    """
    if streak < threshold:
        return 0.0
    value = (streak - threshold + 1) * step_size
    if use_acceleration:
        value *= acceleration_factor ** (streak - threshold)
    return min(value, cap)


class WinStreakModifier(BaseModifier):
    """Raises difficulty after consecutive wins."""

    name = MODIFIER_WIN_STREAK

    def __init__(self, config: WinStreakConfig, win_streak_provider: WinStreakProvider):
        super().__init__(config)
        self.provider = win_streak_provider

    def _evaluate(self):
        if self.provider is None:
            return self._result(0.0, "No win streak data")

        streak = int(self.provider.get_win_streak())
        cfg = self.config
        value = streak_magnitude(
            streak,
            cfg.win_threshold,
            cfg.step_size,
            cfg.max_bonus,
            cfg.use_acceleration,
            cfg.acceleration_factor,
        )
        reason = f"Win streak: {streak} consecutive wins" if value > 0 else "No win streak"
        return self._result(
            value,
            reason,
            streak=streak,
            threshold=cfg.win_threshold,
            accelerated=cfg.use_acceleration,
            applied=value > 0,
        )
