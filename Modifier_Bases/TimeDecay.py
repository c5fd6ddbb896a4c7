from DDA_Providers import TimeDecayProvider
from Modifier_Bases.Base import BaseModifier
from Modifier_Configs import MODIFIER_TIME_DECAY, TimeDecayConfig
from difficulty_config import DAYS_IN_WEEK, HOURS_IN_DAY, SECONDS_IN_HOUR


class TimeDecayModifier(BaseModifier):
    """Eases difficulty for players returning after a break. Never positive."""

    name = MODIFIER_TIME_DECAY

    def __init__(self, config: TimeDecayConfig, time_decay_provider: TimeDecayProvider):
        super().__init__(config)
        self.provider = time_decay_provider

    @staticmethod
    def _describe_absence(hours: float, days_away: int, last_play_time) -> str:
        if days_away < 1:
            text = f"Away for {hours:.1f} hours"
        elif days_away < DAYS_IN_WEEK:
            text = f"Away for {days_away} days"
        else:
            text = f"Away for {days_away / DAYS_IN_WEEK:.1f} weeks"
        if last_play_time is not None:
            stamp = "%b %d %H:%M" if days_away < 1 else "%b %d"
            text += f" (last play: {last_play_time.strftime(stamp)})"
        return text

    def _evaluate(self):
        if self.provider is None:
            return self._result(0.0, "No play history")

        time_since = self.provider.get_time_since_last_play()
        if time_since is None:
            return self._result(0.0, "No play history", applied=False)

        last_play_time = self.provider.get_last_play_time()
        days_away = max(0, int(self.provider.get_days_away_from_game()))
        hours = max(0.0, time_since.total_seconds() / SECONDS_IN_HOUR)
        cfg = self.config

        value = 0.0
        reason = "Recently played"
        if hours > cfg.grace_hours:
            if days_away > 0:
                effective_days = float(days_away)
            else:
                # Past the grace period but under a full day
                effective_days = (hours - cfg.grace_hours) / HOURS_IN_DAY
            value = max(-(effective_days * cfg.decay_per_day), -cfg.max_decay)
            if value == 0:
                value = 0.0
            reason = self._describe_absence(hours, days_away, last_play_time)

        return self._result(
            value,
            reason,
            last_play_time=last_play_time.isoformat() if last_play_time is not None else None,
            hours_away=round(hours, 3),
            days_away=days_away,
            grace_hours=cfg.grace_hours,
            applied=value < 0,
        )
