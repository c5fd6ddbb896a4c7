import math

from DDA_Models import QuitType
from DDA_Providers import RageQuitProvider, SessionPatternProvider, WinStreakProvider
from Modifier_Bases.Base import BaseModifier
from Modifier_Configs import MODIFIER_SESSION_PATTERN, SessionPatternConfig
from difficulty_config import floor_divisor


class SessionPatternModifier(BaseModifier):
    """
    Reads how the player's sessions end and how long they last. Every factor
    that fires lowers difficulty; the penalties add up.

    Current session: very short session, short average session, repeated
    rage quits, quitting mid level.
    History (only when a SessionPatternProvider is wired): share of short
    sessions, share of mid-level quits, and whether the last difficulty change
    failed to lengthen sessions.

    When the player alternates wins and losses over enough games the result is
    reduced to a small nudge so it cannot feed an oscillation.
    """

    name = MODIFIER_SESSION_PATTERN

    def __init__(
        self,
        config: SessionPatternConfig,
        rage_quit_provider: RageQuitProvider,
        session_pattern_provider: SessionPatternProvider | None = None,
        win_streak_provider: WinStreakProvider | None = None,
    ):
        super().__init__(config)
        self.provider = rage_quit_provider
        self.history_provider = session_pattern_provider
        self.streak_provider = win_streak_provider

    def _current_session_penalties(self, reasons: list) -> float:
        cfg = self.config
        penalty = 0.0

        current = float(self.provider.get_current_session_duration())
        if 0 < current < cfg.very_short_session_threshold:
            penalty += cfg.very_short_session_decrease
            reasons.append(f"Very short session ({current:.0f}s)")

        average = float(self.provider.get_average_session_duration())
        if 0 < average < cfg.min_normal_session_duration:
            shortfall = 1.0 - average / cfg.min_normal_session_duration
            penalty += shortfall * cfg.consistent_short_sessions_decrease
            reasons.append(f"Short avg sessions ({average:.0f}s)")

        rage_quits = int(self.provider.get_recent_rage_quit_count())
        if rage_quits >= cfg.rage_quit_count_threshold:
            penalty += cfg.rage_quit_pattern_decrease * cfg.rage_quit_penalty_multiplier
            reasons.append(f"Recent rage quits ({rage_quits})")

        if QuitType.parse_or_none(self.provider.get_last_quit_type()) is QuitType.MID_PLAY:
            penalty += cfg.mid_level_quit_decrease
            reasons.append("Mid-level quit detected")

        return penalty

    def _history_penalties(self, reasons: list) -> float:
        cfg = self.config
        history = self.history_provider
        penalty = 0.0

        durations = list(history.get_recent_session_durations(cfg.session_history_size) or [])
        if len(durations) >= cfg.session_history_size:
            short = sum(1 for d in durations if d < cfg.min_normal_session_duration)
            ratio = short / len(durations)
            if ratio > cfg.short_session_ratio:
                excess = (ratio - cfg.short_session_ratio) / floor_divisor(1.0 - cfg.short_session_ratio)
                penalty += cfg.consistent_short_sessions_decrease * (1.0 + excess)
                reasons.append(f"History shows {ratio:.0%} short sessions")

        total_quits = int(history.get_total_recent_quits())
        mid_level_quits = int(history.get_recent_mid_level_quits())
        if total_quits > 0:
            ratio = mid_level_quits / total_quits
            if ratio > cfg.mid_level_quit_ratio:
                excess = (ratio - cfg.mid_level_quit_ratio) / floor_divisor(1.0 - cfg.mid_level_quit_ratio)
                penalty += cfg.mid_level_quit_decrease * (1.0 + excess)
                reasons.append(f"High mid-level quit ratio ({ratio:.0%})")

        previous_difficulty = float(history.get_previous_difficulty())
        duration_before = float(history.get_session_duration_before_last_adjustment())
        current = float(self.provider.get_current_session_duration())
        if previous_difficulty > 0 and duration_before > 0 and current > 0:
            improvement = current / duration_before
            if improvement < cfg.difficulty_improvement_threshold:
                penalty += cfg.ineffective_adjustment_decrease
                reasons.append("Difficulty adjustment not effective")

        return penalty

    def _is_oscillating(self) -> bool:
        if self.streak_provider is None:
            return False
        cfg = self.config
        win_streak = int(self.streak_provider.get_win_streak())
        loss_streak = int(self.streak_provider.get_loss_streak())
        total_games = int(self.streak_provider.get_total_wins()) + int(self.streak_provider.get_total_losses())
        return (
            win_streak <= cfg.oscillation_max_streak
            and loss_streak <= cfg.oscillation_max_streak
            and total_games >= cfg.oscillation_min_games
        )

    def _evaluate(self):
        if self.provider is None:
            return self._result(0.0, "No session data")

        reasons = []
        penalty = self._current_session_penalties(reasons)
        if self.history_provider is not None:
            penalty += self._history_penalties(reasons)

        value = -penalty if penalty > 0 else 0.0
        dampened = False
        if value != 0 and self._is_oscillating():
            value = math.copysign(self.config.oscillation_nudge, value) or 0.0
            reasons.append("Balanced win/loss pattern")
            dampened = True

        return self._result(
            value,
            ", ".join(reasons) if reasons else "Normal session pattern",
            raw_penalty=round(penalty, 4),
            history_checked=self.history_provider is not None,
            dampened=dampened,
            applied=value < 0,
        )
