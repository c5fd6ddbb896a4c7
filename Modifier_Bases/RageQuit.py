from DDA_Models import QuitType
from DDA_Providers import RageQuitProvider
from Modifier_Bases.Base import BaseModifier
from Modifier_Configs import MODIFIER_RAGE_QUIT, RageQuitConfig


class RageQuitModifier(BaseModifier):
    """Eases difficulty according to how the last session ended. Never positive."""

    name = MODIFIER_RAGE_QUIT

    def __init__(self, config: RageQuitConfig, rage_quit_provider: RageQuitProvider):
        super().__init__(config)
        self.provider = rage_quit_provider

    def _penalty_for(self, quit_type: QuitType | None) -> tuple[float, str]:
        cfg = self.config
        if quit_type is QuitType.RAGE_QUIT:
            return cfg.rage_quit_reduction, "Rage quit detected"
        if quit_type is QuitType.NORMAL:
            return cfg.quit_reduction, "Quit after playing"
        if quit_type is QuitType.MID_PLAY:
            return cfg.mid_play_reduction, "Quit during play"
        return 0.0, "No quit recorded"

    def _evaluate(self):
        if self.provider is None:
            return self._result(0.0, "No quit data")

        quit_type = QuitType.parse_or_none(self.provider.get_last_quit_type())
        penalty, reason = self._penalty_for(quit_type)
        value = -penalty if penalty > 0 else 0.0
        if penalty > 0 and quit_type is QuitType.RAGE_QUIT:
            duration = self.provider.get_current_session_duration()
            if duration and duration > 0:
                reason = f"{reason} (played only {duration:.0f}s)"

        return self._result(
            value,
            reason,
            last_quit_type=quit_type.value if quit_type is not None else None,
            rage_quit_detected=quit_type is QuitType.RAGE_QUIT,
            applied=value < 0,
        )
