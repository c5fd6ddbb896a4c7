"""
Session_Based.py
----------------
High-level entrypoint used by the script and the backend. Wires modifiers to
whichever providers the host supplies, runs one calculation for a player
session and builds the summary consumed by API clients.
"""

import logging
from functools import lru_cache

from DDA_Algo import DifficultyCalculator
from DDA_Providers import DifficultyDataProvider, PlayerSnapshot
from DDA_Models import DifficultyResult, SignalResult
from Modifier_Bases.CompletionRate import CompletionRateModifier
from Modifier_Bases.LevelProgress import LevelProgressModifier
from Modifier_Bases.LossStreak import LossStreakModifier
from Modifier_Bases.RageQuit import RageQuitModifier
from Modifier_Bases.SessionPattern import SessionPatternModifier
from Modifier_Bases.TimeDecay import TimeDecayModifier
from Modifier_Bases.WinStreak import WinStreakModifier
from Modifier_Configs import DifficultyConfig, config_from_dict
from difficulty_config import difficulty_from_value, difficulty_percentage

logger = logging.getLogger(__name__)

# config section -> (modifier class, required provider keys, optional provider keys)
# Provider keys are passed to the constructor positionally, required first.
MODIFIER_WIRING = {
    "win_streak": (WinStreakModifier, ("win_streak",), ()),
    "loss_streak": (LossStreakModifier, ("win_streak",), ()),
    "time_decay": (TimeDecayModifier, ("time_decay",), ()),
    "rage_quit": (RageQuitModifier, ("rage_quit",), ()),
    "completion_rate": (CompletionRateModifier, ("win_streak",), ("level_progress",)),
    "level_progress": (LevelProgressModifier, ("level_progress",), ()),
    "session_pattern": (SessionPatternModifier, ("rage_quit",), ("session_pattern", "win_streak")),
}


def build_modifiers(config: DifficultyConfig, providers: dict) -> list:
    """
    Instantiate every enabled modifier whose required providers are present.

    A missing required provider leaves the modifier out entirely; it is not an
    error. Missing optional providers are passed as None.
    """
    providers = providers or {}
    modifiers = []
    for section, (modifier_cls, required, optional) in MODIFIER_WIRING.items():
        section_config = getattr(config, section)
        if not section_config.enabled:
            continue
        if any(providers.get(key) is None for key in required):
            logger.debug({"event": "modifier_skipped", "modifier": modifier_cls.name, "missing": list(required)})
            continue
        args = [providers[key] for key in required] + [providers.get(key) for key in optional]
        modifiers.append(modifier_cls(section_config, *args))
    return modifiers


@lru_cache(maxsize=64)
def _section_for(modifier_name: str) -> str:
    key = "".join(ch for ch in str(modifier_name).lower() if ch.isalnum())
    for section, (modifier_cls, _, _) in MODIFIER_WIRING.items():
        if key in (section.replace("_", ""), modifier_cls.name.lower()):
            return section
    raise ValueError(f"Unknown modifier: {modifier_name!r}")


def evaluate_modifier(modifier_name: str, player, config=None) -> SignalResult:
    """
    Run a single modifier against a player snapshot, ignoring its enabled flag.
    Accepts "WinStreak" or "win_streak" style names.
    """
    section = _section_for(modifier_name)
    snapshot = player if isinstance(player, PlayerSnapshot) else PlayerSnapshot.from_dict(player)
    config = _resolve_config(config)
    modifier_cls, required, optional = MODIFIER_WIRING[section]
    providers = snapshot.providers()
    if any(providers.get(key) is None for key in required):
        return SignalResult.no_change(modifier_cls.name, reason="Provider unavailable")
    args = [providers[key] for key in required] + [providers.get(key) for key in optional]
    return modifier_cls(getattr(config, section), *args).calculate()


def create_calculator(providers: dict, config: DifficultyConfig | None = None) -> DifficultyCalculator:
    config = (config or DifficultyConfig()).sanitize()
    return DifficultyCalculator(build_modifiers(config, providers), config)


def update_difficulty(calculator: DifficultyCalculator, difficulty_provider: DifficultyDataProvider) -> DifficultyResult:
    """Read the stored difficulty, calculate, and write the new value back."""
    result = calculator.calculate_difficulty(difficulty_provider.get_current_difficulty())
    difficulty_provider.set_current_difficulty(result.new_difficulty)
    return result


def _resolve_config(config) -> DifficultyConfig:
    if config is None:
        return DifficultyConfig().sanitize()
    if isinstance(config, DifficultyConfig):
        return config.sanitize()
    if isinstance(config, dict):
        return config_from_dict(config)
    raise TypeError("config must be a DifficultyConfig or a dictionary")


def run_difficulty_adjustment(player, config=None, user_id: str = None) -> dict:
    """
    Calculate the next difficulty for one player session.

    ``player`` is a PlayerSnapshot or a JSON-style dict accepted by
    PlayerSnapshot.from_dict; ``config`` a DifficultyConfig or dict.
    """
    if user_id is None:
        user_id = "unknown_user"

    snapshot = player if isinstance(player, PlayerSnapshot) else PlayerSnapshot.from_dict(player)
    config = _resolve_config(config)

    calculator = create_calculator(snapshot.providers(), config)
    result = calculator.calculate_difficulty(snapshot.get_current_difficulty())

    return {
        "user_id": user_id,
        "DDA_Result": result.to_dict(),
        "Summary": {
            "Previous_Difficulty": round(result.previous_difficulty, 3),
            "New_Difficulty": round(result.new_difficulty, 3),
            "Adjustment": round(result.total_adjustment, 3),
            "Difficulty_Label": difficulty_from_value(result.new_difficulty),
            "Difficulty_Percentage": round(
                difficulty_percentage(result.new_difficulty, config.min_difficulty, config.max_difficulty), 3
            ),
            "Primary_Reason": result.primary_reason,
            "Has_Changed": result.has_changed,
            "Active_Modifiers": [m.name for m in calculator.modifiers],
        },
    }
