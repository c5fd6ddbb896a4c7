"""
DDA_Providers.py
----------------
Read-only query surfaces the host game implements to expose player behaviour.
A host may implement any subset; a modifier whose provider is missing is left
out of the active modifier list (see Session_Based.build_modifiers).

PlayerSnapshot is a plain in-memory implementation of every contract, used by
the JSON script, the testing API and the tests.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Protocol, runtime_checkable

from DDA_Models import QuitType
from difficulty_config import DEFAULT_DIFFICULTY, HOURS_IN_DAY


@runtime_checkable
class DifficultyDataProvider(Protocol):
    # The only value the host must persist between sessions.
    def get_current_difficulty(self) -> float: ...

    def set_current_difficulty(self, value: float) -> None: ...


@runtime_checkable
class WinStreakProvider(Protocol):
    def get_win_streak(self) -> int: ...

    def get_loss_streak(self) -> int: ...

    def get_total_wins(self) -> int: ...

    def get_total_losses(self) -> int: ...


@runtime_checkable
class TimeDecayProvider(Protocol):
    def get_last_play_time(self) -> datetime | None: ...

    def get_time_since_last_play(self) -> timedelta | None: ...

    def get_days_away_from_game(self) -> int: ...


@runtime_checkable
class RageQuitProvider(Protocol):
    def get_last_quit_type(self) -> QuitType | None: ...

    def get_current_session_duration(self) -> float: ...

    def get_average_session_duration(self) -> float: ...

    def get_recent_rage_quit_count(self) -> int: ...


@runtime_checkable
class LevelProgressProvider(Protocol):
    def get_current_level(self) -> int: ...

    def get_attempts_on_current_level(self) -> int: ...

    def get_average_completion_time(self) -> float: ...

    # Actual/expected completion time of the current level (1.0 = on time)
    def get_current_level_time_percentage(self) -> float: ...

    def get_completion_rate(self) -> float: ...

    def get_current_level_difficulty(self) -> float: ...


@runtime_checkable
class SessionPatternProvider(Protocol):
    def get_recent_session_durations(self, count: int) -> list[float]: ...

    def get_total_recent_quits(self) -> int: ...

    def get_recent_mid_level_quits(self) -> int: ...

    def get_previous_difficulty(self) -> float: ...

    def get_session_duration_before_last_adjustment(self) -> float: ...


PROVIDER_KEYS = (
    "difficulty",
    "win_streak",
    "time_decay",
    "rage_quit",
    "level_progress",
    "session_pattern",
)


@dataclass
class PlayerSnapshot:
    """One player's behaviour data, frozen at the start of a calculation."""

    current_difficulty: float = DEFAULT_DIFFICULTY

    # Streaks and lifetime totals
    win_streak: int = 0
    loss_streak: int = 0
    total_wins: int = 0
    total_losses: int = 0

    # Time away
    last_play_time: datetime | None = None
    time_since_last_play: timedelta | None = None
    days_away: int | None = None

    # Quit behaviour (seconds)
    last_quit_type: QuitType | None = None
    current_session_duration: float = 0.0
    average_session_duration: float = 0.0
    recent_rage_quit_count: int = 0

    # Level progress
    current_level: int = 1
    attempts_on_current_level: int = 0
    average_completion_time: float = 0.0
    current_level_time_percentage: float = 1.0
    completion_rate: float = 0.5
    current_level_difficulty: float = DEFAULT_DIFFICULTY

    # Optional session history; None means the host tracks no history
    recent_session_durations: list[float] | None = None
    total_recent_quits: int = 0
    recent_mid_level_quits: int = 0
    previous_difficulty: float = 0.0
    session_duration_before_last_adjustment: float = 0.0

    # Capability switches for hosts that only implement some providers
    disabled_providers: frozenset = field(default_factory=frozenset)

    def get_current_difficulty(self) -> float:
        return self.current_difficulty

    def set_current_difficulty(self, value: float) -> None:
        self.current_difficulty = value

    def get_win_streak(self) -> int:
        return self.win_streak

    def get_loss_streak(self) -> int:
        return self.loss_streak

    def get_total_wins(self) -> int:
        return self.total_wins

    def get_total_losses(self) -> int:
        return self.total_losses

    def get_last_play_time(self) -> datetime | None:
        return self.last_play_time

    def get_time_since_last_play(self) -> timedelta | None:
        return self.time_since_last_play

    def get_days_away_from_game(self) -> int:
        if self.days_away is not None:
            return self.days_away
        if self.time_since_last_play is None:
            return 0
        return int(self.time_since_last_play.total_seconds() // (HOURS_IN_DAY * 3600))

    def get_last_quit_type(self) -> QuitType | None:
        return self.last_quit_type

    def get_current_session_duration(self) -> float:
        return self.current_session_duration

    def get_average_session_duration(self) -> float:
        return self.average_session_duration

    def get_recent_rage_quit_count(self) -> int:
        return self.recent_rage_quit_count

    def get_current_level(self) -> int:
        return self.current_level

    def get_attempts_on_current_level(self) -> int:
        return self.attempts_on_current_level

    def get_average_completion_time(self) -> float:
        return self.average_completion_time

    def get_current_level_time_percentage(self) -> float:
        return self.current_level_time_percentage

    def get_completion_rate(self) -> float:
        return self.completion_rate

    def get_current_level_difficulty(self) -> float:
        return self.current_level_difficulty

    def get_recent_session_durations(self, count: int) -> list[float]:
        durations = self.recent_session_durations or []
        if count <= 0:
            return []
        return list(durations[-count:])

    def get_total_recent_quits(self) -> int:
        return self.total_recent_quits

    def get_recent_mid_level_quits(self) -> int:
        return self.recent_mid_level_quits

    def get_previous_difficulty(self) -> float:
        return self.previous_difficulty

    def get_session_duration_before_last_adjustment(self) -> float:
        return self.session_duration_before_last_adjustment

    def providers(self) -> dict:
        """Map every provider key to self, or None where the capability is absent."""
        available = {key: self for key in PROVIDER_KEYS}
        if self.recent_session_durations is None:
            available["session_pattern"] = None
        for key in self.disabled_providers:
            available[key] = None
        return available

    @classmethod
    def from_dict(cls, data: dict, now: datetime | None = None) -> "PlayerSnapshot":
        """
        Build a snapshot from a JSON-style payload.

        Time away may be given as ``last_play_time`` (ISO-8601 string),
        ``hours_since_last_play`` or ``time_since_last_play_seconds``.
        """
        if not isinstance(data, dict):
            raise TypeError("player data must be a dictionary")

        last_play_time = data.get("last_play_time")
        if isinstance(last_play_time, str):
            if last_play_time.endswith(("Z", "z")):
                last_play_time = last_play_time[:-1] + "+00:00"
            last_play_time = datetime.fromisoformat(last_play_time)

        time_since = None
        if data.get("hours_since_last_play") is not None:
            time_since = timedelta(hours=float(data["hours_since_last_play"]))
        elif data.get("time_since_last_play_seconds") is not None:
            time_since = timedelta(seconds=float(data["time_since_last_play_seconds"]))
        elif last_play_time is not None:
            reference = now or datetime.now(last_play_time.tzinfo)
            time_since = reference - last_play_time
        if last_play_time is None and time_since is not None:
            last_play_time = (now or datetime.now()) - time_since

        days_away = data.get("days_away")
        history = data.get("recent_session_durations")

        return cls(
            current_difficulty=float(data.get("current_difficulty", DEFAULT_DIFFICULTY)),
            win_streak=int(data.get("win_streak", 0)),
            loss_streak=int(data.get("loss_streak", 0)),
            total_wins=int(data.get("total_wins", 0)),
            total_losses=int(data.get("total_losses", 0)),
            last_play_time=last_play_time,
            time_since_last_play=time_since,
            days_away=int(days_away) if days_away is not None else None,
            last_quit_type=QuitType.parse(data.get("last_quit_type")),
            current_session_duration=float(data.get("current_session_duration", 0.0)),
            average_session_duration=float(data.get("average_session_duration", 0.0)),
            recent_rage_quit_count=int(data.get("recent_rage_quit_count", 0)),
            current_level=int(data.get("current_level", 1)),
            attempts_on_current_level=int(data.get("attempts_on_current_level", 0)),
            average_completion_time=float(data.get("average_completion_time", 0.0)),
            current_level_time_percentage=float(data.get("current_level_time_percentage", 1.0)),
            completion_rate=float(data.get("completion_rate", 0.5)),
            current_level_difficulty=float(data.get("current_level_difficulty", DEFAULT_DIFFICULTY)),
            recent_session_durations=[float(d) for d in history] if history is not None else None,
            total_recent_quits=int(data.get("total_recent_quits", 0)),
            recent_mid_level_quits=int(data.get("recent_mid_level_quits", 0)),
            previous_difficulty=float(data.get("previous_difficulty", 0.0)),
            session_duration_before_last_adjustment=float(
                data.get("session_duration_before_last_adjustment", 0.0)
            ),
            disabled_providers=frozenset(data.get("disabled_providers", ())),
        )
