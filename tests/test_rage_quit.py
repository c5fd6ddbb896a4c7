import pytest

from DDA_Models import QuitType
from DDA_Providers import PlayerSnapshot
from Modifier_Bases.RageQuit import RageQuitModifier
from Modifier_Configs import RageQuitConfig


def make_rage(quit_type, duration=0.0):
	player = PlayerSnapshot(last_quit_type=quit_type, current_session_duration=duration)
	return RageQuitModifier(RageQuitConfig(), player)


def test_rage_quit_largest_penalty():
	res = make_rage(QuitType.RAGE_QUIT, duration=42).calculate()
	assert res.value == -1.0
	assert res.reason == "Rage quit detected (played only 42s)"
	assert res.metadata["rage_quit_detected"]


def test_normal_quit_medium_penalty():
	res = make_rage(QuitType.NORMAL).calculate()
	assert res.value == -0.5


def test_mid_play_quit_small_penalty():
	res = make_rage(QuitType.MID_PLAY).calculate()
	assert res.value == -0.3


def test_no_quit_no_penalty():
	res = make_rage(None).calculate()
	assert res.value == 0.0
	assert res.reason == "No quit recorded"


def test_penalties_ordered():
	rage = make_rage(QuitType.RAGE_QUIT).calculate().value
	normal = make_rage(QuitType.NORMAL).calculate().value
	mid = make_rage(QuitType.MID_PLAY).calculate().value
	assert rage < normal < mid < 0


@pytest.mark.parametrize("raw,expected", [
	("RageQuit", QuitType.RAGE_QUIT),
	("rage_quit", QuitType.RAGE_QUIT),
	("MID_PLAY", QuitType.MID_PLAY),
	("normal", QuitType.NORMAL),
	("none", None),
	("", None),
	(None, None),
])
def test_quit_type_parse(raw, expected):
	assert QuitType.parse(raw) is expected


def test_quit_type_parse_unknown():
	with pytest.raises(ValueError):
		QuitType.parse("alt_f4")


def test_string_quit_type_from_provider():
	res = make_rage("RageQuit").calculate()
	assert res.value == -1.0


def test_unknown_quit_type_counts_as_no_quit():
	res = make_rage("alt_f4").calculate()
	assert res.value == 0.0
	assert res.error is None
	assert res.reason == "No quit recorded"
	assert res.metadata["last_quit_type"] is None


@pytest.mark.parametrize("raw,expected", [
	("Timeout", None),
	("MidPlay", QuitType.MID_PLAY),
	(None, None),
])
def test_quit_type_parse_or_none(raw, expected):
	assert QuitType.parse_or_none(raw) is expected
