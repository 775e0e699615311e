import pytest

from core.models import TrackState
from tracking.association import BALL_TRACKING
from tracking.history import clean_history, glitch_bound, trim_history
from tests.conftest import point

DT = 1.0 / 15.0


def test_glitch_bound_scales_with_size_and_gap():
    previous = point(0.0, 0.0, 0.0, w=20.0, h=20.0)
    assert glitch_bound(previous, point(0.0, 0.0, DT), BALL_TRACKING) == pytest.approx(100.0)
    assert glitch_bound(previous, point(0.0, 0.0, 3 * DT), BALL_TRACKING) == pytest.approx(300.0)

    tiny = point(0.0, 0.0, 0.0, w=2.0, h=2.0)
    assert glitch_bound(tiny, point(0.0, 0.0, DT), BALL_TRACKING) == pytest.approx(30.0)


def test_implausible_jump_rolls_back_track():
    previous = point(500.0, 500.0, 0.0)
    jumped = point(700.0, 500.0, DT)
    track = TrackState(latest=jumped, velocity=(1000.0, 0.0))

    history, track = clean_history((previous, jumped), track, BALL_TRACKING)

    assert history == (previous,)
    assert track.latest == previous
    assert track.velocity == (0.0, 0.0)


def test_plausible_jump_kept():
    previous = point(500.0, 500.0, 0.0)
    moved = point(580.0, 500.0, DT)
    track = TrackState(latest=moved)

    history, new_track = clean_history((previous, moved), track, BALL_TRACKING)

    assert history == (previous, moved)
    assert new_track is track


def test_predicted_points_never_removed():
    previous = point(500.0, 500.0, 0.0)
    predicted = point(900.0, 500.0, DT, predicted=True)

    history, _ = clean_history((previous, predicted), None, BALL_TRACKING)

    assert history == (previous, predicted)


def test_trim_drops_old_points():
    history = tuple(point(0.0, 0.0, float(t)) for t in range(10))

    trimmed = trim_history(history, now=9.0, max_age=6.0)

    assert [p.timestamp for p in trimmed] == [3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0]
    assert trim_history(history, now=100.0, max_age=6.0) == ()
