import pytest

from analytics.events.shot_phase import (
    REASON_ATTEMPT_TIMEOUT, REASON_CROSSING_SETTLED, REASON_CROSSING_TIMEOUT,
    REASON_DESCENDED_PAST_HOOP, REASON_ESCAPED_SIDEWAYS, ShotStateMachine,
    ball_velocity_y, downward_rim_crossing_x, shot_confidence
)
from core.models import FrameSource
from tests.conftest import point

DT = 1.0 / 15.0

# Hoop centered at (500, 500), 100 x 40: rim at y=480, above-rim below y=472
HOOP = (point(500.0, 500.0, 0.0, w=100.0, h=40.0),)

MAKE_PATH = [(500, 560), (500, 520), (500, 460), (500, 420), (500, 400),
             (500, 440), (500, 470), (500, 520), (500, 560)]
OFF_CENTER_PATH = [(500, 560), (500, 520), (500, 460), (500, 420), (550, 400),
                   (620, 440), (700, 470), (700, 520), (700, 560)]


def run(machine, path, pose=0.0, start=0.0):
    """Feed a ball path one frame at a time, return (time, event) for each event"""
    history = ()
    events = []
    for i, (x, y) in enumerate(path):
        t = start + i * DT
        history = history + (point(float(x), float(y), t, index=i),)
        event = machine.update(history, HOOP, pose, FrameSource.UPLOADED_VIDEO, t)
        if event is not None:
            events.append((t, event))
    return events


def test_make_through_the_rim():
    machine = ShotStateMachine()
    events = run(machine, MAKE_PATH)

    assert len(events) == 1
    t, event = events[0]
    assert t == pytest.approx(8 * DT)
    assert event.is_make
    assert event.source == FrameSource.UPLOADED_VIDEO
    assert event.diagnostics.reason == REASON_CROSSING_SETTLED
    assert event.diagnostics.crossing_offset_pixels == pytest.approx(0.0)
    assert event.confidence == pytest.approx(0.85)
    assert machine.phase.is_cooldown


def test_off_center_crossing_is_a_miss():
    events = run(ShotStateMachine(), OFF_CENTER_PATH)

    assert len(events) == 1
    event = events[0][1]
    assert not event.is_make
    assert event.diagnostics.centered_at_rim is False
    assert event.diagnostics.crossing_offset_pixels == pytest.approx(200.0)
    assert event.confidence == pytest.approx(0.28)


def test_pose_confidence_raises_event_confidence():
    events = run(ShotStateMachine(), MAKE_PATH, pose=0.8)
    event = events[0][1]
    assert event.diagnostics.pose_release_confidence == pytest.approx(0.8)
    assert event.confidence == pytest.approx(0.99)


def test_slow_upward_motion_needs_pose():
    path = [(500, 520), (500, 518)]  # -30 px/s

    machine = ShotStateMachine()
    run(machine, path, pose=0.0)
    assert machine.phase.is_idle

    machine = ShotStateMachine()
    run(machine, path, pose=0.5)
    assert machine.phase.is_tracking


def test_no_arming_far_from_hoop_or_moving_down():
    machine = ShotStateMachine()
    run(machine, [(900, 560), (900, 500), (900, 440)])
    assert machine.phase.is_idle

    machine = ShotStateMachine()
    assert run(machine, [(500, 400), (500, 450), (500, 500), (500, 560)], pose=1.0) == []
    assert machine.phase.is_idle


def test_lost_tracks_abandon_attempt():
    machine = ShotStateMachine()
    run(machine, [(500, 580), (500, 550)])
    assert machine.phase.is_tracking

    assert machine.update((), HOOP, 0.0, FrameSource.LIVE_CAMERA, 4.0) is None
    assert machine.phase.is_tracking

    assert machine.update((), HOOP, 0.0, FrameSource.LIVE_CAMERA, 4.1) is None
    assert machine.phase.is_idle
    assert not machine.saw_ball_above_rim


def test_predicted_fall_past_hoop_is_a_miss():
    machine = ShotStateMachine()
    history = ()
    path = [(500, 560, False), (500, 520, False), (500, 460, False),
            (500, 470, True), (500, 530, True)]
    events = []
    for i, (x, y, predicted) in enumerate(path):
        history = history + (point(x, y, i * DT, predicted=predicted),)
        event = machine.update(history, HOOP, 0.0, FrameSource.LIVE_CAMERA, i * DT)
        if event:
            events.append(event)

    assert len(events) == 1
    assert not events[0].is_make
    assert events[0].diagnostics.reason == REASON_DESCENDED_PAST_HOOP
    assert events[0].diagnostics.crossing_offset_pixels is None


def test_cooldown_suppresses_then_returns_to_idle():
    machine = ShotStateMachine()
    events = run(machine, MAKE_PATH)
    finalized_at = events[0][0]

    assert machine.update((), HOOP, 0.0, FrameSource.LIVE_CAMERA, finalized_at + 0.5) is None
    assert machine.phase.is_cooldown
    machine.update((), HOOP, 0.0, FrameSource.LIVE_CAMERA, finalized_at + 0.8)
    assert machine.phase.is_idle


def test_reset_returns_to_idle():
    machine = ShotStateMachine()
    run(machine, MAKE_PATH[:4])
    assert machine.phase.is_tracking

    machine.reset()
    machine.reset()

    assert machine.phase.is_idle
    assert machine.crossing_x is None
    assert machine.max_pose_confidence == 0.0


def test_crossing_interpolation():
    history = (point(400.0, 470.0, 0.0), point(460.0, 520.0, DT))
    assert downward_rim_crossing_x(history, 480.0) == pytest.approx(412.0)


def test_crossing_requires_downward_pass():
    upward = (point(400.0, 520.0, 0.0), point(460.0, 470.0, DT))
    assert downward_rim_crossing_x(upward, 480.0) is None

    both_predicted = (point(400.0, 470.0, 0.0, predicted=True),
                      point(460.0, 520.0, DT, predicted=True))
    assert downward_rim_crossing_x(both_predicted, 480.0) is None

    landing_on_rim = (point(400.0, 470.0, 0.0), point(460.0, 480.0, DT))
    assert downward_rim_crossing_x(landing_on_rim, 480.0) == pytest.approx(460.0)


def test_velocity_uses_time_floor():
    history = (point(0.0, 100.0, 1.0), point(0.0, 99.0, 1.0))
    assert ball_velocity_y(history) == pytest.approx(-60.0)
    assert ball_velocity_y(history[:1]) is None


def test_shot_confidence_bounds():
    assert shot_confidence(True, 0.0, 100.0, 0.0) == pytest.approx(0.85)
    assert shot_confidence(False, None, 100.0, 1.0) == pytest.approx(0.28 + 0.105 + 0.25)
    assert shot_confidence(True, 0.0, 100.0, 1.0) == pytest.approx(0.99)
    assert shot_confidence(False, 500.0, 100.0, 0.0) == pytest.approx(0.28)


# Armed at frame 1 (-600 px/s), above the rim at frame 2
RISE_ABOVE_RIM = [(500, 560), (500, 520), (500, 460)]


def test_hanging_above_rim_times_out_as_miss():
    machine = ShotStateMachine()
    events = run(machine, RISE_ABOVE_RIM + [(500, 460)] * 60)

    assert len(events) == 1
    t, event = events[0]
    armed_at = DT
    assert 3.6 < t - armed_at <= 3.6 + DT + 1e-9
    assert not event.is_make
    assert event.diagnostics.reason == REASON_ATTEMPT_TIMEOUT
    assert event.diagnostics.saw_ball_above_rim
    assert event.diagnostics.crossing_offset_pixels is None
    assert event.confidence == pytest.approx(0.28 + 0.30 * 0.35)
    assert machine.phase.is_cooldown


def test_ball_escaping_sideways_is_a_miss():
    machine = ShotStateMachine()
    # 460 px from the hoop center, drifting down at 30 px/s
    events = run(machine, RISE_ABOVE_RIM + [(960, 462)])

    assert len(events) == 1
    t, event = events[0]
    assert t == pytest.approx(3 * DT)
    assert not event.is_make
    assert event.diagnostics.reason == REASON_ESCAPED_SIDEWAYS
    assert event.diagnostics.centered_at_rim is None


def test_crossing_without_settling_finalizes_on_timeout():
    machine = ShotStateMachine()
    # Crosses rim level at frame 3 then stays just under the rim
    events = run(machine, RISE_ABOVE_RIM + [(500, 490)] * 20)

    assert len(events) == 1
    t, event = events[0]
    assert t == pytest.approx(17 * DT)
    assert event.is_make
    assert event.diagnostics.reason == REASON_CROSSING_TIMEOUT
    assert event.diagnostics.crossing_offset_pixels == pytest.approx(0.0)
    assert event.confidence == pytest.approx(0.85)


def test_false_start_returns_to_idle_silently():
    machine = ShotStateMachine()
    path = [(500, 580), (500, 550)] + [(500, 550)] * 58

    assert run(machine, path[:50]) == []
    assert machine.phase.is_tracking

    machine = ShotStateMachine()
    assert run(machine, path) == []
    assert machine.phase.is_idle
    assert not machine.saw_ball_above_rim
