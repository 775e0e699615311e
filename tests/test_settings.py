import json

import pytest

from config.settings import Settings, get_settings, reset_settings
from config.model_paths import ModelPaths, get_model_path, get_model_paths, reset_model_paths
from core.models import (
    DetectedShotEvent, FrameSource, ShotCounters, ShotDiagnostics
)
from pipeline.video_processor import VideoProcessor
from video_io.serialization import NumpyJsonEncoder, load_json, save_json


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


def test_env_overrides_are_typed(monkeypatch):
    monkeypatch.setenv("SHOTTRACK_BALL_MAX_SPEED", "1200")
    monkeypatch.setenv("SHOTTRACK_WINDOW_MAX_FRAMES", "30")
    monkeypatch.setenv("SHOTTRACK_SYNCHRONIZE_TO_TIMELINE", "no")
    monkeypatch.setenv("SHOTTRACK_DEVICE", "cpu")

    settings = Settings.from_env()

    assert settings.ball_max_speed == 1200.0
    assert settings.window_max_frames == 30
    assert settings.synchronize_to_timeline is False
    assert settings.device == "cpu"
    assert settings.ball_tuning().max_speed == 1200.0
    assert settings.tracker_options()['window_max_frames'] == 30


def test_defaults_build_component_tuning():
    settings = Settings()

    ball = settings.ball_tuning()
    hoop = settings.hoop_tuning()
    assert ball.occlusion_tolerance == 0.8
    assert hoop.occlusion_tolerance == 3.0
    assert settings.acceptance_rules().ball_near_hoop_min_confidence == 0.15
    assert settings.shot_tuning().cooldown == 0.8
    assert settings.pose_options()['min_keypoint_confidence'] == 0.2


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    settings = Settings(hoop_min_confidence=0.6, target_fps=30.0)

    settings.save(str(path))

    assert Settings.from_file(str(path)) == settings


def test_get_settings_reads_config_file(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"throttle_fps": 10.0}))
    monkeypatch.setenv("SHOTTRACK_CONFIG", str(path))

    settings = get_settings()

    assert settings.throttle_fps == 10.0
    assert get_settings() is settings


def test_model_paths_listing(tmp_path):
    paths = ModelPaths(base_dir=str(tmp_path))
    (tmp_path / "yolo").mkdir()
    (tmp_path / "yolo" / "ball_hoop.pt").write_bytes(b"")
    paths.register_model('yolo', 'custom', 'yolo/custom.pt')

    models = paths.list_models()['yolo']

    assert models['default']['exists']
    assert not models['custom']['exists']
    assert paths.get_model_path('yolo', 'missing') == str(tmp_path / "yolo" / "ball_hoop.pt")
    with pytest.raises(ValueError):
        paths.get_model_path('sam')


def test_events_serialize_to_json(tmp_path):
    event = DetectedShotEvent(
        timestamp=2.5,
        is_make=True,
        confidence=0.85,
        source=FrameSource.UPLOADED_VIDEO,
        diagnostics=ShotDiagnostics(
            reason="crossing_settled",
            pose_release_confidence=0.4,
            saw_ball_above_rim=True,
            crossing_offset_pixels=-3.0,
            centered_at_rim=True,
            stayed_near_center_below=True
        )
    )
    counters = ShotCounters().record(event)
    assert (counters.shots, counters.makes) == (1, 1)

    path = tmp_path / "events.json"
    save_json({'events': [event], 'source': FrameSource.LIVE_CAMERA}, str(path))
    data = load_json(str(path))

    assert data['source'] == "live_camera"
    assert data['events'][0]['is_make'] is True
    assert data['events'][0]['diagnostics']['crossing_offset_pixels'] == -3.0
    assert json.loads(json.dumps(event, cls=NumpyJsonEncoder))["id"] == event.id


def test_model_dir_setting_drives_model_paths(tmp_path, monkeypatch):
    monkeypatch.setenv("SHOTTRACK_MODEL_DIR", str(tmp_path))
    reset_model_paths()
    try:
        assert get_model_paths().base_dir == tmp_path
        assert get_model_path('yolo') == str(tmp_path / "yolo" / "ball_hoop.pt")
    finally:
        reset_model_paths()


def test_processor_uses_configured_slice_radius(detector, pose_model):
    processor = VideoProcessor(settings=Settings(slice_radius=0.5),
                               detector=detector, pose_model=pose_model)
    try:
        assert processor.engine.slice_radius == 0.5
    finally:
        processor.close()
    assert pose_model.closed
