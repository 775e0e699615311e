import logging

import pytest
from click.testing import CliRunner

from apps.cli.cli import cli
from config.model_paths import reset_model_paths
from config.settings import reset_settings
from core.models import (
    AnalysisResult, AnalysisSummary, DetectedShotEvent, FrameSource, ShotDiagnostics
)
from video_io.serialization import save_json


@pytest.fixture
def saved_result(tmp_path):
    events = [
        DetectedShotEvent(
            timestamp=3.2, is_make=True, confidence=0.9, source=FrameSource.UPLOADED_VIDEO,
            diagnostics=ShotDiagnostics("crossing_settled", 0.5, True, 1.0, True, True)
        ),
        DetectedShotEvent(
            timestamp=9.75, is_make=False, confidence=0.4, source=FrameSource.UPLOADED_VIDEO,
            diagnostics=ShotDiagnostics("escaped_sideways", 0.1, True)
        ),
    ]
    result = AnalysisResult(
        video_path="clip.mp4",
        summary=AnalysisSummary(duration_seconds=12.0, total_frames_read=360,
                                sampled_frames_processed=180),
        events=events
    )
    path = tmp_path / "shots.json"
    save_json(result.to_dict(), str(path))
    return str(path)


def test_show_summary(saved_result):
    outcome = CliRunner().invoke(cli, ['show', saved_result])

    assert outcome.exit_code == 0, outcome.output
    assert "Frames: 180/360" in outcome.output
    assert "Shots: 2" in outcome.output
    assert "Makes: 1" in outcome.output


def test_show_events(saved_result):
    outcome = CliRunner().invoke(cli, ['show', saved_result, '--format', 'events'])

    assert outcome.exit_code == 0, outcome.output
    assert "#1 t=3.20s Make (90%, crossing_settled)" in outcome.output
    assert "#2 t=9.75s Miss (40%, escaped_sideways)" in outcome.output


def test_list_models(tmp_path, monkeypatch):
    monkeypatch.setenv("SHOTTRACK_MODEL_DIR", str(tmp_path))
    reset_settings()
    reset_model_paths()
    try:
        outcome = CliRunner().invoke(cli, ['list-models'])
    finally:
        reset_settings()
        reset_model_paths()

    assert outcome.exit_code == 0, outcome.output
    assert "yolo:" in outcome.output
    assert str(tmp_path) in outcome.output


def test_log_level_defaults_to_settings(saved_result, monkeypatch):
    monkeypatch.setenv("SHOTTRACK_LOG_LEVEL", "WARNING")
    root = logging.getLogger()
    previous = root.level
    reset_settings()
    try:
        outcome = CliRunner().invoke(cli, ['show', saved_result])
        configured = root.level
        outcome_debug = CliRunner().invoke(cli, ['--log-level', 'DEBUG', 'show', saved_result])
        overridden = root.level
    finally:
        reset_settings()
        root.setLevel(previous)

    assert outcome.exit_code == 0 and outcome_debug.exit_code == 0
    assert configured == logging.WARNING
    assert overridden == logging.DEBUG


def test_analyze_rejects_missing_video(tmp_path):
    outcome = CliRunner().invoke(cli, ['analyze', str(tmp_path / "missing.mp4")])
    assert outcome.exit_code != 0
