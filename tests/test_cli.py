"""Tests for the command line interface."""

from typer.testing import CliRunner

from videofactory import __version__
from videofactory.cli import app

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cues_lists_timeline(tmp_path, vtt):
    captions = tmp_path / "captions.vtt"
    captions.write_text(vtt, encoding="utf-8")

    result = runner.invoke(app, ["cues", str(captions)])

    assert result.exit_code == 0
    assert "2 cues" in result.output
    assert "00:00 → 00:02" in result.output


def test_cues_with_clips(tmp_path, vtt):
    captions = tmp_path / "captions.vtt"
    captions.write_text(vtt, encoding="utf-8")

    result = runner.invoke(app, ["cues", str(captions), "--video", "a.mp4"])

    assert result.exit_code == 0
    assert "a.mp4" in result.output
    assert "1 cue(s) past the last clip" in result.output


def test_cues_empty_file_fails(tmp_path):
    captions = tmp_path / "captions.vtt"
    captions.write_text("WEBVTT\n", encoding="utf-8")
    assert runner.invoke(app, ["cues", str(captions)]).exit_code == 1


def test_generate_requires_keys(monkeypatch):
    from videofactory.config import config

    monkeypatch.setattr(config, "gemini_api_key", "")
    result = runner.invoke(app, ["generate", "a comet"])
    assert result.exit_code == 1
    assert "GEMINI_API_KEY" in result.output


def test_batch_rejects_bad_manifest(tmp_path):
    manifest = tmp_path / "batch.yaml"
    manifest.write_text("requests:\n  - duration: 10\n")
    result = runner.invoke(app, ["batch", str(manifest)])
    assert result.exit_code == 1
    assert "Error loading manifest" in result.output


def test_config_shows_services():
    result = runner.invoke(app, ["config"])
    assert result.exit_code == 0
    assert "PEXELS_API_KEY" in result.output
