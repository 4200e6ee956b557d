"""Tests for the speech-gateway command-line interface."""
from __future__ import annotations

import json

import httpx
import pytest

from speech_gateway import cli
from speech_gateway.core.logging import LogLevel, configure_logging
from speech_gateway.synthesis.client import SynthesisClient
from speech_gateway.synthesis.transports import RestTransport

from conftest import TWO_SECONDS_OF_AUDIO


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    monkeypatch.setenv("SPEECH_GW_SPEECH_KEY", "cli-key-0000")
    path = tmp_path / "settings.yaml"
    path.write_text("speech:\n  region: westus\n", encoding="utf-8")
    return path


@pytest.fixture
def vendor(monkeypatch):
    """Route the CLI's SynthesisClient through an httpx.MockTransport."""
    state = {"status": 200, "calls": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        state["calls"] += 1
        if state["status"] != 200:
            return httpx.Response(state["status"], text="Forbidden")
        return httpx.Response(200, content=TWO_SECONDS_OF_AUDIO)

    def make_client(config):
        transport = RestTransport(config, transport=httpx.MockTransport(handler))
        return SynthesisClient(config, transport=transport)

    monkeypatch.setattr(cli, "SynthesisClient", make_client)
    return state


class TestSynthesizeCommand:
    """Tests for `speech-gateway synthesize`."""

    def test_writes_audio_and_json_summary(self, settings_file, vendor, tmp_path, capsys):
        out_path = tmp_path / "hello.mp3"
        code = cli.main([
            "--settings", str(settings_file),
            "synthesize", "Hello world", "--rate", "10",
            "--out", str(out_path), "--json",
        ])

        assert code == 0
        assert out_path.read_bytes() == TWO_SECONDS_OF_AUDIO
        summary = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert summary["ok"] is True
        assert summary["duration_seconds"] == 2.0
        assert summary["word_count"] == 2
        assert summary["wpm"] == 60.0

    def test_empty_text_exit_code_2(self, settings_file, vendor, tmp_path, capsys):
        code = cli.main(["--settings", str(settings_file), "synthesize", "  ", "--out", str(tmp_path / "x.mp3")])

        assert code == 2
        assert "Text cannot be empty" in capsys.readouterr().out
        assert vendor["calls"] == 0

    def test_vendor_failure_exit_code_1(self, settings_file, vendor, tmp_path):
        vendor["status"] = 403
        out_path = tmp_path / "x.mp3"
        code = cli.main(["--settings", str(settings_file), "synthesize", "Hello", "--out", str(out_path)])

        assert code == 1
        assert not out_path.exists()

    def test_missing_settings_file_exit_code_1(self, tmp_path):
        code = cli.main(["--settings", str(tmp_path / "absent.yaml"), "synthesize", "Hello"])
        assert code == 1

    def test_invalid_numeric_setting_exit_code_1(self, settings_file, vendor, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("SPEECH_GW_SPEECH_TIMEOUT_S", "thirty")
        code = cli.main(["--settings", str(settings_file), "synthesize", "Hello", "--json"])

        assert code == 1
        summary = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert summary["code"] == "CONFIGURATION_ERROR"
        assert "speech.timeout_s" in summary["message"]
        assert vendor["calls"] == 0

    def test_log_dir_from_explicit_settings_file(self, vendor, tmp_path, monkeypatch):
        """logging.log_dir comes from --settings, not SPEECH_GW_SETTINGS."""
        log_dir = tmp_path / "logs"
        path = tmp_path / "explicit.yaml"
        path.write_text(f"logging:\n  log_dir: {log_dir.as_posix()}\n", encoding="utf-8")
        monkeypatch.setenv("SPEECH_GW_SETTINGS", str(tmp_path / "other.yaml"))

        try:
            code = cli.main(["--settings", str(path), "synthesize", "Hello", "--out", str(tmp_path / "x.mp3")])
        finally:
            configure_logging(LogLevel.NORMAL, force=True)

        assert code == 0
        assert (log_dir / "speech-gateway.jsonl").exists()


class TestArgumentParsing:
    """Tests for argument parsing."""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.main([])

    def test_help_exits_zero(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--help"])
        assert exc_info.value.code == 0
        assert "speech-gateway" in capsys.readouterr().out

    def test_serve_runs_uvicorn(self, monkeypatch):
        calls = {}

        def fake_run(app, **kwargs):
            calls["app"] = app
            calls.update(kwargs)

        monkeypatch.setattr("uvicorn.run", fake_run)
        code = cli.main(["serve", "--port", "9001"])

        assert code == 0
        assert calls["app"] == "speech_gateway.main:app"
        assert calls["port"] == 9001
