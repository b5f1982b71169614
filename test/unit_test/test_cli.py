from __future__ import annotations

import contextlib
import io
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import pytest

from skill_playground import cli
from skill_playground.capabilities.native import native_function
from skill_playground.capabilities.registry import CapabilityRegistry
from skill_playground.core.config import Settings
from skill_playground.factory import build_orchestrator


class _Tools:
    @native_function("Fetch a URL")
    def fetch(self, url: str) -> str:
        return "hello world"

    @native_function("Summarize text")
    def summarize(self, input: str) -> str:
        return "hi"

    @native_function("Fail")
    def explode(self, input: str = "") -> str:
        raise RuntimeError("nope")


@dataclass
class _ScriptedBackend:
    reply: str
    prompts: List[str] = field(default_factory=list)

    async def complete(self, prompt: str, *, settings=None) -> str:
        self.prompts.append(prompt)
        return self.reply


@pytest.fixture()
def goal_file(tmp_path: Path) -> Path:
    path = tmp_path / "ask.txt"
    path.write_text("Summarize https://example.com", encoding="utf-8")
    return path


def _patch_orchestrator(monkeypatch: pytest.MonkeyPatch, reply: str) -> None:
    reg = CapabilityRegistry()
    reg.import_plugin(_Tools(), "Tools")

    def _build(settings, *, strategy=None, **kwargs):
        return build_orchestrator(settings, registry=reg, backend=_ScriptedBackend(reply), strategy=strategy)

    monkeypatch.setattr(cli, "build_orchestrator", _build)


def _settings() -> Settings:
    return Settings(service_type="test")


def test_main_prints_plan_and_result(
    monkeypatch: pytest.MonkeyPatch, goal_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    reply = json.dumps(
        {
            "steps": [
                {"capability": "Tools.fetch", "args": {"url": "https://example.com"}, "output_key": "page"},
                {"capability": "Tools.summarize", "args": {"input": "$page"}},
            ]
        }
    )
    _patch_orchestrator(monkeypatch, reply)

    code = cli.main(["--input", str(goal_file)], settings=_settings())

    out = capsys.readouterr().out
    assert code == 0
    assert "PLAN:\nGoal: Summarize https://example.com" in out
    assert '  1. Tools.fetch(url="https://example.com") -> $page' in out
    assert out.rstrip().endswith("RESULT: hi")


def test_main_reports_validation_failure(
    monkeypatch: pytest.MonkeyPatch, goal_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _patch_orchestrator(monkeypatch, json.dumps({"steps": [{"capability": "Tools.nope"}]}))

    code = cli.main(["-i", str(goal_file)], settings=_settings())

    out = capsys.readouterr().out
    assert code == 1
    assert "[validation] step 1: unknown capability 'Tools.nope'" in out
    assert "RESULT" not in out


def test_main_reports_execution_failure(
    monkeypatch: pytest.MonkeyPatch, goal_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    reply = json.dumps(
        {"steps": [{"capability": "Tools.fetch", "args": {"url": "u"}}, {"capability": "Tools.explode"}]}
    )
    _patch_orchestrator(monkeypatch, reply)

    code = cli.main(["-i", str(goal_file), "-p", "sequential"], settings=_settings())

    out = capsys.readouterr().out
    assert code == 1
    assert "RESULT: failed" in out
    assert "[execution] Capability 'Tools.explode' failed at step 2: RuntimeError: nope" in out
    assert "step 1 output: hello world" in out


def test_main_direct_function(
    monkeypatch: pytest.MonkeyPatch, goal_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _patch_orchestrator(monkeypatch, "unused")

    code = cli.main(["-i", str(goal_file), "-p", "direct", "-f", "summarize"], settings=_settings())

    out = capsys.readouterr().out
    assert code == 0
    assert "PLAN" not in out
    assert "RESULT: hi" in out


def test_main_direct_unknown_function(
    monkeypatch: pytest.MonkeyPatch, goal_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _patch_orchestrator(monkeypatch, "unused")
    code = cli.main(["-i", str(goal_file), "-p", "direct", "-f", "Nope.fn"], settings=_settings())
    assert code == 1
    assert "[lookup] Capability not found: 'Nope.fn'" in capsys.readouterr().out


def test_main_direct_requires_function(goal_file: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["-i", str(goal_file), "-p", "direct"], settings=_settings())
    assert exc.value.code == 2


def test_main_missing_input_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["-i", str(tmp_path / "missing.txt")], settings=_settings())
    assert exc.value.code == 2


def test_main_startup_error_is_reported(goal_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    settings = Settings(service_type="carrier-pigeon", enable_http_plugin=False)
    code = cli.main(["-i", str(goal_file)], settings=settings)
    assert code == 1
    assert "[startup] unsupported completion service type" in capsys.readouterr().out


def test_main_missing_api_key_is_startup_error(
    monkeypatch: pytest.MonkeyPatch, goal_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    code = cli.main(["-i", str(goal_file)], settings=Settings(service_type="openai"))

    out = capsys.readouterr().out
    assert code == 1
    assert "[startup] cannot create OpenAI client" in out


def test_main_writes_to_stdout_replaced_after_import(monkeypatch: pytest.MonkeyPatch, goal_file: Path) -> None:
    reply = json.dumps({"steps": [{"capability": "Tools.summarize", "args": {"input": "$goal"}}]})
    _patch_orchestrator(monkeypatch, reply)

    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        code = cli.main(["-i", str(goal_file)], settings=_settings())

    assert code == 0
    assert "PLAN:\nGoal: Summarize https://example.com" in buf.getvalue()
    assert "RESULT: hi" in buf.getvalue()


def test_main_writes_to_given_stream(monkeypatch: pytest.MonkeyPatch, goal_file: Path) -> None:
    _patch_orchestrator(monkeypatch, "unused")

    buf = io.StringIO()
    code = cli.main(["-i", str(goal_file), "-p", "direct", "-f", "summarize"], settings=_settings(), out=buf)

    assert code == 0
    assert buf.getvalue().strip() == "RESULT: hi"
