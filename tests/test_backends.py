"""
Tests for credential strategies and backends.
"""

import subprocess
from pathlib import Path
from types import SimpleNamespace

import pytest

from design_to_code.backends import claude as claude_module
from design_to_code.backends import gemini as gemini_module
from design_to_code.backends.base import UnconfiguredBackend, message_text
from design_to_code.backends.claude import (
    ClaudeApiBackend,
    ClaudeCliBackend,
    prompt_file,
    resolve_code_backend,
)
from design_to_code.backends.gemini import (
    GeminiApiBackend,
    GeminiOAuthBackend,
    resolve_design_backend,
)
from design_to_code.config import AppConfig
from design_to_code.errors import AgentTimeoutError, AuthNotConfiguredError, RemoteCallError
from design_to_code.models import ImageAttachment


class FakeLLM:
    def __init__(self, content):
        self.content = content
        self.messages = None

    def invoke(self, messages):
        self.messages = messages
        return SimpleNamespace(content=self.content)


# Resolution

def test_resolve_design_backend_prefers_env_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    backend = resolve_design_backend(AppConfig(gemini_api_key="file-key"))
    assert isinstance(backend, GeminiApiBackend)
    assert backend.api_key == "env-key"


def test_resolve_design_backend_uses_config_key(no_credentials):
    backend = resolve_design_backend(AppConfig(gemini_api_key="file-key"))
    assert isinstance(backend, GeminiApiBackend)
    assert backend.api_key == "file-key"


def test_resolve_design_backend_oauth(no_credentials, monkeypatch):
    monkeypatch.setattr("shutil.which", lambda name: "/usr/bin/gcloud" if name == "gcloud" else None)
    assert isinstance(resolve_design_backend(AppConfig()), GeminiOAuthBackend)


def test_resolve_code_backend_cli(no_credentials, monkeypatch):
    monkeypatch.setattr("shutil.which", lambda name: "/usr/local/bin/claude" if name == "claude" else None)
    assert isinstance(resolve_code_backend(AppConfig()), ClaudeCliBackend)


def test_resolve_code_backend_api_key(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
    backend = resolve_code_backend(None)
    assert isinstance(backend, ClaudeApiBackend)
    assert backend.check_auth().method == "API Key"


def test_unconfigured_backends_fail_without_calling(no_credentials, monkeypatch):
    """Test missing credentials raise setup errors before any network call."""
    def forbidden(*args, **kwargs):
        raise AssertionError("no network or process call expected")

    monkeypatch.setattr(gemini_module.requests, "post", forbidden)
    monkeypatch.setattr(subprocess, "run", forbidden)

    design_backend = resolve_design_backend(AppConfig())
    code_backend = resolve_code_backend(AppConfig())
    assert isinstance(design_backend, UnconfiguredBackend)
    assert isinstance(code_backend, UnconfiguredBackend)

    with pytest.raises(AuthNotConfiguredError, match="GEMINI_API_KEY"):
        design_backend.invoke("prompt")
    with pytest.raises(AuthNotConfiguredError, match="ANTHROPIC_API_KEY"):
        code_backend.invoke("prompt")
    assert design_backend.check_auth().status == "not configured"


# API key backends

def test_gemini_api_backend_text_prompt():
    backend = GeminiApiBackend("key")
    backend._llm = FakeLLM("{}")

    assert backend.invoke("hello") == "{}"
    assert backend._llm.messages[0].content == "hello"


def test_gemini_api_backend_inline_image():
    backend = GeminiApiBackend("key")
    backend._llm = FakeLLM([{"type": "text", "text": "{\"a\": 1}"}])
    attachment = ImageAttachment(mime_type="image/png", data="QUJD")

    assert backend.invoke("describe", [attachment]) == '{"a": 1}'
    content = backend._llm.messages[0].content
    assert content[0] == {"type": "text", "text": "describe"}
    assert content[1]["image_url"] == "data:image/png;base64,QUJD"


def test_claude_api_backend():
    backend = ClaudeApiBackend("key", model_name="claude-test")
    backend._llm = FakeLLM("done")

    assert backend.invoke("write code") == "done"
    assert backend._llm.messages[0].content == [{"type": "text", "text": "write code"}]
    assert backend.model == "claude-test"


def test_message_text_flattens_parts():
    response = SimpleNamespace(content=["a", {"type": "text", "text": "b"}, {"type": "image"}])
    assert message_text(response) == "ab"


# Gemini OAuth

def _completed(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_gemini_oauth_invoke(monkeypatch):
    """Test the Vertex request carries the bearer token and inline image."""
    monkeypatch.delenv("GOOGLE_CLOUD_PROJECT", raising=False)
    commands = []

    def fake_run(cmd, **kwargs):
        commands.append(cmd)
        if cmd[1:3] == ["auth", "application-default"]:
            return _completed("ya29.token\n")
        return _completed("my-project\n")

    captured = {}

    def fake_post(url, headers=None, json=None):
        captured.update(url=url, headers=headers, json=json)
        return SimpleNamespace(
            ok=True,
            json=lambda: {"candidates": [{"content": {"parts": [{"text": "{\"name\": \"x\"}"}]}}]},
        )

    monkeypatch.setattr(subprocess, "run", fake_run)
    monkeypatch.setattr(gemini_module.requests, "post", fake_post)

    backend = GeminiOAuthBackend(model_name="gemini-2.0-flash")
    attachment = ImageAttachment(mime_type="image/jpeg", data="AAAA")
    text = backend.invoke("analyze", [attachment])

    assert text == '{"name": "x"}'
    assert "projects/my-project/locations/us-central1" in captured["url"]
    assert captured["url"].endswith("gemini-2.0-flash:generateContent")
    assert captured["headers"]["Authorization"] == "Bearer ya29.token"
    parts = captured["json"]["contents"][0]["parts"]
    assert parts[1] == {"inlineData": {"mimeType": "image/jpeg", "data": "AAAA"}}
    assert captured["json"]["generationConfig"]["maxOutputTokens"] == 8192


def test_gemini_oauth_http_error(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "proj")
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kwargs: _completed("token"))
    monkeypatch.setattr(
        gemini_module.requests, "post",
        lambda url, headers=None, json=None: SimpleNamespace(ok=False, text="quota exceeded"),
    )

    with pytest.raises(RemoteCallError, match="Gemini API error: quota exceeded"):
        GeminiOAuthBackend().invoke("x")


def test_gemini_oauth_not_logged_in(monkeypatch):
    def failing_run(cmd, **kwargs):
        raise subprocess.CalledProcessError(1, cmd)

    monkeypatch.setattr(subprocess, "run", failing_run)
    backend = GeminiOAuthBackend(project_id="proj")

    with pytest.raises(AuthNotConfiguredError, match="gcloud auth application-default login"):
        backend.invoke("x")
    assert backend.check_auth().status == "not authenticated"


# Claude CLI

def test_prompt_file_removed_on_error():
    """Test the temporary prompt file is removed when the body raises."""
    with pytest.raises(RuntimeError):
        with prompt_file("hello") as path:
            assert path.read_text(encoding="utf-8") == "hello"
            raise RuntimeError("boom")
    assert not path.exists()


def test_claude_cli_primary_strategy(monkeypatch):
    """Test the prompt is piped on stdin and the temp file is cleaned up."""
    seen = {}

    def fake_run(cmd, stdin=None, **kwargs):
        seen["cmd"] = cmd
        seen["stdin_path"] = Path(stdin.name)
        seen["stdin_text"] = stdin.read()
        seen["timeout"] = kwargs["timeout"]
        return _completed("generated output\n")

    monkeypatch.setattr(subprocess, "run", fake_run)

    backend = ClaudeCliBackend(timeout=42, model_name="default")
    assert backend.invoke("build me a page") == "generated output"
    assert seen["cmd"] == ["claude", "-p", "--output-format", "text"]
    assert seen["stdin_text"] == "build me a page"
    assert seen["timeout"] == 42
    assert not seen["stdin_path"].exists()


def test_claude_cli_falls_back_to_argument(monkeypatch):
    """Test a failed stdin run is retried with the prompt as an argument."""
    calls = []

    def fake_run(cmd, stdin=None, **kwargs):
        calls.append(cmd)
        if len(calls) == 1:
            return _completed(returncode=1, stderr="stdin not supported")
        return _completed("from argument")

    monkeypatch.setattr(subprocess, "run", fake_run)

    backend = ClaudeCliBackend(model_name="default")
    assert backend.invoke("the prompt") == "from argument"
    assert calls[1] == ["claude", "-p", "the prompt", "--output-format", "text"]


def test_claude_cli_both_strategies_fail(monkeypatch):
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kwargs: _completed(returncode=2, stderr="not logged in"))
    created = []
    original = claude_module.tempfile.NamedTemporaryFile

    def tracking(*args, **kwargs):
        handle = original(*args, **kwargs)
        created.append(Path(handle.name))
        return handle

    monkeypatch.setattr(claude_module.tempfile, "NamedTemporaryFile", tracking)

    with pytest.raises(RemoteCallError, match="not logged in"):
        ClaudeCliBackend(model_name="default").invoke("p")
    assert created and not created[0].exists()


def test_claude_cli_timeout_is_final(monkeypatch):
    """Test a timeout raises immediately without the fallback strategy."""
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(AgentTimeoutError, match="timed out after 5s"):
        ClaudeCliBackend(timeout=5, model_name="default").invoke("p")
    assert len(calls) == 1


def test_claude_cli_empty_output_triggers_fallback(monkeypatch):
    outputs = iter(["", "second"])
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kwargs: _completed(next(outputs)))
    assert ClaudeCliBackend(model_name="default").invoke("p") == "second"


def test_claude_cli_model_flag(monkeypatch):
    seen = []
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kwargs: seen.append(cmd) or _completed("ok"))
    ClaudeCliBackend(model_name="opus").invoke("p")
    assert seen[0][-2:] == ["--model", "opus"]


def test_claude_cli_rejects_attachments():
    with pytest.raises(ValueError):
        ClaudeCliBackend().invoke("p", [ImageAttachment(mime_type="image/png", data="")])


def test_claude_cli_check_auth(monkeypatch):
    monkeypatch.setattr(subprocess, "run", lambda cmd, **kwargs: _completed("1.0.0"))
    assert ClaudeCliBackend().check_auth().status == "available"

    def missing(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(subprocess, "run", missing)
    assert ClaudeCliBackend().check_auth().status == "not available"
