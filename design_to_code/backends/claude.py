"""
Claude backends for code generation.

Either the Anthropic API through LangChain, or the locally installed
``claude`` command-line agent when no API key is available.
"""

import os
import shutil
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage

from design_to_code.backends.base import Backend, UnconfiguredBackend, message_text
from design_to_code.config import AppConfig, resolve_anthropic_api_key
from design_to_code.errors import AgentTimeoutError, RemoteCallError
from design_to_code.models import AuthStatus, ImageAttachment

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"
CLAUDE_CLI_TIMEOUT = 600  # seconds

CLAUDE_SETUP_MESSAGE = (
    "Claude authentication is not configured.\n"
    "Set ANTHROPIC_API_KEY (in the environment, a .env file, or via "
    "`design-to-code config --anthropic <key>`),\n"
    "or install the Claude Code CLI and log in with: claude login"
)


def claude_model_name() -> str:
    return os.getenv("CLAUDE_MODEL", DEFAULT_CLAUDE_MODEL)


class ClaudeApiBackend(Backend):
    """Claude through an Anthropic API key."""

    provider = "anthropic"

    def __init__(self, api_key: str, model_name: Optional[str] = None, max_tokens: int = 8192):
        self.api_key = api_key
        self.model = model_name or claude_model_name()
        self.max_tokens = max_tokens
        self._llm = None

    @property
    def llm(self) -> ChatAnthropic:
        if self._llm is None:
            self._llm = ChatAnthropic(
                model=self.model,
                max_tokens=self.max_tokens,
                api_key=self.api_key,
            )
        return self._llm

    def invoke(self, prompt: str, attachments: Optional[List[ImageAttachment]] = None) -> str:
        content = []
        for attachment in attachments or []:
            content.append({
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": attachment.mime_type,
                    "data": attachment.data
                }
            })
        content.append({"type": "text", "text": prompt})

        response = self.llm.invoke([HumanMessage(content=content)])
        return message_text(response)

    def check_auth(self) -> AuthStatus:
        return AuthStatus(method="API Key", status="configured")


@contextmanager
def prompt_file(prompt: str) -> Iterator[Path]:
    """Write a prompt to a temporary file that is removed on exit."""
    handle = tempfile.NamedTemporaryFile(
        mode="w", prefix="design-to-code-", suffix=".txt", delete=False, encoding="utf-8"
    )
    path = Path(handle.name)
    try:
        with handle:
            handle.write(prompt)
        yield path
    finally:
        path.unlink(missing_ok=True)


class ClaudeCliBackend(Backend):
    """
    Delegates generation to the ``claude`` command-line agent.

    The prompt is first piped on stdin from a temporary file. If that run
    fails, the prompt is passed again as a direct argument. A timeout on
    either run is final.
    """

    provider = "claude-cli"

    def __init__(self, claude_bin: str = "claude", timeout: float = CLAUDE_CLI_TIMEOUT,
                 model_name: Optional[str] = None):
        self.claude_bin = claude_bin
        self.timeout = timeout
        self.model = model_name or os.getenv("CLAUDE_MODEL", "default")

    def _env(self) -> dict:
        # A nested agent refuses to start when it detects a parent session
        return {k: v for k, v in os.environ.items() if k != "CLAUDECODE"}

    def _base_command(self) -> List[str]:
        cmd = [self.claude_bin, "-p", "--output-format", "text"]
        if self.model != "default":
            cmd.extend(["--model", self.model])
        return cmd

    def _run(self, cmd: List[str], stdin=None) -> str:
        try:
            result = subprocess.run(
                cmd,
                stdin=stdin,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=self._env(),
            )
        except subprocess.TimeoutExpired:
            raise AgentTimeoutError(f"Claude CLI timed out after {self.timeout}s")
        except OSError as e:
            raise RemoteCallError(f"Could not start Claude CLI ({self.claude_bin}): {e}")

        if result.returncode != 0:
            raise RemoteCallError(
                f"Claude CLI failed (exit {result.returncode}): {result.stderr.strip()[:500]}"
            )

        output = result.stdout.strip()
        if not output:
            raise RemoteCallError("Claude CLI returned no output")
        return output

    def run_from_file(self, path: Path) -> str:
        """Primary strategy: prompt on stdin."""
        with open(path, "r", encoding="utf-8") as stdin:
            return self._run(self._base_command(), stdin=stdin)

    def run_with_argument(self, prompt: str) -> str:
        """Fallback strategy: prompt as a command-line argument."""
        cmd = self._base_command()
        cmd.insert(2, prompt)
        return self._run(cmd, stdin=subprocess.DEVNULL)

    def invoke(self, prompt: str, attachments: Optional[List[ImageAttachment]] = None) -> str:
        if attachments:
            raise ValueError("Claude CLI backend does not accept image attachments")

        with prompt_file(prompt) as path:
            try:
                return self.run_from_file(path)
            except AgentTimeoutError:
                raise
            except RemoteCallError as e:
                print(f"⚠️  {e}; retrying with the prompt as an argument")
            return self.run_with_argument(prompt)

    def check_auth(self) -> AuthStatus:
        try:
            subprocess.run(
                [self.claude_bin, "--version"],
                capture_output=True,
                text=True,
                timeout=30,
                check=True,
            )
        except (OSError, subprocess.SubprocessError):
            return AuthStatus(method="Claude CLI", status="not available")
        return AuthStatus(method="Claude CLI", status="available")


def resolve_code_backend(config: Optional[AppConfig] = None) -> Backend:
    """
    Pick the Claude credential strategy.

    API key from the environment or config file first, then the claude CLI
    agent when it is installed.
    """
    api_key = resolve_anthropic_api_key(config)
    if api_key:
        return ClaudeApiBackend(api_key)
    if shutil.which("claude"):
        return ClaudeCliBackend()
    return UnconfiguredBackend("anthropic", CLAUDE_SETUP_MESSAGE)
