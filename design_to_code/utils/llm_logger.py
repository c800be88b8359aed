"""
LLM Debug Logger for tracking every design and code model call.

Supports configurable log levels (NONE, INFO, DEBUG, TRACE) and dual output:
- Console: Human-readable formatted output
- File: JSON Lines format for parsing and analysis
"""

import json
import os
import time
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from design_to_code.models import AuthStatus, ImageAttachment


class LogLevel(Enum):
    """Logging levels for LLM debug output."""

    NONE = 0
    INFO = 1
    DEBUG = 2
    TRACE = 3


class LLMLogger:
    """Centralized logger for model calls with configurable levels."""

    _instance: Optional["LLMLogger"] = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger with configuration from environment."""
        if self._initialized:
            return

        load_dotenv()

        level_str = os.getenv("LLM_DEBUG_LEVEL", "NONE").upper()
        try:
            self.level = LogLevel[level_str]
        except KeyError:
            self.level = LogLevel.NONE

        self.log_to_file = os.getenv("LLM_LOG_TO_FILE", "true").lower() == "true"
        self.log_dir = Path(os.getenv("LLM_LOG_DIR", "llm_logs"))

        self._initialized = True

    def should_log(self, min_level: LogLevel) -> bool:
        """Check if we should log at the given level."""
        return self.level.value >= min_level.value

    def _format_timestamp(self) -> str:
        return datetime.now().isoformat()

    def _truncate_content(self, content: str, max_len: int = 200) -> str:
        """Truncate content for preview."""
        if len(content) <= max_len:
            return content
        return content[:max_len] + "... [truncated]"

    def _summarize_attachments(self, attachments: List[ImageAttachment]) -> List[str]:
        return [
            f"[IMAGE_DATA: {attachment.mime_type}, base64 encoded, {len(attachment.data):,} bytes]"
            for attachment in attachments
        ]

    def _write_to_file(self, run_id: Optional[str], log_entry: Dict[str, Any]):
        """Write log entry to JSON Lines file."""
        if not self.log_to_file or not run_id:
            return

        log_file = self.log_dir / run_id / "logs" / "llm_calls.jsonl"
        log_file.parent.mkdir(parents=True, exist_ok=True)

        with open(log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")

    def log_invocation(self, component: str, provider: str, model: str, run_id: Optional[str] = None) -> str:
        """
        Log the start of a model invocation.

        Returns:
            Invocation ID (UUID string), or an empty string when logging is off
        """
        if not self.should_log(LogLevel.INFO):
            return ""

        invocation_id = str(uuid.uuid4())
        console_msg = f"[{self._format_timestamp()}] 🔵 LLM Call: [{component}] {provider}/{model}"
        if run_id:
            console_msg += f" | run_id: {run_id}"
        print(console_msg)

        return invocation_id

    def log_request(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        prompt: str,
        attachments: List[ImageAttachment],
        run_id: Optional[str] = None,
    ):
        """Log request details at DEBUG and above."""
        if not self.should_log(LogLevel.DEBUG):
            return

        images = self._summarize_attachments(attachments)
        print(f"  Prompt: {self._truncate_content(prompt, 150)}")
        for image in images:
            print(f"  Attachment: {image}")

        log_entry = {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "run_id": run_id,
            "request": {
                "prompt": prompt if self.level == LogLevel.TRACE else None,
                "prompt_length": len(prompt),
                "attachments": images,
            },
        }
        self._write_to_file(run_id, log_entry)

    def log_response(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        response_text: str,
        start_time: float,
        end_time: float,
        run_id: Optional[str] = None,
    ):
        """Log the model response with timing."""
        if not self.should_log(LogLevel.INFO):
            return

        latency_ms = (end_time - start_time) * 1000
        print(
            f"[{self._format_timestamp()}] ✅ LLM Response: "
            f"[{component}] | {provider}/{model} | {latency_ms:.1f}ms | {len(response_text)} chars"
        )

        if self.should_log(LogLevel.TRACE):
            print("  RESPONSE:")
            for line in response_text.split("\n"):
                print(f"    {line}")
        elif self.should_log(LogLevel.DEBUG):
            print(f"  Response: {self._truncate_content(response_text, 200)}")

        log_entry = {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "run_id": run_id,
            "response": {
                "content": response_text if self.level == LogLevel.TRACE else None,
                "content_preview": (
                    self._truncate_content(response_text, 200)
                    if self.level.value >= LogLevel.DEBUG.value
                    else None
                ),
                "content_length": len(response_text),
            },
            "timing": {
                "latency_ms": latency_ms,
                "start_time": datetime.fromtimestamp(start_time).isoformat(),
                "end_time": datetime.fromtimestamp(end_time).isoformat(),
            },
        }
        self._write_to_file(run_id, log_entry)

    def log_error(self, component: str, error: Exception):
        if self.should_log(LogLevel.INFO):
            print(f"[{self._format_timestamp()}] ❌ LLM Error: [{component}] {type(error).__name__}: {error}")


def get_logger() -> LLMLogger:
    """Get the singleton logger instance."""
    return LLMLogger()


class LoggedBackend:
    """
    Wrapper around a backend to add debug logging.

    Intercepts invoke() calls and logs requests, responses and timing.
    """

    def __init__(self, backend: Any, component: str, run_id: Optional[str] = None):
        """
        Initialize LoggedBackend wrapper.

        Args:
            backend: The backend instance to wrap
            component: Component name ("design" or "code")
            run_id: Optional run identifier used to group file logs
        """
        self.backend = backend
        self.component = component
        self.run_id = run_id
        self.logger = get_logger()

    def __getattr__(self, name: str):
        """Delegate all other attributes to the wrapped backend."""
        return getattr(self.backend, name)

    def check_auth(self) -> AuthStatus:
        return self.backend.check_auth()

    def invoke(self, prompt: str, attachments: Optional[List[ImageAttachment]] = None) -> str:
        """
        Invoke the backend with logging.

        Args:
            prompt: Prompt text
            attachments: Optional inline images

        Returns:
            Response text
        """
        attachments = attachments or []
        provider = self.backend.provider
        model = self.backend.model

        invocation_id = self.logger.log_invocation(self.component, provider, model, self.run_id)
        if not invocation_id:
            return self.backend.invoke(prompt, attachments)

        self.logger.log_request(
            invocation_id, self.component, provider, model, prompt, attachments, self.run_id
        )

        start_time = time.time()
        try:
            response_text = self.backend.invoke(prompt, attachments)
        except Exception as e:
            self.logger.log_error(self.component, e)
            raise
        end_time = time.time()

        self.logger.log_response(
            invocation_id, self.component, provider, model, response_text,
            start_time, end_time, self.run_id
        )

        return response_text
