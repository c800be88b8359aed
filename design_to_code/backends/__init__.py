"""
Credential strategies for the design (Gemini) and code (Claude) models.

Each strategy is resolved once and exposes the same ``invoke`` call.
"""

from design_to_code.backends.base import Backend, UnconfiguredBackend
from design_to_code.backends.claude import (
    ClaudeApiBackend,
    ClaudeCliBackend,
    resolve_code_backend,
)
from design_to_code.backends.gemini import (
    GeminiApiBackend,
    GeminiOAuthBackend,
    resolve_design_backend,
)

__all__ = [
    "Backend",
    "UnconfiguredBackend",
    "ClaudeApiBackend",
    "ClaudeCliBackend",
    "GeminiApiBackend",
    "GeminiOAuthBackend",
    "resolve_code_backend",
    "resolve_design_backend",
]
