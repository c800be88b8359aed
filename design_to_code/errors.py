"""
Exceptions raised by the design-to-code pipeline.
"""

from typing import Optional


class DesignToCodeError(Exception):
    """Base class for pipeline errors."""


class AuthNotConfiguredError(DesignToCodeError):
    """No credentials are available for a service."""


class RemoteCallError(DesignToCodeError):
    """A remote model or the external agent failed."""


class AgentTimeoutError(RemoteCallError):
    """The external command-line agent did not finish in time."""


class ResponseParseError(DesignToCodeError):
    """A model response did not contain the expected content."""

    def __init__(self, message: str, context: str, response_text: Optional[str] = None):
        super().__init__(message)
        self.context = context
        self.response_text = response_text
