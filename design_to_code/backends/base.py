"""
Common interface for model backends.

A backend is a credential strategy chosen once when a generator is built.
Callers only ever see ``invoke(prompt, attachments) -> text``.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from design_to_code.errors import AuthNotConfiguredError
from design_to_code.models import AuthStatus, ImageAttachment


class Backend(ABC):
    """A remote text-generation endpoint."""

    provider: str = ""
    model: str = ""

    @abstractmethod
    def invoke(self, prompt: str, attachments: Optional[List[ImageAttachment]] = None) -> str:
        """Send one prompt and return the response text."""

    @abstractmethod
    def check_auth(self) -> AuthStatus:
        """Report the authentication method and whether it works."""


class UnconfiguredBackend(Backend):
    """Stands in when no credentials exist; fails before any network call."""

    def __init__(self, provider: str, setup_message: str):
        self.provider = provider
        self.model = "none"
        self.setup_message = setup_message

    def invoke(self, prompt: str, attachments: Optional[List[ImageAttachment]] = None) -> str:
        raise AuthNotConfiguredError(self.setup_message)

    def check_auth(self) -> AuthStatus:
        return AuthStatus(method="none", status="not configured")


def message_text(response: Any) -> str:
    """Flatten a LangChain message's content into plain text."""
    content = getattr(response, "content", response)
    if isinstance(content, str):
        return content

    parts = []
    for item in content or []:
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, dict) and item.get("type") == "text":
            parts.append(item.get("text", ""))
    return "".join(parts)
