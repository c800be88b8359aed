"""
Shared fixtures for the test suite.
"""

import json

import pytest

from design_to_code.models import AuthStatus


LANDING_RESPONSE = (
    '{"name":"Landing","description":"d","layout":{"type":"single","sections":[]},'
    '"colorScheme":{"primary":"#000","secondary":"#111","accent":"#222","background":"#fff","text":"#000"},'
    '"typography":{"headingFont":"Inter","bodyFont":"Inter"},"components":[]}'
)


class FakeBackend:
    """Backend double that records prompts and replays canned responses."""

    provider = "fake"
    model = "fake-model"

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def invoke(self, prompt, attachments=None):
        self.calls.append((prompt, list(attachments or [])))
        return self.responses.pop(0)

    def check_auth(self):
        return AuthStatus(method="fake", status="configured")


@pytest.fixture
def fake_backend():
    return FakeBackend


@pytest.fixture
def design_data():
    """A design spec with nested components."""
    return {
        "name": "Shop",
        "description": "An online shop",
        "layout": {
            "type": "grid",
            "sections": [
                {"name": "hero", "type": "banner", "content": "Welcome"},
                {
                    "name": "products",
                    "type": "grid",
                    "content": "",
                    "children": [{"type": "card", "name": "ProductCard", "props": {"price": 10}}],
                },
            ],
        },
        "colorScheme": {
            "primary": "#111111",
            "secondary": "#222222",
            "accent": "#ff0000",
            "background": "#ffffff",
            "text": "#000000",
        },
        "typography": {"headingFont": "Poppins", "bodyFont": "Inter"},
        "components": [
            {
                "type": "navbar",
                "name": "Nav",
                "props": {"sticky": True},
                "children": [
                    {"type": "link", "name": "Home", "props": {"href": "/"}},
                    {
                        "type": "menu",
                        "name": "More",
                        "props": {},
                        "children": [{"type": "link", "name": "About", "props": {"href": "/about"}}],
                    },
                ],
            },
            {"type": "footer", "name": "Footer", "props": {"year": 2024}},
        ],
    }


@pytest.fixture
def design_file(tmp_path, design_data):
    path = tmp_path / "design-spec.json"
    path.write_text(json.dumps(design_data), encoding="utf-8")
    return path


@pytest.fixture
def no_credentials(monkeypatch, tmp_path):
    """Remove every credential source: env keys, config file and login tools."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.setenv("DESIGN_TO_CODE_CONFIG", str(tmp_path / "missing-config.json"))
    monkeypatch.setattr("shutil.which", lambda name: None)


@pytest.fixture
def landing_response():
    """The design model's answer for "landing page"."""
    return LANDING_RESPONSE
