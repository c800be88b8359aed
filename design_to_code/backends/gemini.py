"""
Gemini backends for design generation.

Two credential strategies: an API key used through LangChain, or a Google
OAuth access token fetched from ``gcloud`` and sent to the Vertex AI REST
endpoint.
"""

import os
import shutil
import subprocess
from typing import List, Optional

import requests
from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from design_to_code.backends.base import Backend, UnconfiguredBackend, message_text
from design_to_code.config import AppConfig, resolve_gemini_api_key
from design_to_code.errors import AuthNotConfiguredError, RemoteCallError
from design_to_code.models import AuthStatus, ImageAttachment

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
VERTEX_LOCATION = "us-central1"
VERTEX_ENDPOINT = (
    "https://{location}-aiplatform.googleapis.com/v1/projects/{project}"
    "/locations/{location}/publishers/google/models/{model}:generateContent"
)

GEMINI_SETUP_MESSAGE = (
    "Gemini authentication is not configured.\n"
    "Set GEMINI_API_KEY (in the environment, a .env file, or via "
    "`design-to-code config --gemini <key>`),\n"
    "or install the Google Cloud CLI and run: gcloud auth application-default login"
)


def gemini_model_name() -> str:
    return os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL)


class GeminiApiBackend(Backend):
    """Gemini through an API key."""

    provider = "gemini"

    def __init__(self, api_key: str, model_name: Optional[str] = None, temperature: float = 0.7):
        self.api_key = api_key
        self.model = model_name or gemini_model_name()
        self.temperature = temperature
        self._llm = None

    @property
    def llm(self) -> ChatGoogleGenerativeAI:
        if self._llm is None:
            self._llm = ChatGoogleGenerativeAI(
                model=self.model,
                google_api_key=self.api_key,
                temperature=self.temperature,
                max_output_tokens=8192,
            )
        return self._llm

    def invoke(self, prompt: str, attachments: Optional[List[ImageAttachment]] = None) -> str:
        if attachments:
            content = [{"type": "text", "text": prompt}]
            for attachment in attachments:
                content.append({
                    "type": "image_url",
                    "image_url": f"data:{attachment.mime_type};base64,{attachment.data}"
                })
            message = HumanMessage(content=content)
        else:
            message = HumanMessage(content=prompt)

        response = self.llm.invoke([message])
        return message_text(response)

    def check_auth(self) -> AuthStatus:
        return AuthStatus(method="API Key", status="configured")


class GeminiOAuthBackend(Backend):
    """Gemini on Vertex AI with an access token from the gcloud CLI."""

    provider = "gemini-vertex"

    def __init__(self, project_id: Optional[str] = None, model_name: Optional[str] = None,
                 gcloud_bin: str = "gcloud"):
        self.project_id = project_id or os.getenv("GOOGLE_CLOUD_PROJECT")
        self.model = model_name or gemini_model_name()
        self.gcloud_bin = gcloud_bin

    def _gcloud(self, *args: str) -> str:
        result = subprocess.run(
            [self.gcloud_bin, *args],
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def get_access_token(self) -> str:
        try:
            token = self._gcloud("auth", "application-default", "print-access-token")
        except (OSError, subprocess.CalledProcessError):
            raise AuthNotConfiguredError(
                "Google OAuth not configured. Run: gcloud auth application-default login\n"
                "Or set GEMINI_API_KEY environment variable."
            )
        if not token:
            raise AuthNotConfiguredError(
                "gcloud returned an empty access token. Run: gcloud auth application-default login"
            )
        return token

    def get_project_id(self) -> str:
        if self.project_id:
            return self.project_id
        try:
            project_id = self._gcloud("config", "get-value", "project")
        except (OSError, subprocess.CalledProcessError):
            project_id = ""
        if not project_id:
            raise AuthNotConfiguredError(
                "Could not determine Google Cloud project. Set GOOGLE_CLOUD_PROJECT env var."
            )
        self.project_id = project_id
        return project_id

    def build_payload(self, prompt: str, attachments: Optional[List[ImageAttachment]] = None) -> dict:
        parts = [{"text": prompt}]
        for attachment in attachments or []:
            parts.append({"inlineData": {"mimeType": attachment.mime_type, "data": attachment.data}})
        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "temperature": 0.7,
                "maxOutputTokens": 8192,
            },
        }

    def invoke(self, prompt: str, attachments: Optional[List[ImageAttachment]] = None) -> str:
        access_token = self.get_access_token()
        url = VERTEX_ENDPOINT.format(
            location=VERTEX_LOCATION, project=self.get_project_id(), model=self.model
        )

        response = requests.post(
            url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            json=self.build_payload(prompt, attachments),
        )
        if not response.ok:
            raise RemoteCallError(f"Gemini API error: {response.text}")

        data = response.json()
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise RemoteCallError(f"Gemini API returned no text candidate: {data}")

    def check_auth(self) -> AuthStatus:
        try:
            self.get_access_token()
        except AuthNotConfiguredError:
            return AuthStatus(method="Google OAuth", status="not authenticated")
        return AuthStatus(method="Google OAuth", status="authenticated")


def resolve_design_backend(config: Optional[AppConfig] = None) -> Backend:
    """
    Pick the Gemini credential strategy.

    API key from the environment or config file first, then gcloud OAuth
    when the gcloud CLI is installed.
    """
    api_key = resolve_gemini_api_key(config)
    if api_key:
        return GeminiApiBackend(api_key)
    if shutil.which("gcloud"):
        return GeminiOAuthBackend()
    return UnconfiguredBackend("gemini", GEMINI_SETUP_MESSAGE)
