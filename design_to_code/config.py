"""
User configuration and credential resolution.

Credentials are looked up in environment variables first (a local ``.env``
file is loaded by the CLI), then in the user config file. When neither
provides an API key, each service falls back to its external login tool.
"""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_FRAMEWORK = "nextjs"
DEFAULT_OUTPUT_DIR = "./output"


class AppConfig(BaseModel):
    """Contents of the user config file."""
    model_config = ConfigDict(populate_by_name=True)

    gemini_api_key: Optional[str] = Field(default=None, alias="geminiApiKey")
    anthropic_api_key: Optional[str] = Field(default=None, alias="anthropicApiKey")
    default_framework: Optional[str] = Field(default=None, alias="defaultFramework")
    default_output_dir: Optional[str] = Field(default=None, alias="defaultOutputDir")

    @property
    def framework(self) -> str:
        return self.default_framework or DEFAULT_FRAMEWORK

    @property
    def output_dir(self) -> str:
        return self.default_output_dir or DEFAULT_OUTPUT_DIR


def get_config_path() -> Path:
    """Location of the config file (``DESIGN_TO_CODE_CONFIG`` overrides it)."""
    override = os.getenv("DESIGN_TO_CODE_CONFIG")
    if override:
        return Path(override)
    return Path.home() / ".design-to-code.json"


def load_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load the user config file.

    A missing file yields an empty config. An unreadable or malformed file is
    reported and also treated as empty.
    """
    path = path or get_config_path()
    if not path.exists():
        return AppConfig()

    try:
        return AppConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, ValueError, ValidationError) as e:
        print(f"⚠️  Ignoring unreadable config file {path}: {e}")
        return AppConfig()


def save_config(config: AppConfig, path: Optional[Path] = None) -> Path:
    """Write the config file and return its path."""
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(by_alias=True, exclude_none=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def resolve_gemini_api_key(config: Optional[AppConfig] = None) -> Optional[str]:
    return os.getenv("GEMINI_API_KEY") or (config.gemini_api_key if config else None)


def resolve_anthropic_api_key(config: Optional[AppConfig] = None) -> Optional[str]:
    return os.getenv("ANTHROPIC_API_KEY") or (config.anthropic_api_key if config else None)


def mask_secret(value: Optional[str]) -> str:
    """Show only the last four characters of a key."""
    if not value:
        return "Not set"
    return "***" + value[-4:]
