"""
Extraction of structured content from free-form model responses.

Model output is unstructured text. The extraction here is a best-effort
heuristic, not a contract with the model: it takes everything from the first
``{`` to the last ``}`` and hands it to the JSON parser. Prose containing
stray braces, or a response with several JSON objects, will not parse.
"""

import json
import re
from typing import Any, Dict, Optional

JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
FENCED_BLOCK_PATTERN = re.compile(r"```[^\n]*\n(.*?)\n?```", re.S)


class ResponseParser:
    """Parses model responses to extract JSON objects and code."""

    @staticmethod
    def find_json(response_text: str) -> Optional[str]:
        """
        Find the greedy ``{...}`` span in a response.

        Args:
            response_text: Raw model response.

        Returns:
            The matched substring, or None if there is no brace pair.
        """
        match = JSON_OBJECT_PATTERN.search(response_text or "")
        return match.group(0) if match else None

    @staticmethod
    def extract_json(response_text: str) -> Dict[str, Any]:
        """
        Extract and parse the JSON object embedded in a response.

        Args:
            response_text: Raw model response, possibly wrapped in prose
                or markdown fences.

        Returns:
            Parsed JSON object.

        Raises:
            ValueError: No ``{...}`` span exists or it is not valid JSON.
        """
        candidate = ResponseParser.find_json(response_text)
        if candidate is None:
            raise ValueError("No JSON object found in response")

        data = json.loads(candidate)
        if not isinstance(data, dict):
            raise ValueError("Response JSON is not an object")
        return data

    @staticmethod
    def extract_code(response_text: str) -> str:
        """
        Extract code from a response, removing a surrounding markdown fence.

        The fence is only removed when the whole response is one fenced
        block. Anything else is returned unchanged apart from surrounding
        whitespace, so backticks inside the code are never cut.

        Args:
            response_text: Raw model response.

        Returns:
            Code content.
        """
        text = response_text.strip()
        match = FENCED_BLOCK_PATTERN.fullmatch(text)
        if match:
            return match.group(1).strip()
        return text


def extract_json(response_text: str) -> Dict[str, Any]:
    """Module-level shortcut for :meth:`ResponseParser.extract_json`."""
    return ResponseParser.extract_json(response_text)


def extract_code(response_text: str) -> str:
    """Module-level shortcut for :meth:`ResponseParser.extract_code`."""
    return ResponseParser.extract_code(response_text)
