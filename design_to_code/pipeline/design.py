"""
Design specification generation with Gemini.
"""

from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from design_to_code.backends.base import Backend
from design_to_code.backends.gemini import resolve_design_backend
from design_to_code.config import AppConfig
from design_to_code.errors import ResponseParseError
from design_to_code.io.image_loader import ImageLoader
from design_to_code.models import DesignSpec
from design_to_code.pipeline.parsing import ResponseParser
from design_to_code.utils.llm_logger import LoggedBackend


DESIGN_PROMPT_TEMPLATE = """You are an expert UI/UX designer. Generate a detailed design specification in JSON format.

The design spec should include:
1. name: Project name
2. description: Brief description
3. layout: Overall layout structure with sections (an object with "type" and a "sections" list)
4. colorScheme: Color palette (primary, secondary, accent, background, text)
5. typography: Font choices (headingFont, bodyFont)
6. components: List of UI components with their type, name, props and optional children

Respond ONLY with valid JSON, no markdown or explanation.

Create a design specification for: {prompt}"""


IMAGE_ANALYSIS_PROMPT = """Analyze this UI design image and extract a detailed design specification in JSON format.

Include:
1. name: Suggested project name
2. description: What this UI appears to be
3. layout: Structure and sections identified (an object with "type" and a "sections" list)
4. colorScheme: Colors used (primary, secondary, accent, background, text as hex values)
5. typography: Font styles observed (headingFont, bodyFont)
6. components: All UI components identified with their type, name, props and optional children

Respond ONLY with valid JSON."""


REFINE_PROMPT_TEMPLATE = """Current design specification:
{design}

User feedback: {feedback}

Update the design specification based on the feedback. Keep the same JSON structure
(name, description, layout, colorScheme, typography, components).
Respond ONLY with the updated JSON."""


def build_design_prompt(prompt: str) -> str:
    return DESIGN_PROMPT_TEMPLATE.format(prompt=prompt)


def build_refine_prompt(design: DesignSpec, feedback: str) -> str:
    return REFINE_PROMPT_TEMPLATE.format(design=design.to_json(), feedback=feedback)


class DesignGenerator:
    """Generates, analyzes and refines design specifications."""

    def __init__(
        self,
        backend: Optional[Backend] = None,
        config: Optional[AppConfig] = None,
        image_loader: Optional[ImageLoader] = None,
        run_id: Optional[str] = None
    ):
        """
        Initialize the generator.

        Args:
            backend: Backend to call (resolved from credentials if omitted).
            config: User config consulted for the API key.
            image_loader: Loader for design images.
            run_id: Optional identifier grouping file logs for this run.
        """
        self.backend = LoggedBackend(
            backend or resolve_design_backend(config),
            component="design",
            run_id=run_id
        )
        self.image_loader = image_loader or ImageLoader()
        self.parser = ResponseParser()

    def _parse(self, response_text: str, context: str, what: str) -> DesignSpec:
        try:
            data = self.parser.extract_json(response_text)
            return DesignSpec.model_validate(data)
        except (ValueError, ValidationError) as e:
            raise ResponseParseError(
                f"Failed to parse {what} from Gemini response: {e}",
                context=context,
                response_text=response_text
            )

    def generate(self, prompt: str) -> DesignSpec:
        """
        Generate a design specification from a text prompt.

        Args:
            prompt: Description of what to create.

        Returns:
            DesignSpec object.
        """
        response_text = self.backend.invoke(build_design_prompt(prompt))
        return self._parse(response_text, "design", "design specification")

    def analyze_image(self, image_path: Union[str, Path]) -> DesignSpec:
        """
        Extract a design specification from a UI screenshot.

        Args:
            image_path: Path to a PNG or JPEG image.

        Returns:
            DesignSpec object.
        """
        attachment = self.image_loader.load_attachment(image_path)
        response_text = self.backend.invoke(IMAGE_ANALYSIS_PROMPT, [attachment])
        return self._parse(response_text, "image", "design from image")

    def refine(self, design: DesignSpec, feedback: str) -> DesignSpec:
        """
        Update a design specification according to feedback.

        Args:
            design: Current design specification.
            feedback: Requested changes.

        Returns:
            Updated DesignSpec object.
        """
        response_text = self.backend.invoke(build_refine_prompt(design, feedback))
        return self._parse(response_text, "refine", "refined design")

    def create(
        self,
        prompt: Optional[str] = None,
        image_path: Optional[Union[str, Path]] = None
    ) -> DesignSpec:
        """Generate from exactly one of a text prompt or an image path."""
        if (prompt is None) == (image_path is None):
            raise ValueError("Provide either a prompt or an image path, not both")
        if image_path is not None:
            return self.analyze_image(image_path)
        return self.generate(prompt)
