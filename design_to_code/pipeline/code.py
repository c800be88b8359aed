"""
Source code generation with Claude.
"""

from typing import Optional

from pydantic import ValidationError

from design_to_code.backends.base import Backend
from design_to_code.backends.claude import resolve_code_backend
from design_to_code.config import AppConfig, DEFAULT_FRAMEWORK
from design_to_code.errors import ResponseParseError
from design_to_code.models import DesignSpec, GeneratedCode
from design_to_code.pipeline.parsing import ResponseParser
from design_to_code.utils.llm_logger import LoggedBackend


FRAMEWORK_INSTRUCTIONS = {
    "nextjs": """
- Use Next.js App Router (app directory)
- Create page.tsx for pages
- Use 'use client' directive where needed
- Implement proper metadata exports""",
    "react": """
- Use functional components with hooks
- Create a proper component structure
- Use React.FC for component typing""",
    "vue": """
- Use Vue 3 Composition API
- Use <script setup lang="ts">
- Create .vue single file components""",
}

FALLBACK_FRAMEWORK = "react"

SUPPORTED_FRAMEWORKS = list(FRAMEWORK_INSTRUCTIONS)


CODE_PROMPT_TEMPLATE = """You are an expert frontend developer. Generate production-ready code based on this design specification:

{design}

Framework: {framework}
{framework_instructions}

Requirements:
1. Use TypeScript
2. Use Tailwind CSS for styling
3. Create reusable components
4. Follow best practices for the chosen framework
5. Include proper types/interfaces

Respond in this JSON format:
{{
  "files": [
    {{
      "path": "relative/path/to/file.tsx",
      "content": "file content here",
      "language": "typescript"
    }}
  ],
  "instructions": "Setup and usage instructions"
}}

Generate complete, working code. Respond ONLY with valid JSON."""


REFACTOR_PROMPT_TEMPLATE = """Refactor this code based on the following instructions:

Instructions: {instructions}

Code:
```
{code}
```

Respond with ONLY the refactored code, no explanations."""


FEATURE_PROMPT_TEMPLATE = """Add the following feature to this {framework} code:

Feature: {feature}

Current code:
```
{code}
```

Respond in JSON format:
{{
  "files": [
    {{
      "path": "relative/path/to/file.tsx",
      "content": "updated file content",
      "language": "typescript"
    }}
  ],
  "instructions": "What was added and how to use it"
}}

Respond ONLY with valid JSON."""


def get_framework_instructions(framework: str) -> str:
    """Exact-match lookup; unknown frameworks get the React block."""
    return FRAMEWORK_INSTRUCTIONS.get(framework, FRAMEWORK_INSTRUCTIONS[FALLBACK_FRAMEWORK])


def build_code_prompt(design: DesignSpec, framework: str = DEFAULT_FRAMEWORK) -> str:
    return CODE_PROMPT_TEMPLATE.format(
        design=design.to_json(),
        framework=framework,
        framework_instructions=get_framework_instructions(framework),
    )


def build_refactor_prompt(code: str, instructions: str) -> str:
    return REFACTOR_PROMPT_TEMPLATE.format(code=code, instructions=instructions)


def build_feature_prompt(code: str, feature: str, framework: str = DEFAULT_FRAMEWORK) -> str:
    return FEATURE_PROMPT_TEMPLATE.format(code=code, feature=feature, framework=framework)


class CodeGenerator:
    """Generates and modifies framework source code."""

    def __init__(
        self,
        backend: Optional[Backend] = None,
        config: Optional[AppConfig] = None,
        run_id: Optional[str] = None
    ):
        """
        Initialize the generator.

        Args:
            backend: Backend to call (resolved from credentials if omitted).
            config: User config consulted for the API key.
            run_id: Optional identifier grouping file logs for this run.
        """
        self.backend = LoggedBackend(
            backend or resolve_code_backend(config),
            component="code",
            run_id=run_id
        )
        self.parser = ResponseParser()

    def _parse_generated(self, response_text: str, context: str, what: str) -> GeneratedCode:
        try:
            data = self.parser.extract_json(response_text)
            return GeneratedCode.model_validate(data)
        except (ValueError, ValidationError) as e:
            raise ResponseParseError(
                f"Failed to parse {what} from Claude response: {e}",
                context=context,
                response_text=response_text
            )

    def generate_code(self, design: DesignSpec, framework: str = DEFAULT_FRAMEWORK) -> GeneratedCode:
        """
        Generate source files from a design specification.

        Args:
            design: Design specification.
            framework: Target framework key (nextjs, react, vue).

        Returns:
            GeneratedCode with files and setup instructions.
        """
        response_text = self.backend.invoke(build_code_prompt(design, framework))
        return self._parse_generated(response_text, "code", "code")

    def refactor_code(self, code: str, instructions: str) -> str:
        """
        Refactor existing code.

        Args:
            code: Source text.
            instructions: What to change.

        Returns:
            The refactored source text.
        """
        response_text = self.backend.invoke(build_refactor_prompt(code, instructions))
        refactored = self.parser.extract_code(response_text)
        if not refactored:
            raise ResponseParseError(
                "Failed to parse refactored code from Claude response: empty response",
                context="refactor",
                response_text=response_text
            )
        return refactored

    def add_feature(self, code: str, feature: str, framework: str = DEFAULT_FRAMEWORK) -> GeneratedCode:
        """
        Add a feature to existing code.

        Args:
            code: Source text.
            feature: Feature description.
            framework: Target framework key.

        Returns:
            GeneratedCode with the updated files.
        """
        response_text = self.backend.invoke(build_feature_prompt(code, feature, framework))
        return self._parse_generated(response_text, "feature", "feature addition")
