"""
Reading and writing pipeline artifacts: design specs, source files and
generated project trees.
"""

import json
from pathlib import Path
from typing import List, Union

from design_to_code.models import DesignSpec, GeneratedCode

SETUP_FILENAME = "SETUP.md"


class OutputWriter:
    """Materializes generated code into an output directory."""

    def __init__(self, output_dir: Union[str, Path] = "output"):
        """
        Initialize output writer.

        Args:
            output_dir: Root directory for generated files.
        """
        self.output_dir = Path(output_dir)

    def resolve_path(self, relative_path: str) -> Path:
        """
        Resolve a generated file path inside the output root.

        Raises:
            ValueError: If the path is absolute, names the root itself, or
                escapes the output root.
        """
        candidate = Path(relative_path)
        if candidate.is_absolute():
            raise ValueError(f"Generated file path must be relative: {relative_path}")

        root = self.output_dir.resolve()
        target = (root / candidate).resolve()
        if target == root:
            raise ValueError(f"Generated file path does not name a file: {relative_path!r}")
        if root not in target.parents:
            raise ValueError(f"Generated file path escapes output directory: {relative_path}")

        return self.output_dir / candidate

    def write(self, generated: GeneratedCode) -> List[Path]:
        """
        Write every generated file, overwriting existing ones.

        Args:
            generated: Files and instructions from the code model.

        Returns:
            Paths written, in order, including the setup document if any.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)

        written = []
        for code_file in generated.files:
            file_path = self.resolve_path(code_file.path)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(code_file.content, encoding="utf-8")
            written.append(file_path)

        if generated.instructions:
            setup_path = self.output_dir / SETUP_FILENAME
            setup_path.write_text(f"# Setup Instructions\n\n{generated.instructions}", encoding="utf-8")
            written.append(setup_path)

        return written

    @staticmethod
    def save_design(design: DesignSpec, path: Union[str, Path]) -> Path:
        """Save a design spec as pretty-printed JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(design.to_json(), encoding="utf-8")
        return path

    @staticmethod
    def load_design(path: Union[str, Path]) -> DesignSpec:
        """Load a design spec saved by :meth:`save_design`."""
        content = OutputWriter.read_source(path)
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid design file {path}: {e}")
        return DesignSpec.model_validate(data)

    @staticmethod
    def read_source(path: Union[str, Path]) -> str:
        """Read a text file, failing with the offending path."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return path.read_text(encoding="utf-8")

    @staticmethod
    def write_source(path: Union[str, Path], content: str) -> Path:
        path = Path(path)
        path.write_text(content, encoding="utf-8")
        return path
