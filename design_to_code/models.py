"""
Data models for the design-to-code pipeline.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Component(BaseModel):
    """A UI component, possibly containing nested components."""
    model_config = ConfigDict(extra="allow")

    type: str = ""
    name: str = ""
    props: Dict[str, Any] = Field(default_factory=dict)
    children: Optional[List["Component"]] = None

    def count(self) -> int:
        """Count this component and all of its descendants."""
        return 1 + sum(child.count() for child in self.children or [])


class Section(BaseModel):
    """A layout section."""
    model_config = ConfigDict(extra="allow")

    name: str = ""
    type: str = ""
    content: Any = ""
    children: Optional[List[Component]] = None


class Layout(BaseModel):
    """Overall page layout."""
    model_config = ConfigDict(extra="allow")

    type: str = ""
    sections: List[Section] = Field(default_factory=list)


class ColorScheme(BaseModel):
    """Five named colors of the design palette."""
    model_config = ConfigDict(extra="allow")

    primary: str = ""
    secondary: str = ""
    accent: str = ""
    background: str = ""
    text: str = ""

    def as_list(self) -> List[str]:
        return [self.primary, self.secondary, self.accent, self.background, self.text]


class Typography(BaseModel):
    """Font choices."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    heading_font: str = Field(default="", alias="headingFont")
    body_font: str = Field(default="", alias="bodyFont")


class DesignSpec(BaseModel):
    """Structured UI description produced by the design model."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = ""
    description: str = ""
    layout: Layout = Field(default_factory=Layout)
    color_scheme: ColorScheme = Field(default_factory=ColorScheme, alias="colorScheme")
    typography: Typography = Field(default_factory=Typography)
    components: List[Component] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase JSON keys, keeping only keys that were set."""
        return self.model_dump(by_alias=True, exclude_unset=True)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def count_components(self) -> int:
        """Count top-level components and all nested children."""
        return sum(component.count() for component in self.components)


Component.model_rebuild()


class CodeFile(BaseModel):
    """A single generated source file."""
    path: str
    content: str
    language: str = ""


class GeneratedCode(BaseModel):
    """Files plus setup instructions produced by the code model."""
    files: List[CodeFile] = Field(default_factory=list)
    instructions: str = ""


class ImageAttachment(BaseModel):
    """An inline image sent alongside a prompt."""
    mime_type: str
    data: str  # base64
    path: Optional[Path] = None


class AuthStatus(BaseModel):
    """Authentication method and state of a backend."""
    method: str
    status: str
