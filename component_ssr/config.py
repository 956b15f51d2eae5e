"""Pydantic models for renderer configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .templates import normalize_template_map


class RendererConfig(BaseModel):
    """Component registry and rendering options, usually read from YAML."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    components: Dict[str, str] = Field(
        ...,
        description=(
            "Tag name to template identifier, in traversal order. Identifiers are "
            "file names when template_dirs is set, otherwise literal template bodies."
        ),
    )
    template_dirs: List[Path] = Field(
        default_factory=list,
        alias="templateDirs",
        description="Directories searched for template files.",
    )
    max_depth: int = Field(
        32,
        alias="maxDepth",
        gt=0,
        description="Deepest component nesting allowed before rendering fails.",
    )
    autoescape: bool = Field(True, description="HTML-escape template expressions.")
    strict_undefined: bool = Field(
        False,
        alias="strictUndefined",
        description="Fail when a template references an attribute the tag does not carry.",
    )

    @field_validator("components")
    @classmethod
    def _normalize_tag_names(cls, value: Dict[str, str]) -> Dict[str, str]:
        return normalize_template_map(value)

    def resolve_paths(self, base: Path) -> "RendererConfig":
        """Return a copy whose relative template_dirs are anchored at base."""

        dirs = [path if path.is_absolute() else base / path for path in self.template_dirs]
        return self.model_copy(update={"template_dirs": dirs})


def load_config(path: Path) -> RendererConfig:
    if not path.exists():
        raise SystemExit(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise SystemExit(f"{path} must contain a mapping.")
    try:
        config = RendererConfig.model_validate(data)
    except ValidationError as exc:
        raise SystemExit(f"Invalid renderer config in {path}: {exc}") from exc
    return config.resolve_paths(path.parent)


__all__ = ["RendererConfig", "load_config"]
