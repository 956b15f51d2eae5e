"""Template resolution for component tags, rendered through Jinja."""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Protocol, Sequence

from jinja2 import (
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Undefined,
    select_autoescape,
)


class TemplateService(Protocol):
    """Anything that turns a template identifier and a flat context into markup."""

    def render(self, identifier: str, context: Mapping[str, str]) -> str:
        ...


def build_environment(
    loader,
    *,
    autoescape: bool = True,
    strict_undefined: bool = False,
) -> Environment:
    """Create a Jinja environment with the component rendering defaults."""

    return Environment(
        loader=loader,
        autoescape=select_autoescape(["html", "jinja"], default=True) if autoescape else False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined if strict_undefined else Undefined,
    )


class JinjaTemplateService:
    """Render templates looked up by name in a Jinja environment."""

    def __init__(self, environment: Environment) -> None:
        self.environment = environment

    @classmethod
    def from_bodies(cls, bodies: Iterable[str], **options) -> "JinjaTemplateService":
        """Embedded mode: every identifier is its own template source."""

        loader = DictLoader({body: body for body in bodies})
        return cls(build_environment(loader, **options))

    @classmethod
    def from_directories(
        cls, directories: Sequence[str | Path], **options
    ) -> "JinjaTemplateService":
        loader = FileSystemLoader([str(path) for path in directories])
        return cls(build_environment(loader, **options))

    def render(self, identifier: str, context: Mapping[str, str]) -> str:
        template = self.environment.get_template(identifier)
        return template.render(dict(context))


def normalize_template_map(template_map: Mapping[str, str]) -> dict[str, str]:
    """Lowercase tag names, keeping order; reject blank, spaced or repeated ones."""

    normalized: dict[str, str] = {}
    for tag_name, identifier in template_map.items():
        key = tag_name.strip().lower()
        if not key or any(char.isspace() for char in key):
            raise ValueError(f"invalid component tag name: {tag_name!r}")
        if key in normalized:
            raise ValueError(f"duplicate component tag name: {key}")
        normalized[key] = identifier
    return normalized


class TemplateResolver:
    """Maps component tag names to template identifiers and renders them."""

    def __init__(
        self,
        template_map: Mapping[str, str],
        service: TemplateService | None = None,
    ) -> None:
        normalized = normalize_template_map(template_map)
        self.template_map: Mapping[str, str] = MappingProxyType(normalized)
        if service is None:
            service = JinjaTemplateService.from_bodies(normalized.values())
        self.service = service

    @property
    def tag_names(self) -> tuple[str, ...]:
        return tuple(self.template_map)

    def identifier_for(self, tag_name: str) -> str:
        return self.template_map[tag_name]

    def render(self, tag_name: str, context: Mapping[str, str]) -> str:
        return self.service.render(self.identifier_for(tag_name), context)


__all__ = [
    "JinjaTemplateService",
    "TemplateResolver",
    "TemplateService",
    "build_environment",
    "normalize_template_map",
]
