"""Server-side rendering of template-backed custom elements in an HTML document."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from bs4 import Tag

from .config import RendererConfig
from .dom import (
    insert_stylesheet,
    is_attached,
    iter_tags,
    parse_html,
    replace_children,
    strip_attribute,
    to_html,
)
from .slots import SlotReport, reconcile_slots
from .snapshot import SNAPSHOT_ATTRIBUTE, preserve_children
from .styles import StyleRegistry, scope_and_extract
from .templates import JinjaTemplateService, TemplateResolver, TemplateService

RENDERED_ATTRIBUTE = "data-ssr"
DEFAULT_MAX_DEPTH = 32


class RenderDepthExceeded(RecursionError):
    """Components kept producing new components past the allowed nesting depth."""

    def __init__(self, tag_name: str, depth: int) -> None:
        super().__init__(f"render depth {depth} exceeded while rendering <{tag_name}>")
        self.tag_name = tag_name
        self.depth = depth


@dataclass
class RenderState:
    """Mutable state owned by a single render call."""

    registry: StyleRegistry = field(default_factory=StyleRegistry)
    rendered_tags: List[str] = field(default_factory=list)
    instances: int = 0
    discarded: int = 0

    def record(self, tag_name: str, report: SlotReport) -> None:
        self.instances += 1
        self.discarded += report.discarded
        if tag_name not in self.rendered_tags:
            self.rendered_tags.append(tag_name)


@dataclass
class RenderResult:
    html: str
    rendered_tags: List[str]
    instances: int
    stylesheet: str
    # Call-site children dropped because the template had no slot for them.
    discarded: int = 0


def build_context(tag: Tag) -> Dict[str, str]:
    """Flatten attributes into template context; foo-bar becomes foo_bar.

    When two attributes normalize to the same key the one declared last wins.
    """

    return {name.replace("-", "_"): value for name, value in tag.attrs.items()}


class Renderer:
    """Renders every registered component tag found in an HTML string."""

    def __init__(
        self,
        templates: Mapping[str, str],
        service: TemplateService | None = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be positive")
        self.resolver = TemplateResolver(templates, service)
        self.max_depth = max_depth

    @classmethod
    def from_config(cls, config: RendererConfig) -> "Renderer":
        options = {
            "autoescape": config.autoescape,
            "strict_undefined": config.strict_undefined,
        }
        if config.template_dirs:
            service = JinjaTemplateService.from_directories(config.template_dirs, **options)
        else:
            service = JinjaTemplateService.from_bodies(config.components.values(), **options)
        return cls(config.components, service, max_depth=config.max_depth)

    @property
    def tag_names(self) -> tuple[str, ...]:
        return self.resolver.tag_names

    def render(self, html: str) -> str:
        return self.render_document(html).html

    def render_document(self, html: str) -> RenderResult:
        state = RenderState()
        soup = parse_html(html)
        # Snapshots only survive on tags this renderer already marked.
        strip_attribute(soup, SNAPSHOT_ATTRIBUTE, unless=RENDERED_ATTRIBUTE)
        self._render_tree(soup, state, depth=0)
        stylesheet = state.registry.stylesheet()
        insert_stylesheet(soup, stylesheet)
        return RenderResult(
            html=to_html(soup).strip(),
            rendered_tags=list(state.rendered_tags),
            instances=state.instances,
            stylesheet=stylesheet,
            discarded=state.discarded,
        )

    def _render_tree(self, root: Tag, state: RenderState, depth: int) -> None:
        pending = [
            (tag_name, tag)
            for tag_name, tag in iter_tags(root, self.tag_names)
            if not tag.has_attr(RENDERED_ATTRIBUTE)
        ]
        for tag_name, tag in pending:
            # Earlier items may have rendered or replaced this one already.
            if tag.has_attr(RENDERED_ATTRIBUTE) or not is_attached(tag, root):
                continue
            if depth >= self.max_depth:
                raise RenderDepthExceeded(tag_name, depth + 1)
            self._render_component(tag_name, tag, state)
            self._render_tree(tag, state, depth + 1)

    def _render_component(self, tag_name: str, tag: Tag, state: RenderState) -> None:
        context = build_context(tag)
        markup = self.resolver.render(tag_name, context)
        preserve_children(tag)
        original = copy.copy(tag)
        fragment = parse_html(markup)
        scope_and_extract(fragment, tag_name, state.registry)
        report = reconcile_slots(fragment, original)
        replace_children(tag, fragment.contents)
        tag[RENDERED_ATTRIBUTE] = "true"
        state.record(tag_name, report)


__all__ = [
    "RENDERED_ATTRIBUTE",
    "RenderDepthExceeded",
    "RenderResult",
    "RenderState",
    "Renderer",
    "build_context",
]
