"""Hoist component <style> blocks into one document stylesheet, scoped per tag.

Only style rules survive, at the top level or inside @media blocks; any other
@-rule in a component stylesheet is dropped.
"""

from __future__ import annotations

import re
import xml.dom
from dataclasses import dataclass, field

import cssutils
from bs4 import Tag

HOST_SELECTOR = ":host"
# cssutils rejects ":host(<compound>)" but accepts ":is(<selector>)".
_HOST_FUNCTION_RE = re.compile(r":host\(", re.IGNORECASE)
_HOST_FUNCTION_STANDIN = ":host:is("
_IDENT_CHAR_RE = re.compile(r"[\w-]")

cssutils.log.setLevel("ERROR")


class StylesheetError(ValueError):
    """An inline component stylesheet could not be parsed."""


@dataclass
class StyleRegistry:
    """Scoped CSS collected during one render call, first entry per tag wins."""

    entries: dict[str, str] = field(default_factory=dict)

    def register(self, tag_name: str, css_text: str) -> bool:
        if not css_text or tag_name in self.entries:
            return False
        self.entries[tag_name] = css_text
        return True

    def stylesheet(self) -> str:
        return "\n".join(self.entries.values())


def _split_host_argument(rest: str) -> tuple[str, str] | None:
    """Split ":is(arg)tail" into (arg, tail) when it opens rest."""

    if not rest.lower().startswith(":is("):
        return None
    depth = 0
    for index, char in enumerate(rest):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return rest[len(":is(") : index], rest[index + 1 :]
    return None


def scope_selector(selector: str, tag_name: str) -> str:
    """Rewrite one selector so it only reaches the given component."""

    selector = selector.strip()
    rest = selector[len(HOST_SELECTOR) :]
    if not selector.lower().startswith(HOST_SELECTOR) or _IDENT_CHAR_RE.match(rest):
        return f"{tag_name} {selector}"
    split = _split_host_argument(rest)
    if split is not None:
        argument, tail = split
        if "," not in argument:
            return f"{tag_name}{argument.strip()}{tail}"
    return f"{tag_name}{rest}"


def _parse(css_text: str) -> cssutils.css.CSSStyleSheet:
    parser = cssutils.CSSParser(raiseExceptions=True, validate=False, parseComments=False)
    try:
        return parser.parseString(_HOST_FUNCTION_RE.sub(_HOST_FUNCTION_STANDIN, css_text))
    except xml.dom.DOMException as exc:
        raise StylesheetError(f"invalid component stylesheet: {exc}") from exc


def _format_rule(selectors: list[str], declarations: list[str]) -> str:
    return f"{', '.join(selectors)} {{{' '.join(declarations)}}}"


def _scope_rules(rules, tag_name: str) -> list[str]:
    scoped: list[str] = []
    for rule in rules:
        if rule.type == rule.MEDIA_RULE:
            inner = _scope_rules(rule.cssRules, tag_name)
            if inner:
                scoped.append(f"@media {rule.media.mediaText} {{{' '.join(inner)}}}")
            continue
        if rule.type != rule.STYLE_RULE:
            continue
        selectors = [scope_selector(selector.selectorText, tag_name) for selector in rule.selectorList]
        declarations: list[str] = []
        for prop in rule.style.getProperties(all=True):
            prop.priority = "important"
            declarations.append(f"{prop.name}: {prop.value} !{prop.priority};")
        scoped.append(_format_rule(selectors, declarations))
    return scoped


def scope_stylesheet(css_text: str, tag_name: str) -> str:
    """Scope every rule of a stylesheet to tag_name and force !important.

    Style rules inside @media blocks are scoped too. Other @-rules
    (@font-face, @keyframes, @import, ...) and comments are dropped.
    """

    return "\n".join(_scope_rules(_parse(css_text).cssRules, tag_name))


def scope_and_extract(fragment: Tag, tag_name: str, registry: StyleRegistry) -> str:
    """Remove <style> elements from fragment and register their scoped CSS."""

    scoped: list[str] = []
    for style in fragment.find_all("style"):
        css = scope_stylesheet(style.get_text(), tag_name)
        if css:
            scoped.append(css)
        style.extract()
    css_text = "\n".join(scoped)
    registry.register(tag_name, css_text)
    return css_text


__all__ = [
    "HOST_SELECTOR",
    "StyleRegistry",
    "StylesheetError",
    "scope_and_extract",
    "scope_selector",
    "scope_stylesheet",
]
