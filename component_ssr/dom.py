"""BeautifulSoup helpers for parsing and serializing component markup."""

from __future__ import annotations

from typing import Iterable, Iterator

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.dammit import EntitySubstitution
from bs4.element import Doctype, PageElement
from bs4.formatter import HTMLFormatter

PARSER = "html.parser"


class DocumentOrderFormatter(HTMLFormatter):
    """Minimal entity escaping that keeps attributes in the order they were set."""

    def __init__(self) -> None:
        super().__init__(
            entity_substitution=EntitySubstitution.substitute_xml,
            void_element_close_prefix=None,
        )

    def attributes(self, tag: Tag):
        if not tag.attrs:
            return []
        return list(tag.attrs.items())


FORMATTER = DocumentOrderFormatter()


def parse_html(markup: str) -> BeautifulSoup:
    """Parse markup leniently; the soup object doubles as the synthetic root."""

    # Keep class and friends as plain strings so they round-trip verbatim.
    return BeautifulSoup(markup, PARSER, multi_valued_attributes=None)


def to_html(node: PageElement) -> str:
    # bs4 appends a newline to doctypes, which would pile up on every re-render.
    if isinstance(node, Doctype):
        return f"<!DOCTYPE {node}>"
    if isinstance(node, BeautifulSoup):
        return "".join(to_html(child) for child in node.contents)
    if isinstance(node, NavigableString):
        return node.output_ready(formatter=FORMATTER)
    return node.decode(formatter=FORMATTER)


def inner_html(tag: Tag) -> str:
    return tag.decode_contents(formatter=FORMATTER)


def is_attached(node: PageElement, root: Tag) -> bool:
    return any(parent is root for parent in node.parents)


def iter_tags(root: Tag, names: Iterable[str]) -> Iterator[tuple[str, Tag]]:
    """Yield (name, tag) for every descendant of root, grouped by name order."""

    for name in names:
        for tag in root.find_all(name):
            yield name, tag


def strip_attribute(root: Tag, attribute: str, *, unless: str | None = None) -> int:
    """Remove an attribute from every descendant, skipping tags carrying `unless`."""

    removed = 0
    for tag in root.find_all(attrs={attribute: True}):
        if unless and tag.has_attr(unless):
            continue
        del tag[attribute]
        removed += 1
    return removed


def replace_children(tag: Tag, nodes: Iterable[PageElement]) -> None:
    tag.clear()
    tag.extend(list(nodes))


def insert_stylesheet(soup: BeautifulSoup, css_text: str) -> Tag | None:
    """Place one <style> block in <head>, else at the top of <body>, else first."""

    if not css_text:
        return None
    style = soup.new_tag("style")
    style.string = css_text
    head = soup.find("head")
    if head is not None:
        head.append(style)
        return style
    body = soup.find("body")
    if body is not None:
        body.insert(0, style)
        return style
    soup.insert(0, style)
    return style


__all__ = [
    "FORMATTER",
    "inner_html",
    "insert_stylesheet",
    "is_attached",
    "iter_tags",
    "parse_html",
    "replace_children",
    "strip_attribute",
    "to_html",
]
