"""Preserve the original children of a component before its content is replaced."""

from __future__ import annotations

import json

from bs4 import Tag

from .dom import inner_html

SNAPSHOT_ATTRIBUTE = "data-ssr-content"


def preserve_children(tag: Tag) -> str:
    """Store the JSON-encoded child markup on the tag, even when it is empty."""

    markup = inner_html(tag)
    tag[SNAPSHOT_ATTRIBUTE] = json.dumps(markup)
    return markup


def preserved_children(tag: Tag) -> str | None:
    """Return the snapshot stored by preserve_children, or None if it never ran."""

    raw = tag.get(SNAPSHOT_ATTRIBUTE)
    if raw is None:
        return None
    value = json.loads(raw)
    if not isinstance(value, str):
        raise ValueError(f"{SNAPSHOT_ATTRIBUTE} must encode a string, got {type(value).__name__}")
    return value


__all__ = ["SNAPSHOT_ATTRIBUTE", "preserve_children", "preserved_children"]
