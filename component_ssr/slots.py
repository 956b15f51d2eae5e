"""Distribute a component's call-site children into the slots of its template."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from bs4 import Tag
from bs4.element import PageElement

SLOT_TAG = "slot"
SLOT_NAME_ATTRIBUTE = "name"
SLOT_ASSIGNMENT_ATTRIBUTE = "slot"


@dataclass
class SlotReport:
    """What happened to each slot, mostly useful in tests."""

    filled: list[str] = field(default_factory=list)
    fallback: list[str] = field(default_factory=list)
    default_filled: bool = False
    discarded: int = 0


def _claim_assigned(original: Tag, name: str) -> list[PageElement]:
    claimed: list[PageElement] = []
    # Descendant match, not just direct children.
    for match in original.find_all(attrs={SLOT_ASSIGNMENT_ATTRIBUTE: name}):
        claimed.append(copy.copy(match))
        match.extract()
    return claimed


def _fill(slot: Tag, nodes: list[PageElement]) -> None:
    if nodes:
        slot.replace_with(*nodes)
    else:
        slot.unwrap()


def reconcile_slots(fragment: Tag, original: Tag) -> SlotReport:
    """Replace <slot> placeholders in fragment with content taken from original.

    `original` is a detached copy of the component element as it was before
    rendering; it is consumed by this call. Named slots are resolved first,
    the first unnamed slot then receives whatever the named slots left over.
    """

    report = SlotReport()
    default_slot: Tag | None = None

    for slot in fragment.find_all(SLOT_TAG):
        name = slot.get(SLOT_NAME_ATTRIBUTE)
        if name is None:
            if default_slot is None:
                default_slot = slot
            continue
        claimed = _claim_assigned(original, name)
        if claimed:
            report.filled.append(name)
        else:
            report.fallback.append(name)
        _fill(slot, claimed)

    remaining = list(original.contents)
    if default_slot is not None:
        report.default_filled = bool(remaining)
        _fill(default_slot, remaining)
    else:
        report.discarded = len(remaining)

    for leftover in fragment.find_all(SLOT_TAG):
        leftover.extract()
    return report


__all__ = [
    "SLOT_ASSIGNMENT_ATTRIBUTE",
    "SLOT_NAME_ATTRIBUTE",
    "SLOT_TAG",
    "SlotReport",
    "reconcile_slots",
]
