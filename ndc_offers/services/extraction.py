"""Declarative field extraction rules.

Upstream documents spell the same field several ways. Instead of nested
if/else chains, each field declares an ordered tuple of rules and the
first rule that yields a non-empty value wins:

    OFFER_ID = (Attr("OfferID"), Text("OfferID"), Attr("OfferRefID"))
    offer_id = first_of(reader, offer_el, OFFER_ID)

Paths descend one descendant lookup per step, so ``Text("Price",
"TotalAmount")`` reads the first TotalAmount under the first Price.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from ..domain.models import Money, unique
from ..ports.document import DocumentReaderPort, Element


@dataclass(frozen=True, slots=True, init=False)
class Text:
    """Text of the element reached by descending ``path``."""

    path: tuple[str, ...]

    def __init__(self, *path: str) -> None:
        object.__setattr__(self, "path", path)


@dataclass(frozen=True, slots=True, init=False)
class Attr:
    """Attribute ``name`` on the element itself or on the one at ``path``."""

    name: str
    path: tuple[str, ...]

    def __init__(self, name: str, *path: str) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "path", path)


@dataclass(frozen=True, slots=True)
class Own:
    """Text content of the element itself."""


Rule = Union[Text, Attr, Own]


def find_path(
    reader: DocumentReaderPort,
    element: Optional[Element],
    path: Sequence[str],
) -> Optional[Element]:
    """Descend ``path`` one descendant lookup at a time."""
    current = element
    for step in path:
        current = reader.get_element(current, step)
        if current is None:
            return None
    return current


def find_first(
    reader: DocumentReaderPort,
    element: Optional[Element],
    paths: Sequence[Sequence[str]],
) -> Optional[Element]:
    """First element reached by any of ``paths``."""
    for path in paths:
        found = find_path(reader, element, path)
        if found is not None:
            return found
    return None


def extract(
    reader: DocumentReaderPort,
    element: Optional[Element],
    rule: Rule,
) -> Optional[str]:
    if element is None:
        return None
    if isinstance(rule, Own):
        return reader.text_of(element)
    if isinstance(rule, Attr):
        target = find_path(reader, element, rule.path) if rule.path else element
        return reader.get_attribute(target, rule.name)
    *parents, leaf = rule.path
    parent = find_path(reader, element, parents) if parents else element
    if parent is None:
        return None
    return reader.get_text(parent, leaf)


def first_of(
    reader: DocumentReaderPort,
    element: Optional[Element],
    rules: Sequence[Rule],
    default: Optional[str] = None,
) -> Optional[str]:
    """Evaluate ``rules`` in order and return the first non-empty value."""
    for rule in rules:
        value = extract(reader, element, rule)
        if value:
            return value
    return default


def texts(
    reader: DocumentReaderPort,
    element: Optional[Element],
    tag: str,
    within: Sequence[str] = (),
) -> tuple[str, ...]:
    """Deduplicated texts of every ``tag`` under the element at ``within``."""
    scope = find_path(reader, element, within) if within else element
    if scope is None:
        return ()
    return unique(reader.text_of(el) or "" for el in reader.get_elements(scope, tag))


def first_texts(
    reader: DocumentReaderPort,
    element: Optional[Element],
    tags: Sequence[str],
) -> tuple[str, ...]:
    """Texts of the first tag in ``tags`` that has any occurrences."""
    for tag in tags:
        values = texts(reader, element, tag)
        if values:
            return values
    return ()


def parse_amount(text: Optional[str]) -> float:
    """Parse a decimal amount; anything non-numeric is 0."""
    if not text:
        return 0.0
    try:
        value = float(text.strip())
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


AMOUNT = (Text("TotalAmount"), Own())
CURRENCY = (Text("CurCode"), Attr("CurCode"), Attr("CurCode", "TotalAmount"))


def money(
    reader: DocumentReaderPort,
    element: Optional[Element],
    default_currency: str,
) -> Optional[Money]:
    """Read an amount element.

    The amount is the nested TotalAmount when present, otherwise the
    element's own text. The currency comes from a CurCode child, then a
    CurCode attribute, then ``default_currency``.

    Returns:
        The amount, or None when ``element`` is None.
    """
    if element is None:
        return None
    return Money(
        value=parse_amount(first_of(reader, element, AMOUNT)),
        currency=first_of(reader, element, CURRENCY, default=default_currency),
    )
