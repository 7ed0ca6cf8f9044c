"""
Placeholder tokenizer.

Recognized markers (``?`` is the trigger):

    ?n  identifier (table/field name)
    ?s  string
    ?i  integer
    ?u  field map: {'a': 1, 'b': 2} -> `a` = '1', `b` = '2'
    ?a  set: ['a', 'b'] -> ('a', 'b')
    ?p  query part, inserted verbatim
    ?f  float; ``?2f`` rounds to 2 decimals (no digits means 0)

The template is split on the letter markers first, and each literal piece is
then split on the float grammar. Doing it in one regular expression would let
``?\\d*f`` and ``?[nsiuap]`` disagree about where a literal ends. A ``?`` that
starts neither marker stays literal text.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import NamedTuple, Union

_LETTER_MARKER = re.compile(r"(\?[nsiuap])")
_FLOAT_MARKER = re.compile(r"(\?(\d*)f)")


class PlaceholderKind(str, Enum):
    """Placeholder kinds, valued by their marker letter."""

    IDENTIFIER = "n"
    STRING = "s"
    INTEGER = "i"
    FIELD_MAP = "u"
    SET_ARRAY = "a"
    RAW = "p"
    FLOAT = "f"


class Literal(NamedTuple):
    text: str


class Placeholder(NamedTuple):
    kind: PlaceholderKind
    precision: int = 0
    # Marker as written in the template, e.g. "?2f".
    text: str = ""


Token = Union[Literal, Placeholder]


def _split_floats(segment: str) -> list[Token]:
    tokens: list[Token] = []
    # re.split with two groups yields [text, marker, digits, text, marker, digits, ..., text]
    parts = _FLOAT_MARKER.split(segment)
    for i in range(0, len(parts), 3):
        if parts[i]:
            tokens.append(Literal(parts[i]))
        if i + 1 < len(parts):
            digits = parts[i + 2]
            tokens.append(
                Placeholder(PlaceholderKind.FLOAT, int(digits) if digits else 0, parts[i + 1])
            )
    return tokens


def tokenize(template: str) -> list[Token]:
    """Split ``template`` into Literal / Placeholder tokens in left-to-right order."""
    tokens: list[Token] = []
    for i, part in enumerate(_LETTER_MARKER.split(template)):
        if i % 2:
            tokens.append(Placeholder(PlaceholderKind(part[1]), 0, part))
        elif part:
            tokens.extend(_split_floats(part))
    return tokens


def parse_placeholders(template: str) -> list[Placeholder]:
    """Placeholders of ``template`` in the order their arguments are consumed."""
    return [t for t in tokenize(template) if isinstance(t, Placeholder)]


def count_placeholders(template: str) -> int:
    """Number of arguments ``template`` consumes."""
    return len(parse_placeholders(template))
