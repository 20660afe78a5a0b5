"""Scanner for printf-style conversion specifiers.

A specifier is made of these fields, in this order::

    %  [position$]  [sign]  [pad]  [align]  [width]  [.precision]  type

Every field except the type character is optional. The scanner walks the
fields left to right and backtracks exactly like a regular expression would:
each optional field offers its candidates longest first and finally offers to
be absent, so a digit run can give digits back to let the type character
match (``"%12"`` at the end of a string scans as width ``1``, type ``2``).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

Candidates = Iterator[Tuple[Optional[str], int]]


@dataclass(frozen=True)
class SpecifierToken:
    """One conversion specifier found in a template.

    ``offset`` and ``length`` describe the matched span in the text that was
    scanned, not in any copy mutated afterwards.
    """

    offset: int
    length: int
    type_char: str
    position: Optional[int] = None
    sign: Optional[str] = None
    pad_char: Optional[str] = None
    left_align: bool = False
    width: Optional[int] = None
    precision: Optional[int] = None

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def type_offset(self) -> int:
        return self.end - 1

    @property
    def has_modifiers(self) -> bool:
        return self.length > 2


def _digit_run(text: str, pos: int) -> int:
    end = pos
    while end < len(text) and text[end] in "0123456789":
        end += 1
    return end


def _position(text: str, pos: int) -> Candidates:
    end = _digit_run(text, pos)
    if end > pos and text[end:end + 1] == "$":
        yield text[pos:end], end + 1
    yield None, pos


def _sign(text: str, pos: int) -> Candidates:
    if text[pos:pos + 1] in ("+", "-"):
        yield text[pos], pos + 1
    yield None, pos


def _pad(text: str, pos: int) -> Candidates:
    char = text[pos:pos + 1]
    if char in (" ", "0"):
        yield char, pos + 1
    elif char == "'" and pos + 1 < len(text):
        yield text[pos + 1], pos + 2
    yield None, pos


def _align(text: str, pos: int) -> Candidates:
    if text[pos:pos + 1] == "-":
        yield "-", pos + 1
    yield None, pos


def _width(text: str, pos: int) -> Candidates:
    for stop in range(_digit_run(text, pos), pos, -1):
        yield text[pos:stop], stop
    yield None, pos


def _precision(text: str, pos: int) -> Candidates:
    if text[pos:pos + 1] == ".":
        for stop in range(_digit_run(text, pos + 1), pos, -1):
            yield text[pos + 1:stop], stop
    yield None, pos


def _type(text: str, pos: int) -> Candidates:
    char = text[pos:pos + 1]
    if char and not char.isspace():
        yield char, pos + 1


_FIELDS: Tuple[Callable[[str, int], Candidates], ...] = (
    _position,
    _sign,
    _pad,
    _align,
    _width,
    _precision,
    _type,
)


def _match(
    text: str, pos: int, index: int = 0, captured: Tuple[Optional[str], ...] = ()
) -> Optional[Tuple[Tuple[Optional[str], ...], int]]:
    if index == len(_FIELDS):
        return captured, pos
    for value, end in _FIELDS[index](text, pos):
        found = _match(text, end, index + 1, captured + (value,))
        if found is not None:
            return found
    return None


# Fields longer than this saturate instead of going through int().
FIELD_CEILING = 10 ** 18


def _count(digits: str) -> int:
    significant = digits.lstrip("0")
    if len(significant) > len(str(FIELD_CEILING)):
        return FIELD_CEILING
    return min(int(significant or "0"), FIELD_CEILING)


def _build(offset: int, end: int, fields: Tuple[Optional[str], ...]) -> SpecifierToken:
    position, sign, pad, align, width, precision, type_char = fields
    return SpecifierToken(
        offset=offset,
        length=end - offset,
        type_char=type_char or "",
        position=_count(position) if position is not None else None,
        sign=sign,
        pad_char=pad,
        left_align=align is not None,
        width=_count(width) if width is not None else None,
        # "." on its own is a precision of zero
        precision=_count(precision) if precision is not None else None,
    )


def tokenize(template: str) -> List[SpecifierToken]:
    """Return every specifier in ``template``, left to right, non-overlapping."""

    tokens: List[SpecifierToken] = []
    pos = template.find("%")
    while pos != -1:
        found = _match(template, pos + 1)
        if found is None:
            pos = template.find("%", pos + 1)
            continue
        fields, end = found
        tokens.append(_build(pos, end, fields))
        pos = template.find("%", end)
    return tokens


__all__ = ["FIELD_CEILING", "SpecifierToken", "tokenize"]
