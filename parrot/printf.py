"""printf-style rendering over a list of string arguments."""
from __future__ import annotations

import math
import re
from typing import Callable, Dict, List, Sequence

from .tokenizer import SpecifierToken, tokenize

_NUMERIC = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$")
_INTEGER = re.compile(r"^\s*[+-]?\d+\s*$")
_UNSIGNED_WRAP = 1 << 64


class RenderError(ValueError):
    """Raised when a template cannot be rendered against its arguments."""


def _to_float(value: str) -> float:
    if not _NUMERIC.match(value):
        raise RenderError(f"{value!r} is not a number")
    return float(value)


def _to_int(value: str) -> int:
    if _INTEGER.match(value):
        try:
            return int(value)
        except ValueError as exc:
            raise RenderError(f"{value[:20]!r}... has too many digits") from exc
    number = _to_float(value)
    if not math.isfinite(number):
        raise RenderError(f"{value!r} is out of range")
    return int(number)


def _unsigned(value: str) -> int:
    number = _to_int(value)
    return number + _UNSIGNED_WRAP if number < 0 else number


def _signed(text: str, token: SpecifierToken) -> str:
    if token.sign == "+" and not text.startswith("-"):
        return "+" + text
    return text


def _string(value: str, token: SpecifierToken) -> str:
    if token.precision is not None:
        return value[: token.precision]
    return value


def _decimal(value: str, token: SpecifierToken) -> str:
    return _signed(str(_to_int(value)), token)


def _char(value: str, token: SpecifierToken) -> str:
    try:
        return chr(_to_int(value))
    except (ValueError, OverflowError) as exc:
        raise RenderError(f"{value!r} is not a valid code point") from exc


def _base(spec: str) -> Callable[[str, SpecifierToken], str]:
    def convert(value: str, token: SpecifierToken) -> str:
        return format(_unsigned(value), spec)

    return convert


def _floating(spec: str) -> Callable[[str, SpecifierToken], str]:
    def convert(value: str, token: SpecifierToken) -> str:
        precision = 6 if token.precision is None else token.precision
        if spec in "gG":
            precision = max(precision, 1)
        return _signed(format(_to_float(value), f".{precision}{spec}"), token)

    return convert


_CONVERSIONS: Dict[str, Callable[[str, SpecifierToken], str]] = {
    "s": _string,
    "d": _decimal,
    "u": lambda value, token: str(_unsigned(value)),
    "c": _char,
    "b": _base("b"),
    "o": _base("o"),
    "x": _base("x"),
    "X": _base("X"),
    "e": _floating("e"),
    "E": _floating("E"),
    "f": _floating("f"),
    "F": _floating("F"),
    "g": _floating("g"),
    "G": _floating("G"),
}

_NUMERIC_TYPES = frozenset("duboxXeEfFgG")


def _pad(text: str, token: SpecifierToken) -> str:
    width = token.width or 0
    if len(text) >= width:
        return text
    gap = width - len(text)
    fill = token.pad_char or " "
    if token.left_align or token.sign == "-":
        if fill == "0":
            fill = " "
        return text + fill * gap
    if fill == "0" and token.type_char in _NUMERIC_TYPES and text[:1] in ("+", "-"):
        return text[0] + fill * gap + text[1:]
    return fill * gap + text


def _convert(token: SpecifierToken, value: str) -> str:
    conversion = _CONVERSIONS.get(token.type_char)
    if conversion is None:
        raise RenderError(f"Unknown format specifier {token.type_char!r}")
    text = conversion(value, token)
    if token.type_char == "c":
        return text
    return _pad(text, token)


def render(template: str, args: Sequence[str]) -> str:
    """Substitute ``args`` into ``template`` using printf semantics.

    Explicit ``n$`` positions do not move the implicit argument cursor. A
    ``%`` that starts no specifier is copied through as-is.
    """

    pieces: List[str] = []
    cursor = 0
    next_arg = 0
    for token in tokenize(template):
        pieces.append(template[cursor:token.offset])
        cursor = token.end
        if token.type_char == "%":
            if token.has_modifiers:
                raise RenderError("Modifiers are not allowed on a literal percent")
            pieces.append("%")
            continue
        if token.position is not None:
            if token.position < 1:
                raise RenderError("Argument number must be greater than zero")
            index = token.position - 1
        else:
            index = next_arg
            next_arg += 1
        if index >= len(args):
            raise RenderError(f"Missing argument {index + 1}")
        pieces.append(_convert(token, args[index]))
    pieces.append(template[cursor:])
    return "".join(pieces)


__all__ = ["RenderError", "render"]
