"""Small string helpers used by the shell: number parsing, splitting, trimming."""

from __future__ import annotations

_WHITESPACE = " \t\n\v\f\r"
_DIGITS = "0123456789"
_INT_BITS = 32


def _wrap_int(value: int) -> int:
    """Wrap an integer to a signed 32-bit value."""
    mask = (1 << _INT_BITS) - 1
    value &= mask
    if value >= 1 << (_INT_BITS - 1):
        value -= 1 << _INT_BITS
    return value


def atoi(text: str) -> int:
    """Parse a leading decimal integer, ignoring leading whitespace.

    Parsing stops at the first non-digit; a string without digits gives 0.
    The result wraps around like a signed 32-bit integer.
    """
    rest = text.lstrip(_WHITESPACE)
    sign = 1
    if rest[:1] in ("+", "-"):
        if rest[0] == "-":
            sign = -1
        rest = rest[1:]
    number = 0
    for char in rest:
        if char not in _DIGITS:
            break
        number = number * 10 + int(char)
    return _wrap_int(sign * number)


def split(text: str, sep: str) -> list[str]:
    """Split ``text`` on ``sep``, dropping empty pieces."""
    return [piece for piece in text.split(sep) if piece]


def itoa(number: int) -> str:
    """Render an integer in decimal."""
    return str(number)


def strtrim(text: str, chars: str | None) -> str:
    """Strip every character of ``chars`` from both ends of ``text``.

    With no set of characters the text is returned unchanged.
    """
    if chars is None:
        return text
    return text.strip(chars)


def strcmp(first: str | None, second: str | None) -> int:
    """Compare two strings byte by byte.

    Returns the difference of the first differing bytes, 0 when equal,
    and -1 when either side is missing.
    """
    if first is None or second is None:
        return -1
    left = first.encode()
    right = second.encode()
    for a, b in zip(left, right):
        if a != b:
            return a - b
    if len(left) == len(right):
        return 0
    if len(left) > len(right):
        return left[len(right)]
    return -right[len(left)]


def is_numeric(text: str | None) -> bool:
    """Tell whether ``text`` is an optional sign followed only by digits."""
    if text is None:
        return False
    body = text[1:] if text[:1] in ("+", "-") else text
    return all(char in _DIGITS for char in body)