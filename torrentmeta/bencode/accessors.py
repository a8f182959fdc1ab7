"""
Typed projections over decoded bencode values.

Every projection accepts ``None`` and returns ``None`` when the value does
not have the requested shape, so a missing key and a wrongly typed value
are handled the same way:

    announce = as_str(root.get("announce"))  # None if absent or not UTF-8
"""

from typing import Callable, TypeVar

from torrentmeta.bencode.decoder import Value

T = TypeVar("T")

_U64_MASK = 2**64 - 1


def as_bytes(value: Value | None) -> bytes | None:
    return value if isinstance(value, bytes) else None


def as_str(value: Value | None) -> str | None:
    """Project a byte string holding valid UTF-8 onto ``str``."""
    if not isinstance(value, bytes):
        return None
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return None


def as_int(value: Value | None) -> int | None:
    # bool is an int subclass but never a decoded value
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def as_unsigned(value: Value | None) -> int | None:
    """
    Reinterpret an integer's 64-bit two's-complement pattern as unsigned.

    ``-1`` becomes ``2**64 - 1``; only use this for fields that are never
    legitimately negative.
    """
    number = as_int(value)
    if number is None:
        return None
    return number & _U64_MASK


def as_list(value: Value | None) -> list[Value] | None:
    return value if isinstance(value, list) else None


def as_list_of(value: Value | None, projection: Callable[[Value], T | None]) -> list[T] | None:
    """Project every element of a list; None if the value or any element fails."""
    items = as_list(value)
    if items is None:
        return None
    result = []
    for item in items:
        projected = projection(item)
        if projected is None:
            return None
        result.append(projected)
    return result


def as_str_list(value: Value | None) -> list[str] | None:
    return as_list_of(value, as_str)


def as_dict(value: Value | None) -> dict[str, Value] | None:
    return value if isinstance(value, dict) else None
