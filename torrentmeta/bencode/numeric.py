"""
Strict ASCII integer parsers used by the bencode decoder.

Both parsers return a ``(value, consumed)`` pair. ``value`` is ``None`` when
the input is rejected; ``consumed`` is still meaningful on failure and points
at how far the digit run got, which the decoder uses for error positions.
"""

U64_MAX = 2**64 - 1
I64_MAX = 2**63 - 1
I64_MIN = -(2**63)

_ZERO = ord("0")
_NINE = ord("9")
_MINUS = ord("-")


def parse_unsigned(data: bytes, start: int = 0) -> tuple[int | None, int]:
    """
    Parse an unsigned 64-bit integer from ``data[start:]``.

    A leading ``0`` followed by anything is read as the single digit zero,
    so ``b"0123"`` yields ``(0, 1)``. Sign characters are never consumed.

    Examples:
        parse_unsigned(b"1234abcd") -> (1234, 4)
        parse_unsigned(b"+1234") -> (None, 0)
        parse_unsigned(b"18446744073709551616") -> (None, 20)
    """
    remaining = len(data) - start
    if remaining <= 0:
        return None, 0
    if remaining >= 2 and data[start] == _ZERO:
        return 0, 1

    value = 0
    consumed = 0
    end = len(data)
    pos = start
    while pos < end:
        byte = data[pos]
        if not _ZERO <= byte <= _NINE:
            break
        consumed += 1
        pos += 1
        value = value * 10 + (byte - _ZERO)
        if value > U64_MAX:
            return None, consumed

    if consumed == 0:
        return None, 0
    return value, consumed


def parse_signed(data: bytes, start: int = 0) -> tuple[int | None, int]:
    """
    Parse a signed 64-bit integer from ``data[start:]``.

    Only ``-`` is accepted as a sign. ``-0`` is rejected and so is anything
    outside ``[I64_MIN, I64_MAX]``.
    """
    if len(data) - start <= 0:
        return None, 0

    negative = data[start] == _MINUS
    offset = 1 if negative else 0
    magnitude, consumed = parse_unsigned(data, start + offset)
    consumed += offset
    if magnitude is None:
        return None, consumed

    if not negative:
        if magnitude > I64_MAX:
            return None, consumed
        return magnitude, consumed

    # -I64_MIN has no positive counterpart in 64 bits
    if magnitude == -I64_MIN:
        return I64_MIN, consumed
    if magnitude == 0 or magnitude > -I64_MIN:
        return None, consumed
    return -magnitude, consumed
