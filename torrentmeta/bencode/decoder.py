"""
Recursive-descent bencode decoder.

Decoded values are plain Python objects:
    bytes           for byte strings
    int             for integers (signed 64-bit range only)
    list            for lists
    dict[str, *]    for dictionaries (keys must be UTF-8)

Usage:
    from torrentmeta.bencode.decoder import Decoder, decode_strict
    value = Decoder(b"d1:a1:be").decode()   # raises DecodeError
    value = decode_strict(b"d1:a1:be")      # None on malformed input
"""

import logging
from typing import Union

from torrentmeta.bencode.errors import (
    DecodeError,
    DuplicateKeyError,
    GrammarError,
    InvalidUtf8Error,
    NestingTooDeepError,
    NumericOverflowError,
    TrailingDataError,
    TruncatedInputError,
)
from torrentmeta.bencode.numeric import parse_signed, parse_unsigned

logger = logging.getLogger(__name__)

Value = Union[bytes, int, list["Value"], dict[str, "Value"]]

# Lead and delimiter bytes, as ints since indexing bytes yields ints
TOKEN_INTEGER = ord("i")
TOKEN_LIST = ord("l")
TOKEN_DICT = ord("d")
TOKEN_END = ord("e")
TOKEN_STRING_SEPARATOR = ord(":")
_ZERO = ord("0")
_NINE = ord("9")

WHITESPACE = b" \t\r\n"

# Two Python frames per nesting level, so this stays well under the
# interpreter's default recursion limit.
DEFAULT_MAX_DEPTH = 256


class Decoder:
    __slots__ = (
        "_data",
        "_index",
        "_depth",
        "_root_spans",
        "max_depth",
        "reject_duplicate_keys",
    )

    def __init__(
        self,
        data: bytes,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        reject_duplicate_keys: bool = False,
    ):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError("Decoder expects bytes, bytearray or memoryview")
        if max_depth < 0:
            raise ValueError("max_depth must not be negative")
        # own a copy so no decoded value aliases the caller's buffer
        self._data = bytes(data)
        self._index = 0
        self._depth = 0
        self._root_spans = {}
        self.max_depth = max_depth
        self.reject_duplicate_keys = reject_duplicate_keys

    def decode(self, strict: bool = True) -> Value:
        """
        Decode one value from the start of the buffer.

        In strict mode the value must span the whole buffer; otherwise any
        bytes after the first complete value are ignored.
        """
        value, consumed = self.decode_one()
        if strict and consumed != len(self._data):
            raise TrailingDataError(
                f"{len(self._data) - consumed} unconsumed bytes after value", consumed
            )
        return value

    def decode_one(self) -> tuple[Value, int]:
        """Decode one value and return it with the number of bytes it spans."""
        self._index = 0
        self._depth = 0
        self._root_spans = {}
        try:
            value = self._decode_value()
        except RecursionError as e:
            raise NestingTooDeepError(
                "nesting exceeds the interpreter recursion limit", self._index
            ) from e
        return value, self._index

    def raw_value(self, key: str) -> bytes | None:
        """
        Source bytes of the value stored under ``key`` in the top-level dictionary.

        Only available after a successful decode of a dictionary. A repeated
        key maps to the span of its last occurrence.
        """
        span = self._root_spans.get(key)
        if span is None:
            return None
        start, end = span
        return self._data[start:end]

    # ---------- core dispatch ----------

    def _decode_value(self) -> Value:
        if self._index >= len(self._data):
            raise TruncatedInputError("unexpected end of input", self._index)

        lead = self._data[self._index]
        if _ZERO <= lead <= _NINE:
            return self._decode_bytestring()
        elif lead == TOKEN_INTEGER:
            return self._decode_integer()
        elif lead == TOKEN_LIST:
            return self._decode_list()
        elif lead == TOKEN_DICT:
            return self._decode_dict()
        else:
            raise GrammarError(f"invalid lead byte {bytes([lead])!r}", self._index)

    # ---------- bytestring: <len>:<data> ----------

    def _decode_bytestring(self) -> bytes:
        start = self._index
        length, consumed = parse_unsigned(self._data, start)
        if length is None:
            raise self._numeric_error(start, consumed, "byte string length")

        colon = start + consumed
        if colon >= len(self._data):
            raise TruncatedInputError("byte string length has no ':' delimiter", colon)
        if self._data[colon] != TOKEN_STRING_SEPARATOR:
            raise GrammarError(
                f"expected ':' after byte string length, got {self._data[colon:colon + 1]!r}",
                colon,
            )

        begin = colon + 1
        end = begin + length
        if end > len(self._data):
            raise TruncatedInputError(
                f"byte string declares {length} bytes but only {len(self._data) - begin} remain",
                begin,
            )
        self._index = end
        return self._data[begin:end]

    # ---------- integer: i<signed>e ----------

    def _decode_integer(self) -> int:
        start = self._index
        if len(self._data) - start < 3:
            raise TruncatedInputError("integer needs at least 3 bytes", start)

        value, consumed = parse_signed(self._data, start + 1)
        if value is None:
            raise self._numeric_error(start + 1, consumed, "integer")

        terminator = start + 1 + consumed
        if terminator >= len(self._data):
            raise TruncatedInputError("integer has no 'e' terminator", terminator)
        if self._data[terminator] != TOKEN_END:
            raise GrammarError(
                f"expected 'e' after integer, got {self._data[terminator:terminator + 1]!r}",
                terminator,
            )
        self._index = terminator + 1
        return value

    # ---------- list: l<value>*e ----------

    def _decode_list(self) -> list[Value]:
        start = self._index
        self._enter(start)
        self._index += 1  # skip 'l'

        result = []
        while True:
            if self._index >= len(self._data):
                raise TruncatedInputError("list has no 'e' terminator", start)
            if self._data[self._index] == TOKEN_END:
                self._index += 1
                break
            result.append(self._decode_value())

        self._depth -= 1
        return result

    # ---------- dict: d(<bytestring><value>)*e ----------

    def _decode_dict(self) -> dict[str, Value]:
        start = self._index
        self._enter(start)
        self._index += 1  # skip 'd'

        result = {}
        while True:
            if self._index >= len(self._data):
                raise TruncatedInputError("dictionary has no 'e' terminator", start)
            lead = self._data[self._index]
            if lead == TOKEN_END:
                self._index += 1
                break
            if not _ZERO <= lead <= _NINE:
                raise GrammarError("dictionary key must be a byte string", self._index)

            key_start = self._index
            raw_key = self._decode_bytestring()
            try:
                key = raw_key.decode("utf-8")
            except UnicodeDecodeError as e:
                raise InvalidUtf8Error("dictionary key is not valid UTF-8", key_start) from e

            if self._index >= len(self._data):
                raise TruncatedInputError(f"dictionary key {key!r} has no value", self._index)
            if self.reject_duplicate_keys and key in result:
                raise DuplicateKeyError(f"duplicate dictionary key {key!r}", key_start)
            value_start = self._index
            result[key] = self._decode_value()
            if self._depth == 1:
                self._root_spans[key] = (value_start, self._index)

        self._depth -= 1
        return result

    # ---------- helpers ----------

    def _enter(self, position: int):
        self._depth += 1
        if self._depth > self.max_depth:
            raise NestingTooDeepError(
                f"nesting deeper than {self.max_depth} levels", position
            )

    def _numeric_error(self, start: int, consumed: int, what: str) -> DecodeError:
        # a failed parse that still consumed real digits ran out of range
        digits = self._data[start:start + consumed].lstrip(b"-")
        if digits and digits != b"0":
            return NumericOverflowError(f"{what} does not fit in 64 bits", start)
        return GrammarError(f"malformed {what}", start)


def strip_whitespace(data: bytes) -> bytes:
    """
    Remove every space, tab, CR and LF byte from ``data``.

    This knows nothing about the grammar: whitespace inside byte string
    payloads is removed too, which corrupts binary data such as piece
    hashes and shifts declared lengths. Only use it for hand-formatted
    documents, never for real .torrent files.
    """
    return bytes(data).translate(None, WHITESPACE)


def _decode_or_none(
    data: bytes, strict: bool, max_depth: int, reject_duplicate_keys: bool
) -> Value | None:
    try:
        return Decoder(
            data, max_depth=max_depth, reject_duplicate_keys=reject_duplicate_keys
        ).decode(strict=strict)
    except DecodeError as e:
        logger.debug(f"Rejected bencoded input: {e}", extra={"position": e.position})
        return None


def decode_strict(
    data: bytes,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    reject_duplicate_keys: bool = False,
) -> Value | None:
    """Decode a buffer that must hold exactly one value; None if malformed."""
    return _decode_or_none(data, True, max_depth, reject_duplicate_keys)


def decode_prefix(
    data: bytes,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    reject_duplicate_keys: bool = False,
) -> Value | None:
    """Decode the first value in a buffer, ignoring whatever follows it."""
    return _decode_or_none(data, False, max_depth, reject_duplicate_keys)


def decode_strict_after_whitespace_strip(
    data: bytes,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    reject_duplicate_keys: bool = False,
) -> Value | None:
    return decode_strict(
        strip_whitespace(data),
        max_depth=max_depth,
        reject_duplicate_keys=reject_duplicate_keys,
    )


def decode_prefix_after_whitespace_strip(
    data: bytes,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    reject_duplicate_keys: bool = False,
) -> Value | None:
    return decode_prefix(
        strip_whitespace(data),
        max_depth=max_depth,
        reject_duplicate_keys=reject_duplicate_keys,
    )
