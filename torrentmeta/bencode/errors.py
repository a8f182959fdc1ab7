class DecodeError(ValueError):
    """Raised when bencoded input or a torrent document is rejected."""

    def __init__(self, message: str, position: int | None = None):
        if position is not None:
            message = f"{message} (at byte {position})"
        super().__init__(message)
        self.position = position


class GrammarError(DecodeError):
    """Wrong lead byte, missing delimiter or terminator, malformed number."""


class TruncatedInputError(DecodeError):
    """The input ended before the production it started was complete."""


class NumericOverflowError(DecodeError):
    """An integer or length does not fit the 64-bit range."""


class InvalidUtf8Error(DecodeError):
    """A dictionary key is not valid UTF-8."""


class NestingTooDeepError(DecodeError):
    """Lists and dictionaries are nested deeper than the decoder allows."""


class TrailingDataError(DecodeError):
    """Strict decoding finished before the end of the input."""


class DuplicateKeyError(GrammarError):
    """A dictionary repeats a key and duplicates are rejected."""


class SchemaError(DecodeError):
    """The decoded tree is not a valid torrent metainfo document."""

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"missing or malformed field {field!r}")
        self.field = field
