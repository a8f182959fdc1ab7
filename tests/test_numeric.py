import pytest

from torrentmeta.bencode.numeric import I64_MAX, I64_MIN, U64_MAX, parse_signed, parse_unsigned


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"1234", (1234, 4)),
        (b"0", (0, 1)),
        (b"", (None, 0)),
        (b"-1", (None, 0)),
        (b"+1234", (None, 0)),
        (b"1234+1234", (1234, 4)),
        (b"1234abcd", (1234, 4)),
        (b"01", (0, 1)),
        (b"000abcd", (0, 1)),
        (b"0abcd", (0, 1)),
        (b"abc", (None, 0)),
        (str(U64_MAX).encode(), (U64_MAX, 20)),
        (str(U64_MAX + 1).encode(), (None, 20)),
    ],
)
def test_parse_unsigned(data, expected):
    assert parse_unsigned(data) == expected


def test_parse_unsigned_reports_overflowing_digit_position():
    # the 21st digit is where the value leaves the 64-bit range
    data = str(U64_MAX).encode() + b"0"
    assert parse_unsigned(data) == (None, 21)


def test_parse_unsigned_from_offset():
    assert parse_unsigned(b"i42e", 1) == (42, 2)
    assert parse_unsigned(b"i42e", 4) == (None, 0)


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"1234", (1234, 4)),
        (b"0", (0, 1)),
        (b"", (None, 0)),
        (b"-1234", (-1234, 5)),
        (b"1234-56", (1234, 4)),
        (b"+1234", (None, 0)),
        (b"-1234+1234", (-1234, 5)),
        (b"-0", (None, 2)),
        (b"-", (None, 1)),
        (b"-+", (None, 1)),
        (b"--+1234", (None, 1)),
        (str(I64_MAX).encode(), (I64_MAX, 19)),
        (str(I64_MAX + 1).encode(), (None, 19)),
        (str(I64_MIN).encode(), (I64_MIN, 20)),
        (str(I64_MIN - 1).encode(), (None, 20)),
    ],
)
def test_parse_signed(data, expected):
    assert parse_signed(data) == expected


def test_parse_signed_never_consumes_second_leading_zero():
    assert parse_signed(b"-01") == (None, 2)
    assert parse_signed(b"00") == (0, 1)
