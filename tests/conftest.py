import logging

import bencodepy
import pytest

from torrentmeta.common.logging import stop_listener

PIECE_A = b"a" * 20
PIECE_B = b"b" * 20


@pytest.fixture
def single_file_dict() -> dict:
    return {
        b"announce": b"http://tracker.example.org/announce",
        b"comment": b"test torrent",
        b"created by": b"mktorrent 1.1",
        b"creation date": 1700000000,
        b"info": {
            b"name": b"ubuntu.iso",
            b"length": 123456,
            b"piece length": 32768,
            b"pieces": PIECE_A + PIECE_B,
        },
    }


@pytest.fixture
def multi_file_dict() -> dict:
    return {
        b"announce": b"udp://tracker.example.org:1337",
        b"announce-list": [
            [b"udp://tracker.example.org:1337", b"http://backup.example.org/announce"],
            [b"http://tier2.example.org/announce"],
        ],
        b"info": {
            b"name": b"album",
            b"piece length": 16384,
            b"pieces": PIECE_A,
            b"private": 1,
            b"files": [
                {b"length": 100, b"path": [b"disc1", b"01.flac"], b"md5sum": b"0" * 32},
                {b"length": 250, b"path": [b"cover.jpg"]},
            ],
        },
    }


@pytest.fixture
def encode():
    return bencodepy.encode


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            listener = getattr(handler, "listener", None)
            if listener is not None:
                stop_listener(listener)
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
