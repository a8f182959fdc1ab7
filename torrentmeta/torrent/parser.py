import hashlib
import logging
from pathlib import Path
from typing import Callable, TypeVar

import bencodepy

from torrentmeta.bencode.accessors import (
    as_bytes,
    as_dict,
    as_int,
    as_list,
    as_list_of,
    as_str,
    as_str_list,
    as_unsigned,
)
from torrentmeta.bencode.decoder import DEFAULT_MAX_DEPTH, Decoder, Value, strip_whitespace
from torrentmeta.bencode.errors import DecodeError, SchemaError
from torrentmeta.torrent.metadata import (
    CommonFileInfo,
    FileInfo,
    MetaInfo,
    MultipleFileInfo,
    MultipleFileInfoFile,
    SingleFileInfo,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _require(value: Value | None, field: str, projection: Callable[[Value], T | None]) -> T:
    projected = projection(value)
    if projected is None:
        raise SchemaError(field)
    return projected


def compute_info_hash(info: dict[str, Value]) -> bytes:
    """SHA-1 of the canonical bencoding of the info dictionary."""
    return hashlib.sha1(bencodepy.encode(_to_bencodepy(info))).digest()


def _to_bencodepy(value: Value) -> Value:
    # bencodepy wants byte keys to sort them the way the format requires
    if isinstance(value, dict):
        return {key.encode("utf-8"): _to_bencodepy(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_to_bencodepy(item) for item in value]
    return value


def _common_file_info(info: dict[str, Value]) -> CommonFileInfo:
    piece_length = _require(info.get("piece length"), "piece length", as_unsigned)
    if piece_length == 0:
        raise SchemaError("piece length", "piece length must be positive")
    pieces_raw = _require(info.get("pieces"), "pieces", as_bytes)
    private = as_int(info.get("private")) == 1
    return CommonFileInfo.from_pieces(piece_length, pieces_raw, private)


def _single_file_info(common: CommonFileInfo, info: dict[str, Value]) -> SingleFileInfo:
    return SingleFileInfo(
        common=common,
        name=_require(info.get("name"), "name", as_str),
        length=_require(info.get("length"), "length", as_unsigned),
        md5sum=as_str(info.get("md5sum")),
    )


def _multiple_file_info_file(entry: Value, index: int) -> MultipleFileInfoFile:
    field = f"files[{index}]"
    file_dict = _require(entry, field, as_dict)
    return MultipleFileInfoFile(
        length=_require(file_dict.get("length"), f"{field}.length", as_unsigned),
        path=tuple(_require(file_dict.get("path"), f"{field}.path", as_str_list)),
        md5sum=as_str(file_dict.get("md5sum")),
    )


def _multiple_file_info(
    common: CommonFileInfo, info: dict[str, Value], files: list[Value]
) -> MultipleFileInfo:
    name = _require(info.get("name"), "name", as_str)
    return MultipleFileInfo(
        common=common,
        name=name,
        files=tuple(_multiple_file_info_file(entry, i) for i, entry in enumerate(files)),
    )


def _announce_list(root: dict[str, Value]) -> tuple[tuple[str, ...], ...] | None:
    if "announce-list" not in root:
        return None
    tiers = as_list_of(root["announce-list"], as_str_list)
    if tiers is None:
        # one bad tier or URL drops the whole optional field, not the document
        logger.debug("Ignoring malformed announce-list")
        return None
    return tuple(tuple(tier) for tier in tiers)


def build_metainfo(value: Value, raw_info: bytes | None = None) -> MetaInfo:
    """
    Build a MetaInfo from a decoded document.

    ``raw_info`` is the source encoding of the info dictionary. When given,
    the info hash is taken over it; otherwise over the canonical re-encoding,
    which differs for documents with unsorted info keys.

    Raises SchemaError naming the first required field that is missing or
    has the wrong shape. Optional fields with the wrong shape are left as
    None and unknown keys are ignored.
    """
    root = _require(value, "<root>", as_dict)
    announce = _require(root.get("announce"), "announce", as_str)
    info = _require(root.get("info"), "info", as_dict)

    common = _common_file_info(info)
    file_info: FileInfo
    if "files" in info:
        files = _require(info["files"], "files", as_list)
        file_info = _multiple_file_info(common, info, files)
        logger.info(
            f"Parsed multi-file torrent: {file_info.name} "
            f"({len(file_info.files)} files, {file_info.total_length} bytes)"
        )
    else:
        file_info = _single_file_info(common, info)
        logger.info(
            f"Parsed single-file torrent: {file_info.name} ({file_info.total_length} bytes)"
        )

    return MetaInfo(
        info=file_info,
        announce=announce,
        announce_list=_announce_list(root),
        creation_date=as_unsigned(root.get("creation date")),
        comment=as_str(root.get("comment")),
        created_by=as_str(root.get("created by")),
        encoding=as_str(root.get("encoding")),
        info_hash=(
            hashlib.sha1(raw_info).digest() if raw_info is not None else compute_info_hash(info)
        ),
    )


def metainfo_from_value(value: Value) -> MetaInfo | None:
    try:
        return build_metainfo(value)
    except SchemaError as e:
        logger.debug(f"Invalid torrent document: {e}")
        return None


def read_metainfo(
    data: bytes,
    *,
    strict: bool = True,
    strip: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
    reject_duplicate_keys: bool = False,
) -> MetaInfo:
    """
    Decode and validate a torrent document, raising DecodeError on failure.

    ``strip`` removes whitespace before decoding. It also removes the space
    in the required ``piece length`` key, so a real torrent never survives
    it; see ``strip_whitespace``.
    """
    if strip:
        data = strip_whitespace(data)
    decoder = Decoder(data, max_depth=max_depth, reject_duplicate_keys=reject_duplicate_keys)
    value = decoder.decode(strict=strict)
    return build_metainfo(value, decoder.raw_value("info"))


def parse_metainfo(data: bytes) -> MetaInfo | None:
    """Strictly decode and validate a torrent document; None if it is invalid."""
    try:
        return read_metainfo(data)
    except DecodeError as e:
        logger.debug(f"Invalid torrent document: {e}")
        return None


def parse_torrent_file(path: Path, **options) -> MetaInfo:
    logger.info(f"Parsing torrent file: {path}")

    with path.open("rb") as f:
        data = f.read()

    return read_metainfo(data, **options)
