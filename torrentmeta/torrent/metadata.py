from dataclasses import dataclass
from typing import ClassVar, Union

from torrentmeta.bencode.errors import SchemaError


@dataclass(frozen=True, slots=True)
class CommonFileInfo:
    PIECE_HASH_SIZE: ClassVar[int] = 20

    piece_length: int
    pieces: tuple[bytes, ...]
    private: bool = False

    @classmethod
    def from_pieces(
        cls, piece_length: int, pieces_raw: bytes, private: bool = False
    ) -> "CommonFileInfo":
        """Split the concatenated SHA-1 digests of ``pieces`` into 20-byte hashes."""
        size = cls.PIECE_HASH_SIZE
        if len(pieces_raw) % size != 0:
            raise SchemaError(
                "pieces",
                f"pieces length {len(pieces_raw)} is not a multiple of {size}",
            )
        pieces = tuple(pieces_raw[i : i + size] for i in range(0, len(pieces_raw), size))
        return cls(piece_length, pieces, private)

    @property
    def piece_count(self) -> int:
        return len(self.pieces)


@dataclass(frozen=True, slots=True)
class SingleFileInfo:
    common: CommonFileInfo
    name: str
    length: int
    md5sum: str | None = None

    @property
    def total_length(self) -> int:
        return self.length


@dataclass(frozen=True, slots=True)
class MultipleFileInfoFile:
    length: int
    path: tuple[str, ...]  # root-to-leaf segments
    md5sum: str | None = None


@dataclass(frozen=True, slots=True)
class MultipleFileInfo:
    common: CommonFileInfo
    name: str  # directory name
    files: tuple[MultipleFileInfoFile, ...]

    @property
    def total_length(self) -> int:
        return sum(f.length for f in self.files)


FileInfo = Union[SingleFileInfo, MultipleFileInfo]


@dataclass(frozen=True, slots=True)
class MetaInfo:
    info: FileInfo
    announce: str
    announce_list: tuple[tuple[str, ...], ...] | None = None
    creation_date: int | None = None
    comment: str | None = None
    created_by: str | None = None
    encoding: str | None = None
    info_hash: bytes | None = None

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def total_length(self) -> int:
        return self.info.total_length

    @property
    def is_private(self) -> bool:
        return self.info.common.private

    @property
    def trackers(self) -> list[str]:
        """Every tracker URL, announce first, then the tiers in order."""
        urls = [self.announce]
        for tier in self.announce_list or ():
            urls.extend(tier)
        return list(dict.fromkeys(urls))
