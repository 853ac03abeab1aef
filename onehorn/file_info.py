"""Records describing files stored inside a package, and the version enums."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import BinaryIO, ClassVar

from .errors import PackageReadError, PackageReadErrorKind


class CompressionMethod(Enum):
    """How a packaged file is compressed."""

    NONE = 0
    ZLIB = 1
    LZ4 = 2
    INVALID = -1


class PackageVersion(IntEnum):
    """Known package format versions."""

    DIVINITY_ORIGINAL_SIN = 7
    DIVINITY_ORIGINAL_SIN_ENHANCED_EDITION = 9
    DIVINITY_ORIGINAL_SIN_2 = 10
    DIVINITY_ORIGINAL_SIN_2_DEFINITIVE_EDITION = 13
    BALDURS_GATE_3_EARLY_ACCESS = 15
    BALDURS_GATE_3_EARLY_ACCESS_PATCH_4 = 16
    BALDURS_GATE_3 = 18


def compression_method_from_flags(flags: int) -> CompressionMethod:
    """Decode the compression method held in the low four bits of ``flags``."""
    method = flags & 0xF
    try:
        return CompressionMethod(method)
    except ValueError:
        return CompressionMethod.INVALID


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise PackageReadError(PackageReadErrorKind.FILE_INFO_OVERRAN_END_OF_FILE)
    return data


def _read_name(stream: BinaryIO) -> str:
    raw = _read_exact(stream, 256)
    end = raw.find(b"\0")
    if end < 0:
        raise PackageReadError(PackageReadErrorKind.FILE_NAME_NOT_NULL_TERMINATED)
    return raw[:end].decode("utf-8", errors="replace")


@dataclass(frozen=True)
class FileInfoV18:
    """File list entry of version 18 packages."""

    name: str
    offset_in_file: int
    archive_part: int
    flags: int
    size_on_disk: int
    uncompressed_size: int

    SIZE: ClassVar[int] = 256 + 4 + 2 + 1 + 1 + 4 + 4
    _FIELDS: ClassVar[struct.Struct] = struct.Struct("<IHBBII")

    @classmethod
    def read(cls, stream: BinaryIO) -> FileInfoV18:
        name = _read_name(stream)
        lower, higher, archive_part, flags, size_on_disk, uncompressed_size = (
            cls._FIELDS.unpack(_read_exact(stream, cls._FIELDS.size))
        )
        return cls(
            name=name,
            offset_in_file=lower | (higher << 32),
            archive_part=archive_part,
            flags=flags,
            size_on_disk=size_on_disk,
            uncompressed_size=uncompressed_size,
        )


@dataclass(frozen=True)
class FileInfoV15:
    """File list entry of version 15 and 16 packages."""

    name: str
    offset_in_file: int
    size_on_disk: int
    uncompressed_size: int
    archive_part: int
    flags: int
    crc: int
    unknown2: int

    SIZE: ClassVar[int] = 256 + 8 + 8 + 8 + 4 + 4 + 4 + 4
    _FIELDS: ClassVar[struct.Struct] = struct.Struct("<QQQIIII")

    @classmethod
    def read(cls, stream: BinaryIO) -> FileInfoV15:
        name = _read_name(stream)
        (
            offset_in_file,
            size_on_disk,
            uncompressed_size,
            archive_part,
            flags,
            crc,
            unknown2,
        ) = cls._FIELDS.unpack(_read_exact(stream, cls._FIELDS.size))
        return cls(
            name=name,
            offset_in_file=offset_in_file,
            size_on_disk=size_on_disk,
            uncompressed_size=uncompressed_size,
            archive_part=archive_part,
            flags=flags,
            crc=crc,
            unknown2=unknown2,
        )


@dataclass(frozen=True)
class PackagedFileInfo:
    """Version independent description of a file stored in a package."""

    name: str
    archive_part: int
    crc: int
    flags: int
    offset_in_file: int
    size_on_disk: int
    uncompressed_size: int
    solid: bool = False
    solid_offset: int = 0

    def compression_method(self) -> CompressionMethod:
        return compression_method_from_flags(self.flags)

    @classmethod
    def from_v18(cls, info: FileInfoV18) -> PackagedFileInfo:
        return cls(
            name=info.name,
            archive_part=0,
            crc=0,
            flags=info.flags,
            offset_in_file=info.offset_in_file,
            size_on_disk=info.size_on_disk,
            uncompressed_size=info.uncompressed_size,
        )

    @classmethod
    def from_v15(cls, info: FileInfoV15) -> PackagedFileInfo:
        return cls(
            name=info.name,
            archive_part=info.archive_part,
            crc=info.crc,
            flags=info.flags,
            offset_in_file=info.offset_in_file,
            size_on_disk=info.size_on_disk,
            uncompressed_size=info.uncompressed_size,
        )