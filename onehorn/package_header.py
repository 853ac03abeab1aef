"""Headers of the package versions that can be read."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, ClassVar

from .errors import PackageReadError, PackageReadErrorKind

_COMMON = struct.Struct("<IQIBB")
_MD5_SIZE = 16
_NUM_PARTS = struct.Struct("<H")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise PackageReadError(PackageReadErrorKind.PACKAGE_HEADER_OVERRAN_END_OF_FILE)
    return data


@dataclass(frozen=True)
class PackageHeaderV15:
    """Header of version 15 packages."""

    version: int
    file_list_offset: int
    file_list_size: int
    flags: int
    priority: int
    md5: bytes

    SIZE: ClassVar[int] = _COMMON.size + _MD5_SIZE

    @classmethod
    def read(cls, stream: BinaryIO) -> PackageHeaderV15:
        version, offset, size, flags, priority = _COMMON.unpack(
            _read_exact(stream, _COMMON.size)
        )
        md5 = _read_exact(stream, _MD5_SIZE)
        return cls(version, offset, size, flags, priority, md5)


@dataclass(frozen=True)
class PackageHeaderV16:
    """Header of version 16 and 18 packages, which adds the part count."""

    version: int
    file_list_offset: int
    file_list_size: int
    flags: int
    priority: int
    md5: bytes
    num_parts: int

    SIZE: ClassVar[int] = _COMMON.size + _MD5_SIZE + _NUM_PARTS.size

    @classmethod
    def read(cls, stream: BinaryIO) -> PackageHeaderV16:
        version, offset, size, flags, priority = _COMMON.unpack(
            _read_exact(stream, _COMMON.size)
        )
        md5 = _read_exact(stream, _MD5_SIZE)
        (num_parts,) = _NUM_PARTS.unpack(_read_exact(stream, _NUM_PARTS.size))
        return cls(version, offset, size, flags, priority, md5, num_parts)