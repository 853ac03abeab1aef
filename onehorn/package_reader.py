"""Reading the header and file list of a package file."""

from __future__ import annotations

import io
import os
from os import PathLike
from pathlib import Path
from typing import BinaryIO, Callable

import lz4.block

from .errors import PackageReadError, PackageReadErrorKind
from .file_info import FileInfoV15, FileInfoV18, PackagedFileInfo, PackageVersion
from .package import Package
from .package_header import PackageHeaderV15, PackageHeaderV16

SIGNATURE = 0x4B50534C

_HEADER_OVERRAN = PackageReadErrorKind.PACKAGE_HEADER_OVERRAN_END_OF_FILE
_FILE_LIST_OVERRAN = PackageReadErrorKind.FILE_LIST_OVERRAN_END_OF_FILE


def _read_u32(stream: BinaryIO, kind: PackageReadErrorKind) -> int:
    data = stream.read(4)
    if len(data) != 4:
        raise PackageReadError(kind)
    return int.from_bytes(data, "little")


def _seek(stream: BinaryIO, offset: int, whence: int, kind: PackageReadErrorKind) -> None:
    try:
        stream.seek(offset, whence)
    except (OSError, ValueError, OverflowError):
        raise PackageReadError(kind) from None


def make_part_filename(package_path: str | PathLike, part: int) -> Path:
    """Path of part ``part`` of a multi-part package: ``name_<part>.ext``."""
    path = Path(package_path)
    if not path.stem or not path.suffix:
        raise PackageReadError(PackageReadErrorKind.COULD_NOT_READ_FILE)
    return path.with_name(f"{path.stem}_{part}{path.suffix}")


def part_paths(package_path: str | PathLike, part_count: int) -> list[Path]:
    """Paths of every part of a package, the package itself first."""
    path = Path(package_path)
    return [path] + [make_part_filename(path, part) for part in range(1, part_count)]


def _read_file_list(
    stream: BinaryIO,
    entry_type: type[FileInfoV15] | type[FileInfoV18],
    convert: Callable[..., PackagedFileInfo],
) -> list[PackagedFileInfo]:
    count = _read_u32(stream, _FILE_LIST_OVERRAN)
    compressed_size = _read_u32(stream, _FILE_LIST_OVERRAN)
    compressed = stream.read(compressed_size)
    if len(compressed) != compressed_size:
        raise PackageReadError(_FILE_LIST_OVERRAN)

    expected_size = entry_type.SIZE * count
    if expected_size == 0:
        return []
    try:
        raw = lz4.block.decompress(compressed, uncompressed_size=expected_size)
    except (lz4.block.LZ4BlockError, ValueError, OverflowError, MemoryError):
        raise PackageReadError(
            PackageReadErrorKind.COULD_NOT_DECOMPRESS_FILE_LIST
        ) from None
    if len(raw) != expected_size:
        raise PackageReadError(PackageReadErrorKind.COULD_NOT_DECOMPRESS_FILE_LIST)

    cursor = io.BytesIO(raw)
    return [convert(entry_type.read(cursor)) for _ in range(count)]


def _read_bg3_ea_package(stream: BinaryIO, path: Path) -> Package:
    _seek(stream, 4, os.SEEK_SET, _HEADER_OVERRAN)
    header = PackageHeaderV15.read(stream)
    _seek(stream, header.file_list_offset, os.SEEK_SET, _FILE_LIST_OVERRAN)
    files = _read_file_list(stream, FileInfoV15, PackagedFileInfo.from_v15)
    return Package(
        PackageVersion.BALDURS_GATE_3_EARLY_ACCESS,
        header.priority,
        header.flags,
        files,
        part_paths(path, 1),
    )


def _read_bg3_ea_patch4_package(stream: BinaryIO, path: Path) -> Package:
    _seek(stream, 4, os.SEEK_SET, _HEADER_OVERRAN)
    header = PackageHeaderV16.read(stream)
    _seek(stream, header.file_list_offset, os.SEEK_SET, _FILE_LIST_OVERRAN)
    files = _read_file_list(stream, FileInfoV15, PackagedFileInfo.from_v15)
    return Package(
        PackageVersion.BALDURS_GATE_3_EARLY_ACCESS_PATCH_4,
        header.priority,
        header.flags,
        files,
        part_paths(path, header.num_parts),
    )


def _read_bg3_package(stream: BinaryIO, path: Path) -> Package:
    _seek(stream, 4, os.SEEK_SET, _HEADER_OVERRAN)
    header = PackageHeaderV16.read(stream)
    _seek(stream, header.file_list_offset, os.SEEK_SET, _HEADER_OVERRAN)
    files = _read_file_list(stream, FileInfoV18, PackagedFileInfo.from_v18)
    return Package(
        PackageVersion.BALDURS_GATE_3,
        header.priority,
        header.flags,
        files,
        part_paths(path, header.num_parts),
    )


_UNSUPPORTED = {
    PackageVersion.DIVINITY_ORIGINAL_SIN: PackageReadErrorKind.UNSUPPORTED_VERSION_DOS,
    PackageVersion.DIVINITY_ORIGINAL_SIN_ENHANCED_EDITION: PackageReadErrorKind.UNSUPPORTED_VERSION_DOSEE,
    PackageVersion.DIVINITY_ORIGINAL_SIN_2: PackageReadErrorKind.UNSUPPORTED_VERSION_DOS2,
    PackageVersion.DIVINITY_ORIGINAL_SIN_2_DEFINITIVE_EDITION: PackageReadErrorKind.UNSUPPORTED_VERSION_DOS2DE,
}

_READERS = {
    PackageVersion.BALDURS_GATE_3_EARLY_ACCESS: _read_bg3_ea_package,
    PackageVersion.BALDURS_GATE_3_EARLY_ACCESS_PATCH_4: _read_bg3_ea_patch4_package,
    PackageVersion.BALDURS_GATE_3: _read_bg3_package,
}


def _read(stream: BinaryIO, path: Path) -> Package:
    # Definitive Edition packages keep their signature at the end of the file.
    _seek(stream, -8, os.SEEK_END, _HEADER_OVERRAN)
    header_size = _read_u32(stream, _HEADER_OVERRAN)
    signature = _read_u32(stream, _HEADER_OVERRAN)
    if signature == SIGNATURE:
        _seek(stream, -header_size, os.SEEK_END, _HEADER_OVERRAN)
        raise PackageReadError(PackageReadErrorKind.UNSUPPORTED_VERSION_DOS2DE)

    _seek(stream, 0, os.SEEK_SET, _HEADER_OVERRAN)
    signature = _read_u32(stream, _HEADER_OVERRAN)
    if signature == SIGNATURE:
        raw_version = _read_u32(stream, _HEADER_OVERRAN)
        try:
            version = PackageVersion(raw_version)
        except ValueError:
            raise PackageReadError(
                PackageReadErrorKind.UNSUPPORTED_VERSION, raw_version
            ) from None
        if version in _UNSUPPORTED:
            raise PackageReadError(_UNSUPPORTED[version])
        return _READERS[version](stream, path)

    _seek(stream, 0, os.SEEK_SET, _HEADER_OVERRAN)
    legacy_version = _read_u32(stream, _HEADER_OVERRAN)
    if legacy_version == PackageVersion.DIVINITY_ORIGINAL_SIN:
        raise PackageReadError(PackageReadErrorKind.UNSUPPORTED_VERSION_DOS)
    if legacy_version == PackageVersion.DIVINITY_ORIGINAL_SIN_ENHANCED_EDITION:
        raise PackageReadError(PackageReadErrorKind.UNSUPPORTED_VERSION_DOSEE)
    raise PackageReadError(PackageReadErrorKind.NO_VALID_SIGNATURE_FOUND)


def read_package(package_path: str | PathLike) -> Package:
    """Read the header and file list of the package at ``package_path``."""
    path = Path(package_path)
    try:
        stream = open(path, "rb")
    except OSError:
        raise PackageReadError(PackageReadErrorKind.COULD_NOT_READ_FILE) from None
    with stream:
        return _read(stream, path)