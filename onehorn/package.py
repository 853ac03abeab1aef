"""A package that has been read, and extraction of its meta data."""

from __future__ import annotations

import zlib
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

import lz4.block

from .errors import (
    MetaReadError,
    MetaReadErrorKind,
    PackageFileReadError,
    PackageFileReadErrorKind,
)
from .file_info import CompressionMethod, PackagedFileInfo, PackageVersion
from .meta import Meta


def read_packaged_file(stream: BinaryIO, file_info: PackagedFileInfo) -> bytes:
    """Read and decompress one file stored in an open package part."""
    try:
        stream.seek(file_info.offset_in_file)
        data = stream.read(file_info.size_on_disk)
    except (OSError, ValueError, OverflowError):
        raise PackageFileReadError(
            PackageFileReadErrorKind.FILE_OFFSET_OVERRUNS_FILE
        ) from None
    if len(data) != file_info.size_on_disk:
        raise PackageFileReadError(PackageFileReadErrorKind.FILE_OFFSET_OVERRUNS_FILE)

    method = file_info.compression_method()
    if method is CompressionMethod.NONE:
        return data
    if method is CompressionMethod.ZLIB:
        try:
            return zlib.decompress(data)
        except zlib.error:
            raise PackageFileReadError(
                PackageFileReadErrorKind.COULD_NOT_DECOMPRESS_ZLIB_FILE
            ) from None
    if method is CompressionMethod.LZ4:
        try:
            return lz4.block.decompress(
                data, uncompressed_size=file_info.uncompressed_size
            )
        except (lz4.block.LZ4BlockError, ValueError, MemoryError):
            raise PackageFileReadError(
                PackageFileReadErrorKind.COULD_NOT_DECOMPRESS_LZ4_FILE
            ) from None
    raise PackageFileReadError(PackageFileReadErrorKind.UNKNOWN_COMPRESSION_METHOD)


def _is_meta_file(file_info: PackagedFileInfo) -> bool:
    return file_info.name.endswith("/meta.lsx") and file_info.name.startswith("Mods/")


@dataclass
class Package:
    """The file list of a package and the paths of its parts."""

    version: PackageVersion
    priority: int
    flags: int
    files: list[PackagedFileInfo] = field(default_factory=list)
    package_files: list[Path] = field(default_factory=list)

    def get_meta(self) -> list[Meta]:
        """Read every ``Mods/*/meta.lsx`` file in the package."""
        metas = []
        with ExitStack() as stack:
            open_parts: dict[int, BinaryIO] = {}
            for file_info in filter(_is_meta_file, self.files):
                part = file_info.archive_part
                stream = open_parts.get(part)
                if stream is None:
                    if part >= len(self.package_files):
                        raise MetaReadError(MetaReadErrorKind.INVALID_ARCHIVE_PART)
                    try:
                        stream = stack.enter_context(open(self.package_files[part], "rb"))
                    except OSError:
                        raise MetaReadError(MetaReadErrorKind.CANNOT_READ_PACKAGE) from None
                    open_parts[part] = stream

                try:
                    raw = read_packaged_file(stream, file_info)
                except PackageFileReadError as error:
                    raise MetaReadError(
                        MetaReadErrorKind.PACKAGE_FILE_READ_ERROR, error
                    ) from error
                try:
                    text = raw.decode("utf-8")
                except UnicodeDecodeError:
                    raise MetaReadError(MetaReadErrorKind.META_NOT_VALID_UTF8) from None

                metas.append(Meta.from_xml(text))
        return metas