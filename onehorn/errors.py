"""Exceptions raised while reading packages and managing mods."""

from __future__ import annotations

from enum import Enum


class PackageReadErrorKind(Enum):
    """Why a package file could not be read."""

    COULD_NOT_READ_FILE = "CouldNotReadFile"
    FILE_LIST_OVERRAN_END_OF_FILE = "FileListOverranEndOfFile"
    FILE_INFO_OVERRAN_END_OF_FILE = "FileInfoOverranEndOfFile"
    COULD_NOT_DECOMPRESS_FILE_LIST = "CouldNotDecompressFileList"
    PACKAGE_HEADER_OVERRAN_END_OF_FILE = "PackageHeaderOverranEndOfFile"
    UNSUPPORTED_VERSION_DOS = "UnsupportedVersionDOS"
    UNSUPPORTED_VERSION_DOSEE = "UnsupportedVersionDOSEE"
    UNSUPPORTED_VERSION_DOS2 = "UnsupportedVersionDOS2"
    UNSUPPORTED_VERSION_DOS2DE = "UnsupportedVersionDOS2DE"
    UNSUPPORTED_VERSION = "UnsupportedVersion"
    NO_VALID_SIGNATURE_FOUND = "NoValidSignatureFound"
    FILE_NAME_NOT_NULL_TERMINATED = "FileNameNotNullTerminated"


class MetaReadErrorKind(Enum):
    """Why the meta data of a package could not be read."""

    INVALID_ARCHIVE_PART = "InvalidArchivePart"
    CANNOT_READ_PACKAGE = "CannotReadPackage"
    META_NOT_VALID_UTF8 = "MetaNotValidUtf8"
    META_NOT_VALID_XML = "MetaNotValidXml"
    META_DATA_MISSING_MODULE_INFO = "MetaDataMissingModuleInfo"
    META_DATA_MISSING_VERSION = "MetaDataMissingVersion"
    META_DATA_INVALID_VERSION = "MetaDataInvalidVersion"
    PACKAGE_FILE_READ_ERROR = "PackageFileReadError"


class PackageFileReadErrorKind(Enum):
    """Why a file stored inside a package could not be extracted."""

    UNKNOWN_COMPRESSION_METHOD = "UnknownCompressionMethod"
    COULD_NOT_DECOMPRESS_ZLIB_FILE = "CouldNotDecompressZLibFile"
    COULD_NOT_DECOMPRESS_LZ4_FILE = "CouldNotDecompressLZ4File"
    FILE_OFFSET_OVERRUNS_FILE = "FileOffsetOverrunsFile"


class ModDetailsErrorKind(Enum):
    """Why the details of a mod file could not be determined."""

    FILE_PATH_DOES_NOT_LEAD_TO_VALID_FILE = "FilePathDoesNotLeadToValidFile"
    CANNOT_UNPACK_PACKAGE_FILE = "CannotUnpackPackageFile"
    CANNOT_READ_PACKAGE_META = "CannotReadPackageMeta"
    CANNOT_FIND_PACKAGE_FILE = "CannotFindPackageFile"


class ModManagerError(Exception):
    """Base class of every error raised by this package."""


class PackageReadError(ModManagerError):
    """A package file could not be read."""

    def __init__(self, kind: PackageReadErrorKind, version: int | None = None) -> None:
        self.kind = kind
        self.version = version
        if version is None:
            message = kind.value
        else:
            message = f"{kind.value}({version})"
        super().__init__(message)


class PackageFileReadError(ModManagerError):
    """A file stored inside a package could not be extracted."""

    def __init__(self, kind: PackageFileReadErrorKind) -> None:
        self.kind = kind
        super().__init__(kind.value)


class MetaReadError(ModManagerError):
    """The meta data of a package could not be read."""

    def __init__(
        self, kind: MetaReadErrorKind, cause: PackageFileReadError | None = None
    ) -> None:
        self.kind = kind
        self.cause = cause
        if cause is None:
            message = kind.value
        else:
            message = f"{kind.value}({cause.kind.value})"
        super().__init__(message)


class ModDetailsError(ModManagerError):
    """The details of a mod file could not be determined."""

    def __init__(self, kind: ModDetailsErrorKind) -> None:
        self.kind = kind
        super().__init__(kind.value)


class FileBrowserRedirectError(ModManagerError):
    """The file browser was pointed at something that is not a directory."""

    def __init__(self, message: str = "PathDoesNotLeadToDir") -> None:
        super().__init__(message)


class RemoveModError(ModManagerError):
    """A mod could not be removed."""


class SaveStateError(ModManagerError):
    """The application state could not be saved."""


class AddModError(ModManagerError):
    """A mod could not be added."""


class UnpackingFileError(ModManagerError):
    """A mod file could not be unpacked."""