import io
import struct

import pytest

from onehorn.errors import PackageReadError, PackageReadErrorKind
from onehorn.package_header import PackageHeaderV15, PackageHeaderV16

MD5 = bytes(range(16))


def _common(version, offset, size, flags, priority):
    return struct.pack("<IQIBB", version, offset, size, flags, priority) + MD5


def test_read_v15():
    stream = io.BytesIO(_common(15, 4096, 300, 1, 2) + b"tail")
    header = PackageHeaderV15.read(stream)
    assert header.version == 15
    assert header.file_list_offset == 4096
    assert header.file_list_size == 300
    assert (header.flags, header.priority) == (1, 2)
    assert header.md5 == MD5
    assert stream.read() == b"tail"


def test_read_v16():
    stream = io.BytesIO(_common(18, 70000, 12, 0, 30) + struct.pack("<H", 3) + b"tail")
    header = PackageHeaderV16.read(stream)
    assert header.version == 18
    assert header.file_list_offset == 70000
    assert header.priority == 30
    assert header.num_parts == 3
    assert stream.read() == b"tail"
    assert stream.tell() - 4 == PackageHeaderV16.SIZE


@pytest.mark.parametrize(
    "reader,data",
    [
        (PackageHeaderV15, b"\x01\x02\x03"),
        (PackageHeaderV15, struct.pack("<IQIBB", 15, 0, 0, 0, 0) + b"\x00" * 5),
        (PackageHeaderV16, struct.pack("<IQIBB", 16, 0, 0, 0, 0) + MD5 + b"\x01"),
    ],
)
def test_truncated_header(reader, data):
    with pytest.raises(PackageReadError) as caught:
        reader.read(io.BytesIO(data))
    assert caught.value.kind is PackageReadErrorKind.PACKAGE_HEADER_OVERRAN_END_OF_FILE