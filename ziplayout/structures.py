"""
Copyright 2025 DNAi inc.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

"""
Decoded ZIP structures and parsing functions.

These mirror the encoders in ``headers``, ``descriptor`` and ``eocd`` and
exist to validate emitted bytes, not to read arbitrary archives.
"""

import struct
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Optional

from .constants import (
    CENTRAL_DIR_HEADER,
    DATA_DESCRIPTOR,
    END_OF_CENTRAL_DIR,
    EXTENDED_TIMESTAMP_MTIME,
    EXTENDED_TIMESTAMP_TAG,
    LOCAL_FILE_HEADER,
    ZIP64_END_OF_CENTRAL_DIR,
    ZIP64_END_OF_CENTRAL_DIR_LOCATOR,
    ZIP64_EXTRA_FIELD_TAG,
)
from .errors import ZipFormatError
from .headers import CENTRAL_HEADER_STRUCT, LOCAL_HEADER_STRUCT
from .utils import dos_datetime_to_timestamp, read_exact

_EOCD_STRUCT = struct.Struct("<IHHHHIIH")
_ZIP64_EOCD_STRUCT = struct.Struct("<IQHHIIQQQQ")
_ZIP64_LOCATOR_STRUCT = struct.Struct("<IIQI")


@dataclass
class LocalFileHeader:
    """Local file header, as found before each entry's payload."""

    version: int
    flags: int
    compression_method: int
    mod_time: int
    mod_date: int
    crc32: int
    compressed_size: int
    uncompressed_size: int
    filename: bytes
    extra: bytes

    @property
    def date_time(self) -> datetime:
        return dos_datetime_to_timestamp(self.mod_date, self.mod_time)

    @property
    def total_size(self) -> int:
        return LOCAL_HEADER_STRUCT.size + len(self.filename) + len(self.extra)


@dataclass
class CentralDirectoryHeader:
    """Central directory header, pointing back at a local header."""

    version_made_by: int
    version: int
    flags: int
    compression_method: int
    mod_time: int
    mod_date: int
    crc32: int
    compressed_size: int
    uncompressed_size: int
    disk_num: int
    internal_attrs: int
    external_attrs: int
    local_header_offset: int
    filename: bytes
    extra: bytes
    comment: bytes

    @property
    def date_time(self) -> datetime:
        return dos_datetime_to_timestamp(self.mod_date, self.mod_time)

    @property
    def total_size(self) -> int:
        return CENTRAL_HEADER_STRUCT.size + len(self.filename) + len(self.extra) + len(self.comment)


@dataclass
class EndOfCentralDirectory:
    cd_records_on_disk: int
    cd_records_total: int
    cd_size: int
    cd_offset: int
    comment: bytes


@dataclass
class Zip64EndOfCentralDirectory:
    size: int
    version_made_by: int
    version_needed: int
    cd_records_on_disk: int
    cd_records_total: int
    cd_size: int
    cd_offset: int


@dataclass
class Zip64Locator:
    zip64_eocd_offset: int
    total_disks: int


@dataclass
class Zip64ExtraField:
    """ZIP64 extra field data.

    Local headers carry the two sizes only; central headers add the offset
    and disk start.
    """

    original_size: Optional[int] = None
    compressed_size: Optional[int] = None
    local_header_offset: Optional[int] = None
    disk_start: Optional[int] = None


@dataclass
class DataDescriptor:
    crc32: int
    compressed_size: int
    uncompressed_size: int
    is_zip64: bool = False


def _unpack(f: BinaryIO, layout: struct.Struct, expected_signature: int, label: str) -> tuple:
    values = layout.unpack(read_exact(f, layout.size))
    if values[0] != expected_signature:
        raise ZipFormatError(
            f"Invalid {label} signature: 0x{values[0]:08X}, expected 0x{expected_signature:08X}"
        )
    return values[1:]


def parse_local_file_header(f: BinaryIO) -> LocalFileHeader:
    """Parse a local file header from the current file position.

    Raises:
        ZipFormatError: If the signature is invalid or data is truncated.
    """
    *fields, filename_len, extra_len = _unpack(
        f, LOCAL_HEADER_STRUCT, LOCAL_FILE_HEADER, "local file header"
    )
    filename = read_exact(f, filename_len)
    return LocalFileHeader(*fields, filename=filename, extra=read_exact(f, extra_len))


def parse_central_directory_header(f: BinaryIO) -> CentralDirectoryHeader:
    """Parse a central directory header from the current file position.

    Raises:
        ZipFormatError: If the signature is invalid or data is truncated.
    """
    values = _unpack(f, CENTRAL_HEADER_STRUCT, CENTRAL_DIR_HEADER, "central directory header")
    filename_len, extra_len, comment_len = values[9:12]
    filename = read_exact(f, filename_len)
    extra = read_exact(f, extra_len)
    return CentralDirectoryHeader(
        *values[:9],
        *values[12:],
        filename=filename,
        extra=extra,
        comment=read_exact(f, comment_len),
    )


def parse_eocd(f: BinaryIO) -> EndOfCentralDirectory:
    """Parse an end of central directory record from the current file position."""
    _, _, on_disk, total, cd_size, cd_offset, comment_len = _unpack(
        f, _EOCD_STRUCT, END_OF_CENTRAL_DIR, "EOCD"
    )
    return EndOfCentralDirectory(on_disk, total, cd_size, cd_offset, read_exact(f, comment_len))


def parse_zip64_eocd(f: BinaryIO) -> Zip64EndOfCentralDirectory:
    size, made_by, needed, _, _, on_disk, total, cd_size, cd_offset = _unpack(
        f, _ZIP64_EOCD_STRUCT, ZIP64_END_OF_CENTRAL_DIR, "ZIP64 EOCD"
    )
    return Zip64EndOfCentralDirectory(size, made_by, needed, on_disk, total, cd_size, cd_offset)


def parse_zip64_locator(f: BinaryIO) -> Zip64Locator:
    _, zip64_eocd_offset, total_disks = _unpack(
        f, _ZIP64_LOCATOR_STRUCT, ZIP64_END_OF_CENTRAL_DIR_LOCATOR, "ZIP64 locator"
    )
    return Zip64Locator(zip64_eocd_offset, total_disks)


def parse_data_descriptor(f: BinaryIO, is_zip64: bool = False) -> DataDescriptor:
    """Parse a data descriptor; ``is_zip64`` selects 8-byte sizes."""
    layout = struct.Struct("<IIQQ" if is_zip64 else "<IIII")
    crc32, compressed_size, uncompressed_size = _unpack(
        f, layout, DATA_DESCRIPTOR, "data descriptor"
    )
    return DataDescriptor(crc32, compressed_size, uncompressed_size, is_zip64)


def parse_extra_fields(extra_data: bytes) -> dict[int, bytes]:
    """Split an extra field block into ``{tag: payload}``.

    Raises:
        ZipFormatError: If a field runs past the end of the block.
    """
    fields = {}
    pos = 0
    while pos < len(extra_data):
        if pos + 4 > len(extra_data):
            raise ZipFormatError(f"Truncated extra field header at offset {pos}")
        tag, size = struct.unpack_from("<HH", extra_data, pos)
        pos += 4
        if pos + size > len(extra_data):
            raise ZipFormatError(
                f"Extra field 0x{tag:04X} overruns block: {size} bytes at offset {pos}"
            )
        fields[tag] = extra_data[pos : pos + size]
        pos += size
    return fields


def parse_zip64_extra_field(extra_data: bytes) -> Optional[Zip64ExtraField]:
    """Parse the ZIP64 extra field out of an extra field block, or return None."""
    field_data = parse_extra_fields(extra_data).get(ZIP64_EXTRA_FIELD_TAG)
    if field_data is None:
        return None

    # Values appear in a fixed order and only as far as the field reaches
    values = []
    pos = 0
    for fmt in ("<Q", "<Q", "<Q", "<I"):
        width = struct.calcsize(fmt)
        if pos + width > len(field_data):
            break
        values.append(struct.unpack_from(fmt, field_data, pos)[0])
        pos += width
    return Zip64ExtraField(*values)


def parse_extended_timestamp(extra_data: bytes) -> Optional[int]:
    """Return the Unix mtime from an extended timestamp field, if present."""
    field_data = parse_extra_fields(extra_data).get(EXTENDED_TIMESTAMP_TAG)
    if field_data is None or len(field_data) < 5:
        return None
    if not field_data[0] & EXTENDED_TIMESTAMP_MTIME:
        return None
    return struct.unpack_from("<I", field_data, 1)[0]
