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
Local file header and central directory header encoding.

Every function here is a pure function of an EntryRecord: the bytes, and
therefore their length, never depend on where they are going to be written.
The matching decoders live in ``structures``.
"""

import struct

from .constants import (
    CENTRAL_DIR_HEADER,
    CENTRAL_DIR_HEADER_SIZE,
    EXTENDED_TIMESTAMP_EXTRA_SIZE,
    EXTENDED_TIMESTAMP_MTIME,
    EXTENDED_TIMESTAMP_TAG,
    LOCAL_FILE_HEADER,
    LOCAL_FILE_HEADER_SIZE,
    MAX_FILE_SIZE,
    MAX_NAME_LENGTH,
    VERSION_DEFAULT,
    VERSION_MADE_BY_DEFAULT,
    VERSION_ZIP64,
    ZIP64_CENTRAL_EXTRA_SIZE,
    ZIP64_EXTRA_FIELD_TAG,
    ZIP64_LOCAL_EXTRA_SIZE,
)
from .entry import EntryRecord
from .errors import NameTooLongError
from .utils import timestamp_to_dos_datetime, timestamp_to_unix

LOCAL_HEADER_STRUCT = struct.Struct("<IHHHHHIIIHH")
CENTRAL_HEADER_STRUCT = struct.Struct("<IHHHHHHIIIHHHHHII")


def check_name_length(name: bytes) -> bytes:
    """Raise NameTooLongError if ``name`` does not fit a 16-bit length field."""
    if len(name) > MAX_NAME_LENGTH:
        raise NameTooLongError(
            f"Entry name too long: {len(name)} bytes (max {MAX_NAME_LENGTH} bytes)"
        )
    return name


def zip64_local_extra_field(uncompressed_size: int, compressed_size: int) -> bytes:
    """Build the Zip64 extra field for a local file header.

    Local headers carry only the two sizes, uncompressed first.
    """
    return struct.pack(
        "<HHQQ", ZIP64_EXTRA_FIELD_TAG, 16, uncompressed_size, compressed_size
    )


def zip64_central_extra_field(
    uncompressed_size: int, compressed_size: int, local_header_offset: int
) -> bytes:
    """Build the Zip64 extra field for a central directory header.

    All three 64-bit values are always present, followed by the disk start
    number (0 for single-disk archives), since the header stores the
    0xFFFFFFFF sentinel in all three 32-bit fields.
    """
    return struct.pack(
        "<HHQQQI",
        ZIP64_EXTRA_FIELD_TAG,
        28,
        uncompressed_size,
        compressed_size,
        local_header_offset,
        0,
    )


def extended_timestamp_extra_field(mtime: int) -> bytes:
    """Build an extended timestamp ("UT") extra field holding only mtime."""
    return struct.pack(
        "<HHBI", EXTENDED_TIMESTAMP_TAG, 5, EXTENDED_TIMESTAMP_MTIME, mtime
    )


def local_header_uses_zip64(entry: EntryRecord) -> bool:
    """Whether the local header of ``entry`` carries a Zip64 extra field.

    Descriptor entries write zero placeholders, which never need widening.
    """
    return not entry.uses_data_descriptor and entry.requires_zip64_sizes


def local_header_extra(entry: EntryRecord) -> bytes:
    extra = bytearray()
    if local_header_uses_zip64(entry):
        extra += zip64_local_extra_field(entry.uncompressed_size, entry.compressed_size)
    if entry.extended_timestamp:
        extra += extended_timestamp_extra_field(timestamp_to_unix(entry.modification_time))
    return bytes(extra)


def central_header_extra(entry: EntryRecord) -> bytes:
    extra = bytearray()
    if entry.requires_zip64:
        extra += zip64_central_extra_field(
            entry.uncompressed_size, entry.compressed_size, entry.local_header_offset
        )
    if entry.extended_timestamp:
        extra += extended_timestamp_extra_field(timestamp_to_unix(entry.modification_time))
    return bytes(extra)


def encode_local_file_header(entry: EntryRecord) -> bytes:
    """Encode the local file header that precedes an entry's payload.

    For descriptor entries the CRC and both sizes are written as zero and
    stay that way; the data descriptor carries the real values.

    Args:
        entry: Entry metadata as registered.

    Returns:
        Header bytes: fixed part, name, extra field.
    """
    check_name_length(entry.name)
    zip64 = local_header_uses_zip64(entry)
    extra = local_header_extra(entry)

    if entry.uses_data_descriptor:
        crc, compressed_size, uncompressed_size = 0, 0, 0
    elif zip64:
        crc = entry.crc32
        compressed_size = uncompressed_size = MAX_FILE_SIZE
    else:
        crc = entry.crc32
        compressed_size = entry.compressed_size
        uncompressed_size = entry.uncompressed_size

    mod_date, mod_time = timestamp_to_dos_datetime(entry.modification_time)

    header = LOCAL_HEADER_STRUCT.pack(
        LOCAL_FILE_HEADER,
        VERSION_ZIP64 if zip64 else VERSION_DEFAULT,
        entry.gp_flags,
        int(entry.method),
        mod_time,
        mod_date,
        crc,
        compressed_size,
        uncompressed_size,
        len(entry.name),
        len(extra),
    )
    return header + entry.name + extra


def encode_central_directory_header(entry: EntryRecord) -> bytes:
    """Encode the central directory header for an entry.

    Uses the entry's current CRC and sizes, which for descriptor entries are
    the patched values. Whether Zip64 applies depends only on the record's
    sizes and local header offset.

    Args:
        entry: Entry metadata, including its local header offset.

    Returns:
        Header bytes: fixed part, name, extra field (no comment).
    """
    check_name_length(entry.name)
    zip64 = entry.requires_zip64
    extra = central_header_extra(entry)

    if zip64:
        compressed_size = uncompressed_size = local_header_offset = MAX_FILE_SIZE
    else:
        compressed_size = entry.compressed_size
        uncompressed_size = entry.uncompressed_size
        local_header_offset = entry.local_header_offset

    mod_date, mod_time = timestamp_to_dos_datetime(entry.modification_time)

    header = CENTRAL_HEADER_STRUCT.pack(
        CENTRAL_DIR_HEADER,
        VERSION_MADE_BY_DEFAULT,
        VERSION_ZIP64 if zip64 else VERSION_DEFAULT,
        entry.gp_flags,
        int(entry.method),
        mod_time,
        mod_date,
        entry.crc32,
        compressed_size,
        uncompressed_size,
        len(entry.name),
        len(extra),
        0,  # comment length
        0,  # disk number start
        0,  # internal attributes
        entry.external_attributes,
        local_header_offset,
    )
    return header + entry.name + extra


def local_file_header_size(name: bytes, *, zip64: bool = False, timestamp: bool = True) -> int:
    """Length of a local file header for a name of the given bytes."""
    size = LOCAL_FILE_HEADER_SIZE + len(name)
    if zip64:
        size += ZIP64_LOCAL_EXTRA_SIZE
    if timestamp:
        size += EXTENDED_TIMESTAMP_EXTRA_SIZE
    return size


def central_directory_header_size(
    name: bytes, *, zip64: bool = False, timestamp: bool = True
) -> int:
    """Length of a central directory header for a name of the given bytes."""
    size = CENTRAL_DIR_HEADER_SIZE + len(name)
    if zip64:
        size += ZIP64_CENTRAL_EXTRA_SIZE
    if timestamp:
        size += EXTENDED_TIMESTAMP_EXTRA_SIZE
    return size
