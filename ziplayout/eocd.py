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
End of central directory encoding, including the Zip64 record and locator.
"""

import struct

from .constants import (
    END_OF_CENTRAL_DIR,
    END_OF_CENTRAL_DIR_SIZE,
    MAX_CD_OFFSET,
    MAX_CD_SIZE,
    MAX_COMMENT_LENGTH,
    MAX_ENTRIES,
    VERSION_MADE_BY_DEFAULT,
    VERSION_ZIP64,
    ZIP64_END_OF_CENTRAL_DIR,
    ZIP64_END_OF_CENTRAL_DIR_LOCATOR,
    ZIP64_END_OF_CENTRAL_DIR_SIZE,
    ZIP64_LOCATOR_SIZE,
)
from .errors import ZipFormatError


def needs_zip64_end_record(
    num_entries: int, cd_offset: int, cd_size: int, any_zip64_entry: bool = False
) -> bool:
    """Decide whether the archive ends with Zip64 records.

    Args:
        num_entries: Number of central directory headers.
        cd_offset: Offset of the first central directory header.
        cd_size: Total size of the central directory.
        any_zip64_entry: Whether any central header carries a Zip64 extra field.

    Returns:
        True if the Zip64 end record and locator must be written.
    """
    # Only values past the field maximum promote. A count of exactly 0xFFFF
    # or an offset of exactly 0xFFFFFFFF is written raw, which strict Zip64
    # readers take as the sentinel for a Zip64 record that is not there.
    return (
        any_zip64_entry
        or num_entries > MAX_ENTRIES
        or cd_size > MAX_CD_SIZE
        or cd_offset > MAX_CD_OFFSET
    )


def encode_zip64_eocd(num_entries: int, cd_offset: int, cd_size: int) -> bytes:
    """Encode the Zip64 end of central directory record (56 bytes)."""
    # The size field excludes the signature and itself.
    record_size = ZIP64_END_OF_CENTRAL_DIR_SIZE - 12
    return struct.pack(
        "<IQHHIIQQQQ",
        ZIP64_END_OF_CENTRAL_DIR,
        record_size,
        VERSION_MADE_BY_DEFAULT,
        VERSION_ZIP64,
        0,  # number of this disk
        0,  # disk with start of central directory
        num_entries,
        num_entries,
        cd_size,
        cd_offset,
    )


def encode_zip64_locator(zip64_eocd_offset: int) -> bytes:
    """Encode the Zip64 end of central directory locator (20 bytes)."""
    return struct.pack(
        "<IIQI",
        ZIP64_END_OF_CENTRAL_DIR_LOCATOR,
        0,  # disk with the Zip64 EOCD
        zip64_eocd_offset,
        1,  # total number of disks
    )


def encode_eocd(
    num_entries: int, cd_offset: int, cd_size: int, comment: bytes = b""
) -> bytes:
    """Encode the classic end of central directory record.

    Fields that do not fit are replaced with their 0xFFFF / 0xFFFFFFFF
    sentinel, pointing readers at the Zip64 record.
    """
    if len(comment) > MAX_COMMENT_LENGTH:
        raise ZipFormatError(
            f"Archive comment too long: {len(comment)} bytes (max {MAX_COMMENT_LENGTH} bytes)"
        )
    entries = min(num_entries, MAX_ENTRIES)
    return struct.pack(
        "<IHHHHIIH",
        END_OF_CENTRAL_DIR,
        0,  # number of this disk
        0,  # disk with start of central directory
        entries,
        entries,
        min(cd_size, MAX_CD_SIZE),
        min(cd_offset, MAX_CD_OFFSET),
        len(comment),
    ) + comment


def encode_end_of_central_directory(
    num_entries: int,
    cd_offset: int,
    cd_size: int,
    comment: bytes = b"",
    zip64: bool = False,
) -> bytes:
    """Encode everything that follows the central directory.

    The Zip64 record is written immediately after the central directory, so
    its offset is ``cd_offset + cd_size``.

    Args:
        num_entries: Number of entries in the archive.
        cd_offset: Offset of the central directory.
        cd_size: Size of the central directory.
        comment: Archive comment.
        zip64: Whether to prepend the Zip64 record and locator.

    Returns:
        The terminal bytes of the archive.
    """
    tail = bytearray()
    if zip64:
        tail += encode_zip64_eocd(num_entries, cd_offset, cd_size)
        tail += encode_zip64_locator(cd_offset + cd_size)
    tail += encode_eocd(num_entries, cd_offset, cd_size, comment)
    return bytes(tail)


def end_of_central_directory_size(comment: bytes = b"", zip64: bool = False) -> int:
    size = END_OF_CENTRAL_DIR_SIZE + len(comment)
    if zip64:
        size += ZIP64_END_OF_CENTRAL_DIR_SIZE + ZIP64_LOCATOR_SIZE
    return size
