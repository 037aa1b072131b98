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
Data descriptor encoding.

The descriptor follows an entry's payload when the CRC and sizes were not
known as the local header went out. It always starts with the optional
``PK\\x07\\x08`` signature.
"""

import struct

from .constants import (
    DATA_DESCRIPTOR,
    DATA_DESCRIPTOR_SIZE,
    MAX_FILE_SIZE,
    ZIP64_DATA_DESCRIPTOR_SIZE,
)
from .entry import EntryRecord


def descriptor_uses_zip64(compressed_size: int, uncompressed_size: int) -> bool:
    return compressed_size > MAX_FILE_SIZE or uncompressed_size > MAX_FILE_SIZE


def encode_data_descriptor(crc32: int, compressed_size: int, uncompressed_size: int) -> bytes:
    """Encode a data descriptor.

    Both sizes are widened to 8 bytes when either of them overflows 32 bits.

    Args:
        crc32: CRC32 of the uncompressed payload.
        compressed_size: Payload size as written.
        uncompressed_size: Payload size before compression.

    Returns:
        16 bytes, or 24 bytes in the Zip64 form.
    """
    if descriptor_uses_zip64(compressed_size, uncompressed_size):
        return struct.pack("<IIQQ", DATA_DESCRIPTOR, crc32, compressed_size, uncompressed_size)
    return struct.pack("<IIII", DATA_DESCRIPTOR, crc32, compressed_size, uncompressed_size)


def encode_entry_descriptor(entry: EntryRecord) -> bytes:
    """Encode the data descriptor for an entry's current CRC and sizes."""
    return encode_data_descriptor(entry.crc32, entry.compressed_size, entry.uncompressed_size)


def data_descriptor_size(zip64: bool = False) -> int:
    return ZIP64_DATA_DESCRIPTOR_SIZE if zip64 else DATA_DESCRIPTOR_SIZE
