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
Archive member metadata.

An EntryRecord is everything the header codecs need to lay out one member.
The writer hands out an EntryHandle for each record it registers.
"""

import enum
import stat
from dataclasses import dataclass, field
from datetime import datetime

from .constants import (
    COMP_DEFLATE,
    COMP_STORED,
    DEFAULT_DIRECTORY_PERMISSIONS,
    DEFAULT_FILE_PERMISSIONS,
    FLAG_DATA_DESCRIPTOR,
    FLAG_UTF8,
    MAX_FILE_SIZE,
)


class StorageMode(enum.IntEnum):
    """Compression method code recorded for an entry."""

    STORED = COMP_STORED
    DEFLATED = COMP_DEFLATE


@dataclass
class EntryRecord:
    """Metadata of one archive member.

    ``local_header_offset`` is fixed when the record is registered. The CRC
    and size fields of the newest record may be patched once, when its data
    descriptor is emitted.
    """

    name: bytes
    method: StorageMode
    local_header_offset: int
    crc32: int = 0
    compressed_size: int = 0
    uncompressed_size: int = 0
    uses_data_descriptor: bool = False
    is_directory: bool = False
    modification_time: datetime = field(default_factory=datetime.now)
    unix_permissions: int | None = None
    extended_timestamp: bool = True
    descriptor_written: bool = False

    @property
    def gp_flags(self) -> int:
        """General purpose bit flags for both headers."""
        flags = FLAG_UTF8
        if self.uses_data_descriptor:
            flags |= FLAG_DATA_DESCRIPTOR
        return flags

    @property
    def requires_zip64_sizes(self) -> bool:
        """True if either size overflows a 32-bit field."""
        # Strictly greater: a value of exactly 0xFFFFFFFF is written raw even
        # though strict Zip64 readers take it as the sentinel
        return (
            self.compressed_size > MAX_FILE_SIZE
            or self.uncompressed_size > MAX_FILE_SIZE
        )

    @property
    def requires_zip64(self) -> bool:
        """True if the central directory header needs a Zip64 extra field."""
        return self.requires_zip64_sizes or self.local_header_offset > MAX_FILE_SIZE

    @property
    def external_attributes(self) -> int:
        """Unix mode bits shifted into the high word of the attribute field."""
        if self.is_directory:
            perms = self.unix_permissions
            if perms is None:
                perms = DEFAULT_DIRECTORY_PERMISSIONS
            return (stat.S_IFDIR | perms) << 16
        perms = self.unix_permissions
        if perms is None:
            perms = DEFAULT_FILE_PERMISSIONS
        return (stat.S_IFREG | perms) << 16

    @property
    def filename(self) -> str:
        return self.name.decode("utf-8")


@dataclass(frozen=True)
class EntryHandle:
    """Reference to a registered entry, returned by the writer."""

    index: int
    name: str
    local_header_offset: int
