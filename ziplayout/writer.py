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
Streaming ZIP archive writer.

This module provides the StreamingArchiveWriter class, which lays out a ZIP
archive strictly front to back. Payload bytes are supplied (or merely
counted) by the caller, so the same writer serves real output and exact
size prediction.
"""

import logging
import os
from dataclasses import replace
from datetime import datetime
from typing import BinaryIO, Optional

from .constants import MAX_COMMENT_LENGTH, MAX_CRC32, ZIP64_MAX
from .descriptor import encode_data_descriptor
from .entry import EntryHandle, EntryRecord, StorageMode
from .eocd import encode_end_of_central_directory, needs_zip64_end_record
from .errors import (
    AlreadyClosedError,
    DescriptorNotExpectedError,
    NoOpenEntryError,
    SizeLimitExceededError,
    UseAfterCloseError,
    ZipFormatError,
)
from .headers import (
    check_name_length,
    encode_central_directory_header,
    encode_local_file_header,
)
from .paths import PathSet
from .sinks import ByteSink, NullSink, WriteSink
from .utils import check_range

__log__ = logging.getLogger(__name__)


class StreamingArchiveWriter:
    """Forward-only writer for ZIP and ZIP64 archives.

    Entries are registered one at a time; each registration emits the local
    file header immediately. The caller then supplies the payload with
    ``write()`` or accounts for it with ``advance()``, and, for entries that
    use a data descriptor, patches in the CRC and sizes afterwards.

    Example:
        with open("archive.zip", "wb") as f, StreamingArchiveWriter(f) as z:
            z.add_stored_entry("hello.txt", crc32=0x3610A686, size=5)
            z.write(b"hello")

        # Without an output, the writer only counts bytes.
        z = StreamingArchiveWriter()
        z.add_stored_entry("big.bin", size=898291)
        z.advance(898291)
        total = z.close()
    """

    def __init__(
        self,
        output: "ByteSink | BinaryIO | str | os.PathLike | None" = None,
        *,
        comment: bytes | str = b"",
        auto_rename_duplicate_filenames: bool = False,
        write_timestamps: bool = True,
        max_archive_size: int = ZIP64_MAX,
    ):
        """Initialize the writer.

        Args:
            output: A ByteSink, a path to create, a writable binary file-like
                object, or None to only count bytes.
            comment: Archive comment stored in the end of central directory.
            auto_rename_duplicate_filenames: Rename clashing names to
                ``name (1).ext`` instead of raising DuplicateFilenamesError.
            write_timestamps: Add an extended timestamp extra field to headers.
            max_archive_size: Cap on the total archive size in bytes.

        Raises:
            ZipFormatError: If an argument is invalid or the output cannot be used.
        """
        if isinstance(comment, str):
            comment = comment.encode("utf-8")
        if len(comment) > MAX_COMMENT_LENGTH:
            raise ZipFormatError(
                f"Archive comment too long: {len(comment)} bytes (max {MAX_COMMENT_LENGTH} bytes)"
            )

        self._owned_file: Optional[BinaryIO] = None
        if output is None:
            sink = NullSink()
        elif isinstance(output, ByteSink):
            sink = output
        elif isinstance(output, (str, os.PathLike)):
            self._owned_file = open(output, "wb")
            sink = WriteSink(self._owned_file)
        else:
            sink = WriteSink(output)

        self._sink = sink
        self._comment = comment
        self._auto_rename = auto_rename_duplicate_filenames
        self._write_timestamps = write_timestamps
        self._max_archive_size = check_range("max archive size", max_archive_size, ZIP64_MAX)
        self._entries: list[EntryRecord] = []
        self._paths = PathSet()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def entries(self) -> tuple[EntryRecord, ...]:
        """Snapshot of the registered entries, in archive order."""
        return tuple(replace(entry) for entry in self._entries)

    @property
    def sink(self) -> ByteSink:
        return self._sink

    def tell(self) -> int:
        """Current offset in the archive stream."""
        return self._sink.tell()

    def _check_open(self) -> None:
        if self._closed:
            raise UseAfterCloseError("Archive is closed")

    def _check_limit(self, byte_count: int) -> None:
        new_offset = self._sink.tell() + byte_count
        if new_offset > self._max_archive_size:
            raise SizeLimitExceededError(
                f"Archive would grow to {new_offset} bytes "
                f"(limit {self._max_archive_size} bytes)"
            )

    def _emit(self, data: bytes) -> int:
        self._check_limit(len(data))
        return self._sink.write(data)

    def _normalize_name(self, name: str | bytes) -> str:
        if isinstance(name, bytes):
            try:
                name = name.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ZipFormatError(f"Entry name is not valid UTF-8: {name!r}") from e

        # Normalize path separators (use forward slash)
        if "\\" in name:
            name = name.replace("\\", "/")

        if not name:
            raise ZipFormatError("Entry name cannot be empty")
        if "\x00" in name:
            raise ZipFormatError("Entry name cannot contain null bytes")
        return name

    def _register(
        self,
        name: str | bytes,
        method: StorageMode,
        crc32: int,
        compressed_size: int,
        uncompressed_size: int,
        use_data_descriptor: bool,
        is_directory: bool = False,
        modification_time: Optional[datetime] = None,
        unix_permissions: Optional[int] = None,
    ) -> EntryHandle:
        self._check_open()

        check_range("CRC32", crc32, MAX_CRC32)
        check_range("compressed size", compressed_size, ZIP64_MAX)
        check_range("uncompressed size", uncompressed_size, ZIP64_MAX)
        if unix_permissions is not None:
            check_range("Unix permissions", unix_permissions, 0o7777)

        filename = self._normalize_name(name)
        if is_directory:
            if self._auto_rename:
                filename = self._paths.unique_directory_path(filename)
            elif not filename.endswith("/"):
                filename += "/"
        else:
            if filename.endswith("/"):
                raise ZipFormatError(f"File entry name cannot end with '/': {filename!r}")
            if self._auto_rename:
                filename = self._paths.unique_file_path(filename)

        name_bytes = check_name_length(filename.encode("utf-8"))
        if is_directory:
            self._paths.check_directory_path(filename)
        else:
            self._paths.check_file_path(filename)

        record = EntryRecord(
            name=name_bytes,
            method=method,
            local_header_offset=self._sink.tell(),
            crc32=crc32,
            compressed_size=compressed_size,
            uncompressed_size=uncompressed_size,
            uses_data_descriptor=use_data_descriptor,
            is_directory=is_directory,
            modification_time=modification_time or datetime.now(),
            unix_permissions=unix_permissions,
            extended_timestamp=self._write_timestamps,
        )
        header = encode_local_file_header(record)
        self._check_limit(len(header))
        self._sink.write(header)

        # Only a name whose header reached the sink is taken
        if is_directory:
            self._paths.add_directory_path(filename)
        else:
            self._paths.add_file_path(filename)
        self._entries.append(record)

        __log__.debug(
            "Added %s entry %r at offset %d (descriptor=%s)",
            method.name.lower(),
            filename,
            record.local_header_offset,
            use_data_descriptor,
        )
        return EntryHandle(
            index=len(self._entries) - 1,
            name=filename,
            local_header_offset=record.local_header_offset,
        )

    def add_stored_entry(
        self,
        name: str | bytes,
        crc32: int = 0,
        size: int = 0,
        use_data_descriptor: bool = False,
        *,
        modification_time: Optional[datetime] = None,
        unix_permissions: Optional[int] = None,
    ) -> EntryHandle:
        """Register an uncompressed entry and write its local header.

        Args:
            name: Entry name (path within the archive).
            crc32: CRC32 of the payload, ignored in the header if a descriptor follows.
            size: Payload size in bytes.
            use_data_descriptor: Write zero placeholders now and the real
                values in a data descriptor after the payload.
            modification_time: Entry timestamp, defaults to now.
            unix_permissions: Permission bits, defaults to 0o644.

        Returns:
            Handle of the new entry.

        Raises:
            UseAfterCloseError: If the archive is closed.
            NameTooLongError: If the encoded name exceeds 65535 bytes.
            DuplicateFilenamesError: If the name is already taken.
            PathConflictError: If the name clashes with a directory.
            ZipFormatError: If the name or a numeric field is invalid.
        """
        return self._register(
            name,
            StorageMode.STORED,
            crc32,
            size,
            size,
            use_data_descriptor,
            modification_time=modification_time,
            unix_permissions=unix_permissions,
        )

    def add_deflated_entry(
        self,
        name: str | bytes,
        crc32: int = 0,
        compressed_size: int = 0,
        uncompressed_size: int = 0,
        use_data_descriptor: bool = False,
        *,
        modification_time: Optional[datetime] = None,
        unix_permissions: Optional[int] = None,
    ) -> EntryHandle:
        """Register a deflated entry and write its local header.

        The payload written afterwards must be ``compressed_size`` bytes of
        raw deflate data; compressing it is up to the caller.

        Raises:
            Same as add_stored_entry().
        """
        return self._register(
            name,
            StorageMode.DEFLATED,
            crc32,
            compressed_size,
            uncompressed_size,
            use_data_descriptor,
            modification_time=modification_time,
            unix_permissions=unix_permissions,
        )

    def add_empty_directory(
        self,
        name: str | bytes,
        *,
        modification_time: Optional[datetime] = None,
        unix_permissions: Optional[int] = None,
    ) -> EntryHandle:
        """Register a directory entry; a trailing ``/`` is added if missing.

        Raises:
            Same as add_stored_entry().
        """
        return self._register(
            name,
            StorageMode.STORED,
            0,
            0,
            0,
            False,
            is_directory=True,
            modification_time=modification_time,
            unix_permissions=unix_permissions,
        )

    def write(self, data: bytes) -> int:
        """Write payload bytes for the current entry and return the new offset.

        Raises:
            UseAfterCloseError: If the archive is closed.
            SizeLimitExceededError: If the archive would exceed its size cap.
        """
        self._check_open()
        return self._emit(bytes(data))

    def advance(self, byte_count: int) -> int:
        """Move the offset forward without passing bytes through the writer.

        Used when payload bytes are written to the underlying stream directly,
        or not at all when only predicting the archive size. The count is not
        checked against any entry's declared size.

        Raises:
            UseAfterCloseError: If the archive is closed.
            ZipFormatError: If ``byte_count`` is negative.
            SizeLimitExceededError: If the archive would exceed its size cap.
        """
        self._check_open()
        check_range("byte count", byte_count, ZIP64_MAX)
        self._check_limit(byte_count)
        return self._sink.advance(byte_count)

    def patch_last_entry_and_emit_descriptor(
        self,
        crc32: int,
        compressed_size: int,
        uncompressed_size: int,
        handle: Optional[EntryHandle] = None,
    ) -> int:
        """Record the final CRC and sizes of the newest entry and write its descriptor.

        The local header already written keeps its zero placeholders; the
        descriptor and the central directory carry the real values.

        Args:
            crc32: CRC32 of the uncompressed payload.
            compressed_size: Number of payload bytes written.
            uncompressed_size: Payload size before compression.
            handle: If given, must refer to the newest entry.

        Returns:
            Offset after the descriptor.

        Raises:
            UseAfterCloseError: If the archive is closed.
            NoOpenEntryError: If no entry is registered, or ``handle`` is stale.
            DescriptorNotExpectedError: If the entry takes no descriptor, or
                already has one.
            ZipFormatError: If a numeric field is invalid.
        """
        self._check_open()
        if not self._entries:
            raise NoOpenEntryError("No entry has been added to the archive")
        if handle is not None and handle.index != len(self._entries) - 1:
            raise NoOpenEntryError(
                f"Entry {handle.name!r} is not the most recently added entry"
            )

        entry = self._entries[-1]
        if not entry.uses_data_descriptor:
            raise DescriptorNotExpectedError(
                f"Entry {entry.filename!r} was not added with use_data_descriptor=True"
            )
        if entry.descriptor_written:
            raise DescriptorNotExpectedError(
                f"Data descriptor for entry {entry.filename!r} was already written"
            )

        check_range("CRC32", crc32, MAX_CRC32)
        check_range("compressed size", compressed_size, ZIP64_MAX)
        check_range("uncompressed size", uncompressed_size, ZIP64_MAX)

        descriptor = encode_data_descriptor(crc32, compressed_size, uncompressed_size)
        offset = self._emit(descriptor)

        entry.crc32 = crc32
        entry.compressed_size = compressed_size
        entry.uncompressed_size = uncompressed_size
        entry.descriptor_written = True

        __log__.debug(
            "Wrote %d-byte data descriptor for %r", len(descriptor), entry.filename
        )
        return offset

    def _write_central_directory(self) -> tuple[int, int]:
        """Write one central directory header per entry.

        Returns:
            Tuple of (cd_offset, cd_size).
        """
        cd_offset = self._sink.tell()
        for entry in self._entries:
            self._emit(encode_central_directory_header(entry))
        return cd_offset, self._sink.tell() - cd_offset

    def close(self) -> int:
        """Write the central directory and end records.

        Returns:
            Total size of the archive in bytes.

        Raises:
            AlreadyClosedError: If the archive was closed before.
        """
        if self._closed:
            raise AlreadyClosedError("Archive is already closed")

        try:
            cd_offset, cd_size = self._write_central_directory()

            zip64 = needs_zip64_end_record(
                len(self._entries),
                cd_offset,
                cd_size,
                any(entry.requires_zip64 for entry in self._entries),
            )
            if zip64:
                __log__.debug("Archive requires Zip64 end of central directory records")

            self._emit(
                encode_end_of_central_directory(
                    len(self._entries), cd_offset, cd_size, self._comment, zip64
                )
            )
        finally:
            # No further mutation, even if writing the trailer failed
            self._closed = True
            self._release_file()

        total = self._sink.tell()
        __log__.debug("Closed archive: %d entries, %d bytes", len(self._entries), total)
        return total

    def _release_file(self) -> None:
        if self._owned_file is not None:
            self._owned_file.close()
            self._owned_file = None

    def __enter__(self) -> "StreamingArchiveWriter":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit: finish the archive unless an error is propagating."""
        if exc_type is None and not self._closed:
            self.close()
        else:
            self._release_file()
