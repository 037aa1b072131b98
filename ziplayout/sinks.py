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
Byte sinks the archive writer pushes its output through.

Both sinks keep their own cursor rather than asking the underlying stream,
so a WriteSink works on pipes and sockets that cannot ``tell()``. The
NullSink never sees payload bytes, only their count.
"""

from typing import BinaryIO, Protocol, runtime_checkable

from .errors import ZipFormatError


@runtime_checkable
class ByteSink(Protocol):
    """Forward-only byte destination that tracks its offset."""

    def write(self, data: bytes) -> int:
        """Write bytes and return the new offset."""
        ...

    def advance(self, byte_count: int) -> int:
        """Account for bytes that did not pass through write()."""
        ...

    def tell(self) -> int:
        """Return the current offset."""
        ...


def _check_byte_count(byte_count: int) -> None:
    if byte_count < 0:
        raise ZipFormatError(
            f"Invalid byte count: {byte_count} (must be non-negative)"
        )


class NullSink:
    """Sink that discards everything and only counts."""

    def __init__(self, offset: int = 0):
        _check_byte_count(offset)
        self._offset = offset

    def write(self, data: bytes) -> int:
        self._offset += len(data)
        return self._offset

    def advance(self, byte_count: int) -> int:
        _check_byte_count(byte_count)
        self._offset += byte_count
        return self._offset

    def tell(self) -> int:
        return self._offset

    def __repr__(self) -> str:
        return f"NullSink(offset={self._offset})"


class WriteSink:
    """Sink that forwards bytes to a binary file-like object.

    Example:
        with open("archive.zip", "wb") as f:
            sink = WriteSink(f)
            sink.write(b"PK\\x03\\x04")
    """

    def __init__(self, file: BinaryIO, offset: int = 0):
        """Wrap a writable binary stream.

        Args:
            file: Object with a ``write()`` method.
            offset: Starting offset, for streams that already hold data.

        Raises:
            ZipFormatError: If the object cannot be written to.
        """
        if not hasattr(file, "write"):
            raise ZipFormatError("File-like object must have a write() method")
        _check_byte_count(offset)
        self._file = file
        self._offset = offset

    @property
    def file(self) -> BinaryIO:
        return self._file

    def write(self, data: bytes) -> int:
        """Write all of ``data`` and return the new offset.

        Raises:
            ZipFormatError: If the stream reports a short write.
        """
        written = self._file.write(data)
        # Some file-like objects (response bodies, wrappers) return None.
        if written is not None and written != len(data):
            raise ZipFormatError(
                f"Write operation failed: expected to write {len(data)} bytes, "
                f"wrote {written} bytes"
            )
        self._offset += len(data)
        return self._offset

    def advance(self, byte_count: int) -> int:
        """Account for bytes the caller wrote to ``file`` directly."""
        _check_byte_count(byte_count)
        self._offset += byte_count
        return self._offset

    def tell(self) -> int:
        return self._offset

    def __repr__(self) -> str:
        return f"WriteSink(file={self._file!r}, offset={self._offset})"
