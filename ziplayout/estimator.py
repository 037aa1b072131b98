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
Archive size prediction.

Runs a StreamingArchiveWriter against a NullSink with fake entries. The
sizes of the entries must be known up front; nothing is compressed and no
payload bytes exist.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from .sinks import NullSink
from .writer import StreamingArchiveWriter


class SizeEstimator:
    """Declares fake entries on a counting writer.

    Use through ``estimate()`` rather than directly.
    """

    def __init__(self, writer: StreamingArchiveWriter):
        self._writer = writer
        self._size: Optional[int] = None

    @property
    def size(self) -> Optional[int]:
        """Predicted archive size, available once the estimate is finished."""
        return self._size

    def add_stored_entry(
        self, name: str | bytes, size: int, use_data_descriptor: bool = False
    ) -> "SizeEstimator":
        """Add a fake uncompressed entry.

        Args:
            name: Entry name; names are variable width in the archive.
            size: Payload size in bytes.
            use_data_descriptor: Whether the real archive will write a data
                descriptor after this entry. Must match how the archive is
                really written, or the estimate will be off.

        Returns:
            The estimator, for chaining.
        """
        self._writer.add_stored_entry(name, crc32=0, size=size, use_data_descriptor=use_data_descriptor)
        self._writer.advance(size)
        if use_data_descriptor:
            self._writer.patch_last_entry_and_emit_descriptor(0, size, size)
        return self

    def add_deflated_entry(
        self,
        name: str | bytes,
        uncompressed_size: int,
        compressed_size: int,
        use_data_descriptor: bool = False,
    ) -> "SizeEstimator":
        """Add a fake deflated entry.

        Args:
            name: Entry name.
            uncompressed_size: Size of the data before compression.
            compressed_size: Size of the deflated payload.
            use_data_descriptor: See add_stored_entry().

        Returns:
            The estimator, for chaining.
        """
        self._writer.add_deflated_entry(
            name,
            crc32=0,
            compressed_size=compressed_size,
            uncompressed_size=uncompressed_size,
            use_data_descriptor=use_data_descriptor,
        )
        self._writer.advance(compressed_size)
        if use_data_descriptor:
            self._writer.patch_last_entry_and_emit_descriptor(0, compressed_size, uncompressed_size)
        return self

    def add_empty_directory_entry(self, name: str | bytes) -> "SizeEstimator":
        """Add an empty directory."""
        self._writer.add_empty_directory(name)
        return self

    def finish(self) -> int:
        """Close the underlying writer and return the archive size."""
        self._size = self._writer.close()
        return self._size


@contextmanager
def estimate(**writer_kwargs) -> Iterator[SizeEstimator]:
    """Predict the size of an archive.

    Keyword arguments are passed to StreamingArchiveWriter and must match
    the ones the real archive is written with (comment, timestamps).

    Example:
        with estimate() as estimator:
            estimator.add_stored_entry("file.doc", size=898291)
            estimator.add_deflated_entry(
                "family.tif", uncompressed_size=89281911, compressed_size=121908
            )
        expected_zip_size = estimator.size
    """
    writer = StreamingArchiveWriter(NullSink(), **writer_kwargs)
    estimator = SizeEstimator(writer)
    yield estimator
    estimator.finish()
