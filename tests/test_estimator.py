"""Tests for size estimation."""

import io
import zlib

import pytest

from ziplayout import StreamingArchiveWriter, estimate
from ziplayout.descriptor import data_descriptor_size
from ziplayout.eocd import end_of_central_directory_size
from ziplayout.errors import NameTooLongError
from ziplayout.headers import central_directory_header_size, local_file_header_size


class TestEstimate:
    """Tests for the estimate() context manager."""

    def test_example_archive(self):
        with estimate() as estimator:
            estimator.add_stored_entry("file.doc", size=898291)
            estimator.add_deflated_entry("family.tif", uncompressed_size=89281911, compressed_size=121908)

        expected = (
            local_file_header_size(b"file.doc")
            + 898291
            + local_file_header_size(b"family.tif")
            + 121908
            + central_directory_header_size(b"file.doc")
            + central_directory_header_size(b"family.tif")
            + end_of_central_directory_size()
        )
        assert estimator.size == expected

    def test_empty(self):
        with estimate() as estimator:
            pass
        assert estimator.size == 22

    def test_chaining(self):
        with estimate() as estimator:
            estimator.add_empty_directory_entry("docs").add_stored_entry("docs/a", size=1)
        assert estimator.size == (
            local_file_header_size(b"docs/")
            + local_file_header_size(b"docs/a")
            + 1
            + central_directory_header_size(b"docs/")
            + central_directory_header_size(b"docs/a")
            + 22
        )

    def test_data_descriptor(self):
        with estimate() as plain:
            plain.add_stored_entry("a.bin", size=100)
        with estimate() as described:
            described.add_stored_entry("a.bin", size=100, use_data_descriptor=True)
        assert described.size - plain.size == data_descriptor_size()

    def test_writer_options(self):
        with estimate(comment="hello", write_timestamps=False) as estimator:
            estimator.add_stored_entry("a", size=0)
        assert estimator.size == 30 + 1 + 46 + 1 + 22 + 5

    def test_size_unset_until_finished(self):
        with estimate() as estimator:
            estimator.add_stored_entry("a", size=0)
            assert estimator.size is None

    def test_errors_propagate(self):
        with pytest.raises(NameTooLongError):
            with estimate() as estimator:
                estimator.add_stored_entry("x" * 70000, size=1)
        assert estimator.size is None

    @pytest.mark.parametrize("use_data_descriptor", [False, True])
    def test_matches_real_archive(self, use_data_descriptor):
        files = {
            "readme.md": b"# Title\n" * 20,
            "data.bin": bytes(range(256)) * 40,
        }
        packed = {}
        for name, data in files.items():
            compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
            packed[name] = compressor.compress(data) + compressor.flush()

        buffer = io.BytesIO()
        with StreamingArchiveWriter(buffer) as z:
            data = files["readme.md"]
            if use_data_descriptor:
                z.add_stored_entry("readme.md", use_data_descriptor=True)
                z.write(data)
                z.patch_last_entry_and_emit_descriptor(zlib.crc32(data), len(data), len(data))
            else:
                z.add_stored_entry("readme.md", zlib.crc32(data), len(data))
                z.write(data)

            data = files["data.bin"]
            if use_data_descriptor:
                z.add_deflated_entry("data.bin", use_data_descriptor=True)
                z.write(packed["data.bin"])
                z.patch_last_entry_and_emit_descriptor(zlib.crc32(data), len(packed["data.bin"]), len(data))
            else:
                z.add_deflated_entry("data.bin", zlib.crc32(data), len(packed["data.bin"]), len(data))
                z.write(packed["data.bin"])

        with estimate() as estimator:
            estimator.add_stored_entry("readme.md", size=len(files["readme.md"]), use_data_descriptor=use_data_descriptor)
            estimator.add_deflated_entry(
                "data.bin",
                uncompressed_size=len(files["data.bin"]),
                compressed_size=len(packed["data.bin"]),
                use_data_descriptor=use_data_descriptor,
            )

        assert estimator.size == len(buffer.getvalue())
