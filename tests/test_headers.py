"""Tests for local and central directory header encoding."""

import io
import stat
from datetime import timezone

import pytest

from ziplayout.constants import (
    FLAG_DATA_DESCRIPTOR,
    FLAG_UTF8,
    MAX_FILE_SIZE,
    VERSION_DEFAULT,
    VERSION_ZIP64,
)
from ziplayout.entry import StorageMode
from ziplayout.errors import NameTooLongError, ZipFormatError
from ziplayout.headers import (
    central_directory_header_size,
    encode_central_directory_header,
    encode_local_file_header,
    local_file_header_size,
)
from ziplayout.structures import (
    parse_central_directory_header,
    parse_extended_timestamp,
    parse_extra_fields,
    parse_local_file_header,
    parse_zip64_extra_field,
)


class TestLocalFileHeader:
    """Tests for encode_local_file_header."""

    def test_signature(self, make_entry):
        data = encode_local_file_header(make_entry())
        assert data[0:4] == b"\x50\x4b\x03\x04"

    def test_fields(self, make_entry, mtime):
        entry = make_entry(method=StorageMode.DEFLATED, compressed_size=321, uncompressed_size=1000)
        header = parse_local_file_header(io.BytesIO(encode_local_file_header(entry)))

        assert header.version == VERSION_DEFAULT
        assert header.flags == FLAG_UTF8
        assert header.compression_method == 8
        assert header.crc32 == 0xDEADBEEF
        assert header.compressed_size == 321
        assert header.uncompressed_size == 1000
        assert header.filename == b"file.doc"
        assert header.date_time == mtime

    def test_size_matches_helper(self, make_entry):
        data = encode_local_file_header(make_entry())
        assert len(data) == local_file_header_size(b"file.doc")
        assert len(data) == 30 + 8 + 9

    def test_extended_timestamp(self, make_entry, mtime):
        header = parse_local_file_header(io.BytesIO(encode_local_file_header(make_entry())))
        expected = int(mtime.replace(tzinfo=timezone.utc).timestamp())
        assert parse_extended_timestamp(header.extra) == expected

    def test_no_extra_without_timestamp(self, make_entry):
        entry = make_entry(extended_timestamp=False)
        header = parse_local_file_header(io.BytesIO(encode_local_file_header(entry)))
        assert header.extra == b""
        assert header.total_size == local_file_header_size(b"file.doc", timestamp=False)

    def test_data_descriptor_placeholders(self, make_entry):
        entry = make_entry(uses_data_descriptor=True)
        header = parse_local_file_header(io.BytesIO(encode_local_file_header(entry)))

        assert header.flags & FLAG_DATA_DESCRIPTOR
        assert header.crc32 == 0
        assert header.compressed_size == 0
        assert header.uncompressed_size == 0

    def test_data_descriptor_never_zip64(self, make_entry):
        entry = make_entry(uses_data_descriptor=True, uncompressed_size=MAX_FILE_SIZE + 1)
        data = encode_local_file_header(entry)
        assert len(data) == local_file_header_size(b"file.doc")
        assert parse_zip64_extra_field(parse_local_file_header(io.BytesIO(data)).extra) is None

    def test_zip64_sizes(self, make_entry):
        entry = make_entry(
            method=StorageMode.DEFLATED,
            compressed_size=5000,
            uncompressed_size=MAX_FILE_SIZE + 10,
        )
        data = encode_local_file_header(entry)
        header = parse_local_file_header(io.BytesIO(data))

        assert len(data) == local_file_header_size(b"file.doc", zip64=True)
        assert header.version == VERSION_ZIP64
        assert header.compressed_size == MAX_FILE_SIZE
        assert header.uncompressed_size == MAX_FILE_SIZE

        zip64 = parse_zip64_extra_field(header.extra)
        assert zip64.original_size == MAX_FILE_SIZE + 10
        assert zip64.compressed_size == 5000
        assert zip64.local_header_offset is None

    def test_offset_alone_does_not_promote_local_header(self, make_entry):
        entry = make_entry(local_header_offset=MAX_FILE_SIZE + 1)
        assert len(encode_local_file_header(entry)) == local_file_header_size(b"file.doc")

    def test_name_too_long(self, make_entry):
        with pytest.raises(NameTooLongError):
            encode_local_file_header(make_entry(name=b"a" * 65536))


class TestCentralDirectoryHeader:
    """Tests for encode_central_directory_header."""

    def test_signature(self, make_entry):
        data = encode_central_directory_header(make_entry())
        assert data[0:4] == b"\x50\x4b\x01\x02"

    def test_fields(self, make_entry):
        entry = make_entry(local_header_offset=1234)
        data = encode_central_directory_header(entry)
        header = parse_central_directory_header(io.BytesIO(data))

        assert len(data) == central_directory_header_size(b"file.doc")
        assert header.version_made_by >> 8 == 3
        assert header.version == VERSION_DEFAULT
        assert header.crc32 == 0xDEADBEEF
        assert header.compressed_size == 1000
        assert header.uncompressed_size == 1000
        assert header.local_header_offset == 1234
        assert header.comment == b""
        assert header.disk_num == 0
        assert stat.S_ISREG(header.external_attrs >> 16)
        assert (header.external_attrs >> 16) & 0o777 == 0o644

    def test_directory_attributes(self, make_entry):
        entry = make_entry(name=b"docs/", is_directory=True, compressed_size=0, uncompressed_size=0)
        header = parse_central_directory_header(io.BytesIO(encode_central_directory_header(entry)))
        assert stat.S_ISDIR(header.external_attrs >> 16)
        assert (header.external_attrs >> 16) & 0o777 == 0o755

    def test_custom_permissions(self, make_entry):
        entry = make_entry(unix_permissions=0o600)
        header = parse_central_directory_header(io.BytesIO(encode_central_directory_header(entry)))
        assert (header.external_attrs >> 16) & 0o777 == 0o600

    def test_descriptor_entry_carries_patched_values(self, make_entry):
        entry = make_entry(uses_data_descriptor=True, crc32=0x1234, compressed_size=7, uncompressed_size=9)
        header = parse_central_directory_header(io.BytesIO(encode_central_directory_header(entry)))
        assert header.flags & FLAG_DATA_DESCRIPTOR
        assert (header.crc32, header.compressed_size, header.uncompressed_size) == (0x1234, 7, 9)

    def test_zip64_for_offset(self, make_entry):
        entry = make_entry(local_header_offset=MAX_FILE_SIZE + 1)
        data = encode_central_directory_header(entry)
        header = parse_central_directory_header(io.BytesIO(data))

        assert len(data) == central_directory_header_size(b"file.doc", zip64=True)
        assert header.version == VERSION_ZIP64
        assert header.local_header_offset == MAX_FILE_SIZE
        assert header.compressed_size == MAX_FILE_SIZE
        assert header.uncompressed_size == MAX_FILE_SIZE

        zip64 = parse_zip64_extra_field(header.extra)
        assert zip64.original_size == 1000
        assert zip64.compressed_size == 1000
        assert zip64.local_header_offset == MAX_FILE_SIZE + 1
        assert zip64.disk_start == 0

    def test_values_at_field_maximum_written_raw(self, make_entry):
        entry = make_entry(
            compressed_size=MAX_FILE_SIZE,
            uncompressed_size=MAX_FILE_SIZE,
            local_header_offset=MAX_FILE_SIZE,
        )
        assert not entry.requires_zip64
        data = encode_central_directory_header(entry)
        header = parse_central_directory_header(io.BytesIO(data))

        assert len(data) == central_directory_header_size(b"file.doc")
        assert header.version == VERSION_DEFAULT
        assert header.local_header_offset == MAX_FILE_SIZE
        assert parse_zip64_extra_field(header.extra) is None

    def test_zip64_extra_precedes_timestamp(self, make_entry):
        entry = make_entry(uncompressed_size=MAX_FILE_SIZE + 1)
        header = parse_central_directory_header(io.BytesIO(encode_central_directory_header(entry)))
        assert list(parse_extra_fields(header.extra)) == [0x0001, 0x5455]


class TestDecoding:
    """Tests for the decoders' handling of bad input."""

    def test_wrong_signature(self, make_entry):
        data = encode_central_directory_header(make_entry())
        with pytest.raises(ZipFormatError):
            parse_local_file_header(io.BytesIO(data))

    def test_truncated_name(self, make_entry):
        data = encode_local_file_header(make_entry())
        with pytest.raises(ZipFormatError):
            parse_local_file_header(io.BytesIO(data[:32]))

    def test_total_size_matches_encoding(self, make_entry):
        data = encode_central_directory_header(make_entry())
        assert parse_central_directory_header(io.BytesIO(data)).total_size == len(data)
