"""Tests for data descriptor and end of central directory encoding."""

import io

import pytest

from ziplayout.constants import MAX_CD_OFFSET, MAX_ENTRIES, MAX_FILE_SIZE
from ziplayout.descriptor import (
    data_descriptor_size,
    encode_data_descriptor,
    encode_entry_descriptor,
)
from ziplayout.eocd import (
    encode_end_of_central_directory,
    end_of_central_directory_size,
    needs_zip64_end_record,
)
from ziplayout.errors import ZipFormatError
from ziplayout.structures import (
    parse_data_descriptor,
    parse_eocd,
    parse_zip64_eocd,
    parse_zip64_locator,
)


class TestDataDescriptor:
    """Tests for encode_data_descriptor."""

    def test_classic(self):
        data = encode_data_descriptor(0xCAFEBABE, 100, 200)
        assert len(data) == data_descriptor_size() == 16
        assert data[0:4] == b"PK\x07\x08"

        descriptor = parse_data_descriptor(io.BytesIO(data))
        assert descriptor.crc32 == 0xCAFEBABE
        assert descriptor.compressed_size == 100
        assert descriptor.uncompressed_size == 200

    def test_zip64_when_either_size_overflows(self):
        data = encode_data_descriptor(1, 100, MAX_FILE_SIZE + 1)
        assert len(data) == data_descriptor_size(zip64=True) == 24

        descriptor = parse_data_descriptor(io.BytesIO(data), is_zip64=True)
        assert descriptor.compressed_size == 100
        assert descriptor.uncompressed_size == MAX_FILE_SIZE + 1

    def test_boundary_stays_classic(self):
        assert len(encode_data_descriptor(0, MAX_FILE_SIZE, MAX_FILE_SIZE)) == 16

    def test_from_entry(self, make_entry):
        entry = make_entry(crc32=5, compressed_size=6, uncompressed_size=7)
        assert encode_entry_descriptor(entry) == encode_data_descriptor(5, 6, 7)


class TestEndOfCentralDirectory:
    """Tests for the EOCD record and its Zip64 variant."""

    def test_empty_archive(self):
        data = encode_end_of_central_directory(0, 0, 0)
        assert data == b"PK\x05\x06" + b"\x00" * 18
        assert len(data) == end_of_central_directory_size()

    def test_fields(self):
        data = encode_end_of_central_directory(3, 500, 120, comment=b"hi")
        eocd = parse_eocd(io.BytesIO(data))

        assert eocd.cd_records_on_disk == 3
        assert eocd.cd_records_total == 3
        assert eocd.cd_size == 120
        assert eocd.cd_offset == 500
        assert eocd.comment == b"hi"
        assert len(data) == end_of_central_directory_size(b"hi") == 24

    def test_comment_too_long(self):
        with pytest.raises(ZipFormatError):
            encode_end_of_central_directory(0, 0, 0, comment=b"x" * 65536)

    def test_zip64_layout(self):
        cd_offset = MAX_CD_OFFSET + 100
        data = encode_end_of_central_directory(2, cd_offset, 150, zip64=True)
        assert len(data) == end_of_central_directory_size(zip64=True) == 56 + 20 + 22

        f = io.BytesIO(data)
        zip64_eocd = parse_zip64_eocd(f)
        locator = parse_zip64_locator(f)
        eocd = parse_eocd(f)

        assert zip64_eocd.size == 44
        assert zip64_eocd.cd_records_total == 2
        assert zip64_eocd.cd_offset == cd_offset
        assert zip64_eocd.cd_size == 150
        assert locator.zip64_eocd_offset == cd_offset + 150
        assert locator.total_disks == 1
        assert eocd.cd_offset == MAX_CD_OFFSET
        assert eocd.cd_size == 150
        assert eocd.cd_records_total == 2

    def test_entry_count_sentinel(self):
        data = encode_end_of_central_directory(MAX_ENTRIES + 1, 10, 10, zip64=True)
        f = io.BytesIO(data)
        assert parse_zip64_eocd(f).cd_records_total == MAX_ENTRIES + 1
        parse_zip64_locator(f)
        assert parse_eocd(f).cd_records_total == MAX_ENTRIES

    @pytest.mark.parametrize(
        "num_entries, cd_offset, cd_size, any_zip64, expected",
        [
            (0, 0, 0, False, False),
            (MAX_ENTRIES, MAX_CD_OFFSET, MAX_FILE_SIZE, False, False),
            (MAX_ENTRIES + 1, 0, 0, False, True),
            (1, MAX_CD_OFFSET + 1, 46, False, True),
            (1, 0, MAX_FILE_SIZE + 1, False, True),
            (1, 0, 46, True, True),
        ],
    )
    def test_zip64_decision(self, num_entries, cd_offset, cd_size, any_zip64, expected):
        assert needs_zip64_end_record(num_entries, cd_offset, cd_size, any_zip64) is expected
