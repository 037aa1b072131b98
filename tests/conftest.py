from datetime import datetime

import pytest

from ziplayout.entry import EntryRecord, StorageMode

MTIME = datetime(2024, 5, 17, 10, 30, 42)


@pytest.fixture
def mtime():
    return MTIME


@pytest.fixture
def make_entry():
    def factory(**overrides):
        fields = dict(
            name=b"file.doc",
            method=StorageMode.STORED,
            local_header_offset=0,
            crc32=0xDEADBEEF,
            compressed_size=1000,
            uncompressed_size=1000,
            modification_time=MTIME,
        )
        fields.update(overrides)
        return EntryRecord(**fields)

    return factory
