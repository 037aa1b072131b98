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
ZIPLAYOUT - Streaming ZIP layout engine with exact archive size prediction.

This library writes ZIP and ZIP64 archives strictly front to back and can run
the very same layout against a counting sink, so the size of an archive is
known before a single byte of it is produced. Only the Python standard
library is used.
"""

from .entry import EntryHandle, EntryRecord, StorageMode
from .errors import (
    AlreadyClosedError,
    DescriptorNotExpectedError,
    DuplicateFilenamesError,
    NameTooLongError,
    NoOpenEntryError,
    PathConflictError,
    SizeLimitExceededError,
    UseAfterCloseError,
    ZipError,
    ZipFormatError,
)
from .estimator import SizeEstimator, estimate
from .sinks import ByteSink, NullSink, WriteSink
from .writer import StreamingArchiveWriter

__all__ = [
    "StreamingArchiveWriter",
    "SizeEstimator",
    "estimate",
    "ByteSink",
    "NullSink",
    "WriteSink",
    "EntryHandle",
    "EntryRecord",
    "StorageMode",
    "ZipError",
    "ZipFormatError",
    "NameTooLongError",
    "NoOpenEntryError",
    "DescriptorNotExpectedError",
    "UseAfterCloseError",
    "AlreadyClosedError",
    "SizeLimitExceededError",
    "DuplicateFilenamesError",
    "PathConflictError",
]

__version__ = "0.1.0"
