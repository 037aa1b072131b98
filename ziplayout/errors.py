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
Custom exception classes for the ZIP layout engine.

Every error is raised synchronously by the call that violates the writer's
contract. None of them are retried internally.
"""


class ZipError(Exception):
    """Base exception class for all ZIP-related errors."""

    pass


class ZipFormatError(ZipError):
    """Raised for invalid input or malformed ZIP structures.

    This exception is raised when:
    - An entry name is empty, contains NUL bytes or is not valid UTF-8
    - A size, CRC or byte count is negative or out of range
    - A record being decoded has a wrong signature or is truncated
    """

    pass


class NameTooLongError(ZipError):
    """Raised when an encoded entry name does not fit in 16 bits."""

    pass


class NoOpenEntryError(ZipError):
    """Raised when a descriptor patch has no matching entry to patch.

    Either nothing has been registered yet, or the handle passed in does not
    refer to the most recently registered entry.
    """

    pass


class DescriptorNotExpectedError(ZipError):
    """Raised when patching an entry that does not take a data descriptor.

    This covers entries registered with ``use_data_descriptor=False`` and
    entries whose descriptor has already been written.
    """

    pass


class UseAfterCloseError(ZipError):
    """Raised when a writer is mutated after ``close()``."""

    pass


class AlreadyClosedError(ZipError):
    """Raised when ``close()`` is called on a closed writer."""

    pass


class SizeLimitExceededError(ZipError):
    """Raised when a write would take the archive past its size cap."""

    pass


class DuplicateFilenamesError(ZipError):
    """Raised when the same entry name is registered twice."""

    pass


class PathConflictError(ZipError):
    """Raised when a file path clashes with a directory path.

    For example, adding ``docs/readme.txt`` after ``docs`` was added as a
    file, or adding ``docs`` as a file after ``docs/`` became a directory.
    """

    pass
