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
ZIP format constants: signatures, method codes, flags, versions, limits
and the fixed sizes of every structure the layout engine emits.
"""

# ZIP record signatures (magic numbers)
LOCAL_FILE_HEADER = 0x04034B50  # "PK\x03\x04"
CENTRAL_DIR_HEADER = 0x02014B50  # "PK\x01\x02"
END_OF_CENTRAL_DIR = 0x06054B50  # "PK\x05\x06"
ZIP64_END_OF_CENTRAL_DIR = 0x06064B50  # "PK\x06\x06"
ZIP64_END_OF_CENTRAL_DIR_LOCATOR = 0x07064B50  # "PK\x06\x07"
DATA_DESCRIPTOR = 0x08074B50  # "PK\x07\x08"

# Compression method codes
COMP_STORED = 0
COMP_DEFLATE = 8

# General purpose bit flags
FLAG_DATA_DESCRIPTOR = 0x0008  # Sizes and CRC follow the payload
FLAG_UTF8 = 0x0800  # UTF-8 encoding for filename

# Versions
VERSION_DEFAULT = 20  # 2.0: deflate, directories
VERSION_ZIP64 = 45  # 4.5: Zip64 extensions
VERSION_MADE_BY_DEFAULT = (3 << 8) | 63  # Unix host, APPNOTE 6.3

# Classic ZIP limits (32-bit / 16-bit fields)
MAX_FILE_SIZE = 0xFFFFFFFF
MAX_ENTRIES = 0xFFFF
MAX_CD_SIZE = 0xFFFFFFFF
MAX_CD_OFFSET = 0xFFFFFFFF
MAX_NAME_LENGTH = 0xFFFF
MAX_COMMENT_LENGTH = 0xFFFF
MAX_CRC32 = 0xFFFFFFFF

# Zip64 limits
ZIP64_MAX = 0xFFFFFFFFFFFFFFFF

# Extra field tags
ZIP64_EXTRA_FIELD_TAG = 0x0001
EXTENDED_TIMESTAMP_TAG = 0x5455  # "UT"
EXTENDED_TIMESTAMP_MTIME = 0x01

# Default Unix permissions
DEFAULT_FILE_PERMISSIONS = 0o644
DEFAULT_DIRECTORY_PERMISSIONS = 0o755

# Fixed-part sizes, excluding variable name/extra/comment
LOCAL_FILE_HEADER_SIZE = 30
CENTRAL_DIR_HEADER_SIZE = 46
END_OF_CENTRAL_DIR_SIZE = 22
ZIP64_END_OF_CENTRAL_DIR_SIZE = 56
ZIP64_LOCATOR_SIZE = 20

# Extra field sizes, including the 4-byte tag/length prefix
ZIP64_LOCAL_EXTRA_SIZE = 4 + 16  # uncompressed, compressed
ZIP64_CENTRAL_EXTRA_SIZE = 4 + 28  # uncompressed, compressed, offset, disk
EXTENDED_TIMESTAMP_EXTRA_SIZE = 4 + 5  # flags, mtime

# Data descriptor sizes, signature included
DATA_DESCRIPTOR_SIZE = 16
ZIP64_DATA_DESCRIPTOR_SIZE = 24
