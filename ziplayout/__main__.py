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
Command-line interface for ZIPLAYOUT (``ziplayout``).

Supported commands (via ``python -m ziplayout``):

- ``estimate`` : Predict the size of an archive from declared entries
- ``create``   : Write an archive from a list of files

Example usages:

    # How big will an archive with these two members be?
    python -m ziplayout estimate --stored file.doc:898291 \\
        --deflated family.tif:89281911:121908

    # Write archive.zip from two files, deflated, with data descriptors
    python -m ziplayout create archive.zip a.txt b.txt --deflate --data-descriptor
"""

import argparse
import json
import logging
import sys
import zlib
from pathlib import Path
from typing import List, Optional, Tuple

from . import __version__
from .errors import ZipError, ZipFormatError
from .estimator import estimate
from .utils import crc32
from .writer import StreamingArchiveWriter

_CHUNK_SIZE = 64 * 1024


def _print_error(message: str, exit_code: int = 1) -> None:
    """Print an error message to stderr and exit with the given code."""
    sys.stderr.write(f"ziplayout: {message}\n")
    sys.exit(exit_code)


def _parse_size(size_str: str) -> int:
    """
    Parse a size string (e.g., "64MB", "100KB", "1GB") into bytes.

    Raises:
        ValueError: If size string is invalid.
    """
    size_str = size_str.strip().upper()

    try:
        return int(size_str)
    except ValueError:
        pass

    if size_str.endswith("KB"):
        return int(size_str[:-2]) * 1024
    elif size_str.endswith("MB"):
        return int(size_str[:-2]) * 1024 * 1024
    elif size_str.endswith("GB"):
        return int(size_str[:-2]) * 1024 * 1024 * 1024
    else:
        raise ValueError(f"Invalid size format: {size_str} (expected number or number with KB/MB/GB suffix)")


def _split_spec(spec: str, fields: int) -> tuple[str, list[int]]:
    """Split ``NAME:SIZE[:SIZE]`` from the right, so names may contain colons."""
    parts = spec.rsplit(":", fields)
    if len(parts) != fields + 1 or not parts[0]:
        raise ValueError(f"Invalid entry specification: {spec!r}")
    return parts[0], [_parse_size(p) for p in parts[1:]]


class _EntryAction(argparse.Action):
    """Append ``(kind, value)`` to one shared list so entries keep command-line order."""

    def __init__(self, option_strings, dest, kind: str, **kwargs):
        self.kind = kind
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        entries = list(getattr(namespace, self.dest, None) or [])
        entries.append((self.kind, values))
        setattr(namespace, self.dest, entries)


def _cmd_estimate(
    entries: List[Tuple[str, str]],
    use_data_descriptor: bool = False,
    comment: str = "",
    as_json: bool = False,
) -> None:
    """
    Print the size of an archive holding the given entries, in the given order.

    Each item of *entries* is ``(kind, value)``:

    - ``stored`` values are ``NAME:SIZE``.
    - ``deflated`` values are ``NAME:UNCOMPRESSED:COMPRESSED``.
    - ``dir`` values are bare names.
    """
    parsed = []
    try:
        for kind, value in entries:
            if kind == "stored":
                parsed.append((kind, *_split_spec(value, 1)))
            elif kind == "deflated":
                parsed.append((kind, *_split_spec(value, 2)))
            else:
                parsed.append((kind, value, []))
    except ValueError as e:
        _print_error(str(e), exit_code=2)

    # Offsets, and with them Zip64 promotion, depend on entry order
    with estimate(comment=comment) as estimator:
        for kind, name, sizes in parsed:
            if kind == "stored":
                estimator.add_stored_entry(name, sizes[0], use_data_descriptor)
            elif kind == "deflated":
                estimator.add_deflated_entry(name, sizes[0], sizes[1], use_data_descriptor)
            else:
                estimator.add_empty_directory_entry(name)

    if as_json:
        print(json.dumps({"entries": len(parsed), "size": estimator.size}))
    else:
        print(estimator.size)


def _deflate(data: bytes) -> bytes:
    compressor = zlib.compressobj(level=zlib.Z_DEFAULT_COMPRESSION, wbits=-zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


def _add_file(
    z: StreamingArchiveWriter, name: str, path: Path, deflate: bool, use_data_descriptor: bool
) -> None:
    if deflate:
        # The compressed size must be known before the header goes out.
        data = path.read_bytes()
        payload = _deflate(data)
        checksum = crc32(data)
        if use_data_descriptor:
            z.add_deflated_entry(name, use_data_descriptor=True)
            z.write(payload)
            z.patch_last_entry_and_emit_descriptor(checksum, len(payload), len(data))
        else:
            z.add_deflated_entry(name, checksum, len(payload), len(data))
            z.write(payload)
        return

    if use_data_descriptor:
        handle = z.add_stored_entry(name, use_data_descriptor=True)
        checksum, size = 0, 0
        with open(path, "rb") as f:
            while chunk := f.read(_CHUNK_SIZE):
                checksum = crc32(chunk, checksum)
                size += len(chunk)
                z.write(chunk)
        z.patch_last_entry_and_emit_descriptor(checksum, size, size, handle)
        return

    checksum, size = 0, 0
    with open(path, "rb") as f:
        while chunk := f.read(_CHUNK_SIZE):
            checksum = crc32(chunk, checksum)
            size += len(chunk)
    z.add_stored_entry(name, checksum, size)
    written_checksum, written = 0, 0
    with open(path, "rb") as f:
        while written < size and (chunk := f.read(min(_CHUNK_SIZE, size - written))):
            written_checksum = crc32(chunk, written_checksum)
            written += len(chunk)
            z.write(chunk)
    # The header is already out; a file that changed between passes cannot be fixed up
    if written != size or written_checksum != checksum:
        raise ZipFormatError(f"File changed while being added: {path}")


def _cmd_create(
    archive: Path,
    sources: List[Path],
    deflate: bool = False,
    use_data_descriptor: bool = False,
    comment: str = "",
) -> None:
    """
    Create *archive* from the given files, stored under their base names.

    Directories are not walked; each source must be a regular file.
    """
    if archive.exists():
        _print_error(f"Refusing to overwrite existing archive: {archive}", exit_code=2)
    for src in sources:
        if not src.is_file():
            _print_error(f"Not a regular file: {src}", exit_code=2)

    with StreamingArchiveWriter(archive, comment=comment, auto_rename_duplicate_filenames=True) as z:
        for src in sources:
            _add_file(z, src.name, src, deflate, use_data_descriptor)
        total = z.close()
    print(total)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="ziplayout",
        description="ZIPLAYOUT - streaming ZIP/ZIP64 writer with exact size prediction.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # estimate
    p_estimate = subparsers.add_parser("estimate", help="Predict the size of an archive")
    p_estimate.add_argument(
        "--stored",
        dest="entries",
        action=_EntryAction,
        kind="stored",
        metavar="NAME:SIZE",
        help="Add an uncompressed entry (repeatable)",
    )
    p_estimate.add_argument(
        "--deflated",
        dest="entries",
        action=_EntryAction,
        kind="deflated",
        metavar="NAME:UNCOMPRESSED:COMPRESSED",
        help="Add a deflated entry (repeatable)",
    )
    p_estimate.add_argument(
        "--dir",
        dest="entries",
        action=_EntryAction,
        kind="dir",
        metavar="NAME",
        help="Add an empty directory (repeatable)",
    )
    p_estimate.add_argument(
        "--data-descriptor",
        action="store_true",
        help="Entries are written with trailing data descriptors",
    )
    p_estimate.add_argument("--comment", default="", help="Archive comment")
    p_estimate.add_argument("--json", action="store_true", help="Print the result as JSON")
    p_estimate.set_defaults(entries=[])

    # create
    p_create = subparsers.add_parser("create", help="Create an archive from files")
    p_create.add_argument("archive", type=Path, help="Path of the archive to create")
    p_create.add_argument("sources", type=Path, nargs="+", help="Files to add")
    p_create.add_argument("--deflate", action="store_true", help="Deflate entries instead of storing them")
    p_create.add_argument(
        "--data-descriptor",
        action="store_true",
        help="Write sizes and CRC after each entry instead of in its header",
    )
    p_create.add_argument("--comment", default="", help="Archive comment")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        if args.command == "estimate":
            _cmd_estimate(
                args.entries,
                use_data_descriptor=args.data_descriptor,
                comment=args.comment,
                as_json=args.json,
            )
        elif args.command == "create":
            _cmd_create(
                args.archive,
                args.sources,
                deflate=args.deflate,
                use_data_descriptor=args.data_descriptor,
                comment=args.comment,
            )
        else:
            parser.error(f"Unknown command: {args.command!r}")
    except ZipError as e:
        _print_error(str(e), exit_code=1)
    except FileNotFoundError as e:
        _print_error(f"File not found: {e.filename}", exit_code=2)
    except PermissionError as e:
        _print_error(f"Permission denied: {e.filename}", exit_code=2)
    except KeyboardInterrupt:
        _print_error("Interrupted by user", exit_code=130)


if __name__ == "__main__":
    main()
