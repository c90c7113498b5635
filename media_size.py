# /// script
# dependencies = [
#   "python-dotenv",
#   "typeguard",
# ]
# ///

"""A tool to list media files in a directory tree (or a .txt manifest) with their sizes"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, TextIO

from dotenv import load_dotenv
from typeguard import typechecked

logger = logging.getLogger(__name__)


# Extensions are stored lowercase without the leading dot
MEDIA_EXTENSIONS = frozenset({"png", "bmp", "dds", "tga", "mp4", "avi", "mov", "mkv"})

MANIFEST_EXTENSION = ".txt"

SIZE_UNITS = ("B", "KB", "MB", "GB")

DEFAULT_LOG_LEVEL = "WARNING"


# ============================================================================
# Errors
# ============================================================================

class MediaSizeError(Exception):
    """Base class for errors that end the run with exit code 1."""


class MissingArgumentError(MediaSizeError):
    """No input path was given."""


class NotFoundError(MediaSizeError):
    """The input path does not exist."""


class InvalidInputError(MediaSizeError):
    """The input path exists but cannot be scanned."""


class ScanError(MediaSizeError):
    """A directory or manifest could not be read during collection."""


class SizeQueryError(MediaSizeError):
    """A collected file could not be sized when the report was built."""


class FileOpenError(MediaSizeError):
    """The output file could not be opened for appending. Not fatal."""


# ============================================================================
# Data
# ============================================================================

@dataclass(frozen=True)
class RunConfig:
    """Parsed command line arguments."""

    input_path: Path
    output_file: Optional[Path] = None
    summary_only: bool = False


@dataclass(frozen=True)
class ResolvedSource:
    """Input path plus how it should be scanned."""

    kind: Literal["directory", "manifest"]
    path: Path


@dataclass(frozen=True)
class ReportLine:
    """One row of the report."""

    filename: str
    size: int


# ============================================================================
# Filesystem access
# ============================================================================

class FileSystem:
    """Every disk operation the scanner needs, so tests can swap in a fake."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def is_file(self, path: Path) -> bool:
        return path.is_file()

    def is_symlink(self, path: Path) -> bool:
        return path.is_symlink()

    def list_dir(self, path: Path) -> list[Path]:
        return list(path.iterdir())

    def file_size(self, path: Path) -> int:
        return path.stat().st_size

    # surrogateescape round-trips file names that are not valid UTF-8
    def read_lines(self, path: Path) -> list[str]:
        return path.read_text(encoding="utf-8", errors="surrogateescape").splitlines()

    def append_line(self, path: Path, line: str) -> None:
        with open(path, "a", encoding="utf-8", errors="surrogateescape") as f:
            f.write(line + "\n")


# ============================================================================
# Resolve
# ============================================================================

@typechecked
def resolve_source(raw: Path, fs: FileSystem) -> ResolvedSource:
    """Classify the input path as a directory to walk or a manifest to read."""
    if not fs.exists(raw):
        raise NotFoundError(f"File path does not exist: {raw}")

    if fs.is_dir(raw):
        return ResolvedSource("directory", raw)

    if fs.is_file(raw):
        if raw.suffix.lower() != MANIFEST_EXTENSION:
            raise InvalidInputError(f"Input file must be of type {MANIFEST_EXTENSION}: {raw}")
        return ResolvedSource("manifest", raw)

    raise InvalidInputError(f"File path could not be determined: {raw}")


# ============================================================================
# Collect
# ============================================================================

class Collector:
    """Gathers matching files from a directory tree or a manifest."""

    def __init__(self, file_types: frozenset[str], fs: FileSystem):
        self.file_types = file_types
        self.fs = fs

    def matches(self, path: Path) -> bool:
        ext = path.suffix
        if ext.startswith("."):
            ext = ext[1:]
        return ext.lower() in self.file_types

    @typechecked
    def collect(self, source: ResolvedSource) -> list[Path]:
        if source.kind == "directory":
            return self.collect_directory(source.path)
        return self.collect_manifest(source.path)

    @typechecked
    def collect_directory(self, root: Path) -> list[Path]:
        """
        Recursively collect matching files under root.

        Order follows directory enumeration. Symlinked directories are not
        descended into; symlinked files count like regular files.
        """
        found: list[Path] = []
        self._walk(root, found)
        return found

    def _walk(self, root: Path, found: list[Path]) -> None:
        # Pre-order: a subdirectory's files come right after the subdirectory itself.
        # One open listing per directory level, no recursion
        pending = [iter(self._list(root))]
        while pending:
            entry = next(pending[-1], None)
            if entry is None:
                pending.pop()
                continue

            if self.fs.is_dir(entry):
                if self.fs.is_symlink(entry):
                    logger.debug(f"Not following directory symlink: {entry}")
                else:
                    pending.append(iter(self._list(entry)))
            elif self.fs.is_file(entry):
                if self.matches(entry):
                    found.append(entry)
            else:
                logger.debug(f"Skipping special file: {entry}")

    @typechecked
    def collect_manifest(self, manifest: Path) -> list[Path]:
        """
        Collect files named by each line of a manifest.

        Directories listed in the manifest are scanned one level deep only.
        Blank lines and paths that do not exist are skipped.
        """
        try:
            lines = self.fs.read_lines(manifest)
        except OSError as e:
            raise ScanError(f"Could not read manifest {manifest}: {e}") from e

        found: list[Path] = []
        for line_no, line in enumerate(lines, start=1):
            if not line:
                continue

            path = Path(line)
            if not self.fs.exists(path):
                logger.debug(f"Manifest line {line_no}: skipping missing path {line!r}")
                continue

            if self.fs.is_dir(path):
                for entry in self._list(path):
                    if self.fs.is_file(entry) and self.matches(entry):
                        found.append(entry)
            elif self.fs.is_file(path):
                if self.matches(path):
                    found.append(path)
            else:
                logger.debug(f"Manifest line {line_no}: skipping special file {line!r}")

        return found

    def _list(self, directory: Path) -> list[Path]:
        try:
            return self.fs.list_dir(directory)
        except OSError as e:
            raise ScanError(f"Could not read directory {directory}: {e}") from e


# ============================================================================
# Report
# ============================================================================

@typechecked
def human_readable_size(size_bytes: int) -> str:
    """Format a byte count as e.g. '1.50 MB'. GB is the largest unit."""
    size = float(size_bytes)
    unit_index = 0

    while size >= 1024.0 and unit_index < len(SIZE_UNITS) - 1:
        size /= 1024.0
        unit_index += 1

    return f"{size:.2f} {SIZE_UNITS[unit_index]}"


def column_width(paths: list[Path]) -> int:
    """
    Width of the filename column: the longest full path, not the longest name.

    Paths are measured as pathlib prints them, so a manifest line such as
    './a.png' or 'dir//a.png' counts as 'a.png' or 'dir/a.png'.
    """
    return max((len(str(p)) for p in paths), default=0)


class Reporter:
    """Prints the size table and total, optionally appending rows to a file."""

    def __init__(self, fs: FileSystem, out: Optional[TextIO] = None):
        self.fs = fs
        self.out = out if out is not None else sys.stdout

    @typechecked
    def describe(self, path: Path) -> ReportLine:
        # The file may have gone away since it was collected
        try:
            size = self.fs.file_size(path)
        except OSError as e:
            raise SizeQueryError(f"Could not read size of {path}: {e}") from e
        return ReportLine(path.name, size)

    @typechecked
    def report(self, paths: list[Path], config: RunConfig) -> int:
        """Write the report and return the total size in bytes."""
        width = column_width(paths)
        total = 0

        if not config.summary_only:
            # The label's leading newline counts toward the column width
            print("\nFilename".ljust(width) + "Size (bytes)", file=self.out)
            print("-" * (width + 12), file=self.out)

        for path in paths:
            line = self.describe(path)
            total += line.size

            if config.summary_only:
                continue

            row = line.filename.ljust(width) + human_readable_size(line.size)
            print(row, file=self.out)

            if config.output_file is not None:
                try:
                    self._append(config.output_file, row)
                except FileOpenError as e:
                    logger.error(str(e))

        print(f"\nFiles found: {len(paths)} Total file size: {human_readable_size(total)}", file=self.out)
        return total

    def _append(self, output_file: Path, row: str) -> None:
        try:
            self.fs.append_line(output_file, row)
        except OSError as e:
            raise FileOpenError(f"Could not open file {output_file} for writing: {e}") from e


# ============================================================================
# CLI
# ============================================================================

def print_usage() -> None:
    """Print usage instructions."""
    print("Usage: media_size <path> [--output <file>] [--summary-only]")
    print()
    print("List media files and their sizes.")
    print()
    print("Arguments:")
    print("  <path>              Directory to scan recursively, or a .txt file")
    print("                      listing one file or directory per line")
    print()
    print("Options:")
    print("  --output <file>     Also append each report row to this file")
    print("  --summary-only      Only print the file count and total size")
    print("  --help, -h          Show this help message")
    print()
    print(f"Extensions: {', '.join(sorted(MEDIA_EXTENSIONS))}")
    print()
    print("Environment Variables:")
    print(f"  MEDIA_SIZE_LOG_LEVEL  Logging level (default: {DEFAULT_LOG_LEVEL})")


@typechecked
def parse_args(args: list[str]) -> RunConfig:
    """Parse command line arguments."""
    input_path: Optional[str] = None
    output_file: Optional[Path] = None
    summary_only = False

    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--output" and i + 1 < len(args):
            # An empty value means no output file
            output_file = Path(args[i + 1]) if args[i + 1] else None
            i += 2
            continue

        if arg == "--summary-only":
            summary_only = True
        elif arg == "--help" or arg == "-h":
            print_usage()
            sys.exit(0)
        elif not input_path:
            # Anything else fills the path until a non-empty one is seen, then is ignored
            input_path = arg
        i += 1

    if not input_path:
        raise MissingArgumentError("Please provide a directory or file path")

    return RunConfig(input_path=Path(input_path), output_file=output_file, summary_only=summary_only)


def configure_logging() -> None:
    level_name = os.getenv("MEDIA_SIZE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.getLevelName(DEFAULT_LOG_LEVEL)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def allow_raw_filenames() -> None:
    """Write undecodable file name bytes back out as-is instead of failing."""
    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(errors="surrogateescape")


def eprint(*args):
    print(*args, file=sys.stderr)


def main(argv: Optional[list[str]] = None) -> int:
    """List media files under a directory or manifest with their sizes"""
    load_dotenv()
    allow_raw_filenames()
    configure_logging()

    if argv is None:
        argv = sys.argv[1:]

    fs = FileSystem()
    try:
        config = parse_args(argv)
        source = resolve_source(config.input_path, fs)
        logger.info(f"Scanning {source.kind} {source.path}")

        paths = Collector(MEDIA_EXTENSIONS, fs).collect(source)
        Reporter(fs).report(paths, config)
    except MediaSizeError as e:
        eprint(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
