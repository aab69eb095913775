"""Pathspec-based file discovery.

This module walks a source tree once, prunes excluded directories with
the pathspec library, and hands each format scanner the files that match
its own pattern set.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Optional, TypeVar

import pathspec

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Default excluded directories (build output, dependency trees)
DEFAULT_EXCLUDE_PATTERNS: list[str] = [
    "node_modules",
    ".next",
    "dist",
    ".git",
    "vendor",
    "build",
    ".mastra",
    "coverage",
    "__pycache__",
    ".venv",
    "venv",
    "target",
]

# Per-format file patterns (gitwildmatch; no slash means any depth)
FILE_PATTERNS: dict[str, list[str]] = {
    "properties": [
        "application*.properties",
        "application*.yaml",
        "application*.yml",
        "bootstrap*.properties",
        "bootstrap*.yaml",
        "bootstrap*.yml",
        "*.properties",
    ],
    "dockerfile": [
        "Dockerfile*",
    ],
    "dotenv": [
        ".env*",
        "*.env",
    ],
    "compose": [
        "docker-compose*.yml",
        "docker-compose*.yaml",
        "compose*.yml",
        "compose*.yaml",
    ],
    "kubernetes": [
        "*.yaml",
        "*.yml",
    ],
}


def build_exclude_spec(exclude_patterns: Iterable[str]) -> pathspec.PathSpec:
    """Compile exclude entries into a directory-matching pathspec.

    Each entry names a directory (or a glob over directory names), which
    is excluded at any depth, the same as ``**/<entry>/**``.
    """
    lines = []
    for pattern in exclude_patterns:
        pattern = pattern.strip().rstrip("/")
        if pattern:
            lines.append(f"{pattern}/")
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


class FileDiscovery:
    """Candidate file finder for every supported format."""

    def __init__(self, base_path: Path, exclude_patterns: Optional[list[str]] = None):
        """
        Initialize the finder.

        Args:
            base_path: Root directory to walk
            exclude_patterns: Directory names to skip (defaults to DEFAULT_EXCLUDE_PATTERNS)
        """
        self.base_path = Path(base_path).resolve()
        if exclude_patterns is None:
            exclude_patterns = DEFAULT_EXCLUDE_PATTERNS
        self.exclude_patterns = list(exclude_patterns)
        self._exclude_spec = build_exclude_spec(self.exclude_patterns)
        self._format_specs = {
            kind: pathspec.PathSpec.from_lines("gitwildmatch", patterns)
            for kind, patterns in FILE_PATTERNS.items()
        }
        self._files: Optional[list[str]] = None

    def _walk(self) -> list[str]:
        """Collect relative POSIX paths of all non-excluded files."""
        files: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self.base_path, onerror=self._on_walk_error):
            rel_dir = os.path.relpath(dirpath, self.base_path)
            rel_dir = "" if rel_dir == "." else rel_dir.replace(os.sep, "/") + "/"

            # prune in place so os.walk never descends into excluded directories
            dirnames[:] = sorted(
                d for d in dirnames
                if not self._exclude_spec.match_file(f"{rel_dir}{d}/")
            )
            for filename in sorted(filenames):
                rel_path = f"{rel_dir}{filename}"
                if not self._exclude_spec.match_file(rel_path):
                    files.append(rel_path)
        return files

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.warning(f"Cannot list directory {error.filename}: {error.strerror}")

    @property
    def files(self) -> list[str]:
        if self._files is None:
            self._files = self._walk()
        return self._files

    def find(self, kind: str) -> list[Path]:
        """
        Find files for a format.

        Args:
            kind: One of the FILE_PATTERNS keys

        Returns:
            Sorted absolute paths, each file listed once even if several patterns match

        Raises:
            KeyError: Unknown format kind
        """
        spec = self._format_specs[kind]
        return [self.base_path / rel for rel in self.files if spec.match_file(rel)]


def read_text(path: Path) -> str:
    """Read a candidate file as UTF-8, replacing undecodable bytes.

    Raises:
        OSError: The file cannot be read
    """
    return Path(path).read_text(encoding="utf-8", errors="replace")


def scan_matching_files(
    base_path: Path,
    kind: str,
    parse: Callable[[str, str], list[T]],
    exclude_patterns: Optional[list[str]] = None,
    discovery: Optional[FileDiscovery] = None,
    quiet: bool = False,
) -> tuple[list[T], list[str]]:
    """Run a content parser over every file of one format.

    Args:
        base_path: Root directory
        kind: Format key in FILE_PATTERNS
        parse: ``parse(content, file_path)`` returning records for one file
        exclude_patterns: Directory exclusions (ignored when discovery is given)
        discovery: Shared finder so one walk can serve several formats
        quiet: Swallow unreadable files without reporting them

    Returns:
        Tuple of (records, error messages for unreadable files)
    """
    if discovery is None:
        discovery = FileDiscovery(base_path, exclude_patterns)

    records: list[T] = []
    errors: list[str] = []
    for file_path in discovery.find(kind):
        try:
            content = read_text(file_path)
        except OSError as e:
            if quiet:
                logger.debug(f"Skipping unreadable {kind} file {file_path}: {e}")
            else:
                logger.warning(f"Failed to read {file_path}: {e}")
                errors.append(f"Failed to read {file_path}: {e}")
            continue
        records.extend(parse(content, str(file_path)))
    return records, errors
