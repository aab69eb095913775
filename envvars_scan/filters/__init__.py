"""File discovery for envvars-scan.

This module provides pathspec-based candidate file discovery with
directory exclusion.
"""

from envvars_scan.filters.discovery import (
    FileDiscovery,
    build_exclude_spec,
    read_text,
    scan_matching_files,
    DEFAULT_EXCLUDE_PATTERNS,
    FILE_PATTERNS,
)

__all__ = [
    "FileDiscovery",
    "build_exclude_spec",
    "read_text",
    "scan_matching_files",
    "DEFAULT_EXCLUDE_PATTERNS",
    "FILE_PATTERNS",
]
