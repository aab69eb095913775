"""Semgrep code-pattern module.

This module runs semgrep with the built-in and custom rule sets and
converts its findings into environment variable occurrences.
"""

from envvars_scan.semgrep.runner import (
    FindingSource,
    SemgrepConfig,
    SemgrepError,
    SemgrepExecutionError,
    SemgrepNotFoundError,
    SemgrepOutputError,
    SemgrepRunner,
    is_semgrep_installed,
)
from envvars_scan.semgrep.adapter import (
    build_rules_document,
    clean_default_value,
    findings_to_occurrences,
    parse_check_id,
    parse_message,
    scan_code,
)

__all__ = [
    "FindingSource",
    "SemgrepConfig",
    "SemgrepError",
    "SemgrepExecutionError",
    "SemgrepNotFoundError",
    "SemgrepOutputError",
    "SemgrepRunner",
    "is_semgrep_installed",
    "build_rules_document",
    "clean_default_value",
    "findings_to_occurrences",
    "parse_check_id",
    "parse_message",
    "scan_code",
]
