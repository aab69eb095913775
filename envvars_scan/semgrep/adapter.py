"""Semgrep findings adapter.

Builds the merged rule document, runs semgrep through a FindingSource
and turns its findings into EnvVarOccurrence records.

Rule messages encode the variable name, optionally followed by the
captured default expression: ``VAR_NAME`` or ``VAR_NAME|||default``.
"""

from importlib import resources
import logging
from pathlib import Path
import re
import tempfile
from typing import Any, Optional

import yaml

from envvars_scan.config import CustomPattern
from envvars_scan.core.reconcile import reconcile
from envvars_scan.core.scanner.models import EnvVarOccurrence, ScanResult, ValueSource
from envvars_scan.core.scanner.patterns import is_uppercase_name
from envvars_scan.filters.discovery import DEFAULT_EXCLUDE_PATTERNS
from envvars_scan.semgrep.runner import (
    FindingSource,
    SemgrepNotFoundError,
    SemgrepRunner,
    is_semgrep_installed,
)

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "|||"
CUSTOM_PREFIX = "custom-"

# Rule id prefix -> language name
LANGUAGE_MAP: dict[str, str] = {
    "go": "go",
    "js": "javascript",
    "python": "python",
    "java": "java",
    "ruby": "ruby",
    "rust": "rust",
    "csharp": "csharp",
    "php": "php",
    "kotlin": "kotlin",
    "scala": "scala",
    "properties": "properties",
}

# A prefix only counts at the start of the id or right after a path dot,
# so "django-" never reads as "go-".
_RULE_ID_START = re.compile(
    r'(?:^|\.)((?:' + '|'.join(re.escape(p) for p in LANGUAGE_MAP) + r')-)'
)
_STRING_COERCION_SUFFIX = re.compile(r'\.(?:to_string|to_owned)\(\)$')


def load_builtin_rules() -> dict[str, Any]:
    """Load the packaged rule document."""
    text = resources.files("envvars_scan.semgrep").joinpath("rules.yaml").read_text(encoding="utf-8")
    return yaml.safe_load(text)


def custom_rule(pattern: CustomPattern) -> dict[str, Any]:
    """Compile a user pattern into a semgrep rule."""
    rule: dict[str, Any] = {
        "id": f"{CUSTOM_PREFIX}{pattern.id}",
        "patterns": [{"pattern": pattern.pattern}],
        "languages": list(pattern.languages),
        "message": "$VAR",
        "severity": "INFO",
    }
    if pattern.description:
        rule["metadata"] = {"description": pattern.description}
    return rule


def build_rules_document(custom_patterns: Optional[list[CustomPattern]] = None) -> str:
    """Merge built-in and custom rules into one YAML document."""
    document = load_builtin_rules()
    rules = list(document.get("rules") or [])
    for pattern in custom_patterns or []:
        rules.append(custom_rule(pattern))
    document["rules"] = rules
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)


def clean_default_value(value: str) -> str:
    """
    Cosmetic cleanup of a captured default expression.

    Strips ``.to_string()`` / ``.to_owned()``, unwraps ``String(...)``,
    then removes one pair of matching quotes or backticks.
    """
    cleaned = value.strip()
    cleaned = _STRING_COERCION_SUFFIX.sub("", cleaned)

    if cleaned.startswith("String(") and cleaned.endswith(")"):
        cleaned = cleaned[len("String("):-1].strip()

    if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in ('"', "'", "`"):
        cleaned = cleaned[1:-1]

    return cleaned


def parse_message(message: str) -> tuple[str, Optional[str]]:
    """Split a rule message into (name, cleaned default or None)."""
    if DEFAULT_SEPARATOR not in message:
        return message.strip(), None
    name, _, default = message.partition(DEFAULT_SEPARATOR)
    cleaned = clean_default_value(default)
    return name.strip(), cleaned or None


def parse_check_id(check_id: str) -> tuple[str, str]:
    """
    Recover (language, pattern) from a semgrep check id.

    semgrep prefixes rule ids with the dotted config path, e.g.
    ``tmp.envvars-scan-x1.go-os-getenv`` -> ("go", "os.getenv").
    """
    if CUSTOM_PREFIX in check_id:
        idx = check_id.rfind(CUSTOM_PREFIX)
        return "custom", check_id[idx:]

    matches = list(_RULE_ID_START.finditer(check_id))
    rule_id = check_id[matches[-1].start(1):] if matches else check_id

    parts = rule_id.split("-")
    if len(parts) < 2:
        return "unknown", rule_id

    language = LANGUAGE_MAP.get(parts[0], parts[0])
    return language, ".".join(parts[1:])


def findings_to_occurrences(
    output: dict[str, Any],
    base_path: Path,
    filter_uppercase: bool = True,
) -> tuple[list[EnvVarOccurrence], list[str]]:
    """
    Convert semgrep JSON output into occurrences.

    Args:
        output: Parsed semgrep output (``results`` and ``errors``)
        base_path: Scan root, used for relative result paths
        filter_uppercase: Drop names not matching [A-Z][A-Z0-9_]*

    Returns:
        Tuple of (occurrences, semgrep error messages)
    """
    occurrences: list[EnvVarOccurrence] = []

    for finding in output.get("results") or []:
        message = (finding.get("extra") or {}).get("message", "")
        name, default = parse_message(message)
        if not name:
            continue
        if filter_uppercase and not is_uppercase_name(name):
            continue

        path = Path(finding.get("path", ""))
        if not path.is_absolute():
            path = Path(base_path) / path
        line = int((finding.get("start") or {}).get("line", 1)) or 1

        language, pattern = parse_check_id(finding.get("check_id", ""))
        occurrences.append(EnvVarOccurrence.create(
            name=name,
            file=str(path),
            line=line,
            language=language,
            pattern=pattern,
            value=default,
            source=ValueSource.CODE_DEFAULT,
            is_default=True,
        ))

    errors = [
        str(error.get("message", error)) if isinstance(error, dict) else str(error)
        for error in output.get("errors") or []
    ]
    return occurrences, errors


def scan_code(
    path: Path,
    exclude_patterns: Optional[list[str]] = None,
    custom_patterns: Optional[list[CustomPattern]] = None,
    filter_uppercase: bool = True,
    runner: Optional[FindingSource] = None,
) -> ScanResult:
    """
    Scan source code with semgrep.

    The merged rule file lives in a temporary directory that is removed
    on every exit path.

    Raises:
        SemgrepNotFoundError: No runner injected and semgrep is missing
        SemgrepOutputError: semgrep output was not valid JSON
        SemgrepExecutionError: semgrep failed to start or timed out
    """
    base_path = Path(path).resolve()
    if runner is None:
        if not is_semgrep_installed():
            raise SemgrepNotFoundError("semgrep not found in PATH. Install with: pip install semgrep")
        runner = SemgrepRunner()

    if exclude_patterns is None:
        exclude_patterns = DEFAULT_EXCLUDE_PATTERNS

    rules_document = build_rules_document(custom_patterns)
    with tempfile.TemporaryDirectory(prefix="envvars-scan-") as temp_dir:
        rules_path = Path(temp_dir) / "rules.yaml"
        rules_path.write_text(rules_document, encoding="utf-8")
        logger.debug(f"Running semgrep with {rules_path} on {base_path}")
        output = runner.run(rules_path, base_path, list(exclude_patterns))

    occurrences, errors = findings_to_occurrences(output, base_path, filter_uppercase)
    for error in errors:
        logger.warning(f"semgrep: {error}")

    return ScanResult(path=str(base_path), env_vars=reconcile(occurrences), errors=errors)
