import io
import json

import pytest
from rich.console import Console

from envvars_scan.core.scanner.models import ComparisonResult, EnvVarOccurrence, ScanResult, ValueSource
from envvars_scan.reporters import JsonReporter, RichReporter, display_value, is_sensitive_var, mask_value


def _result():
    return ScanResult(
        path="/app",
        env_vars=[
            EnvVarOccurrence.create("API_KEY", "/app/.env", 1, "dotenv", "definition", "abcdefghijkl", ValueSource.DOTENV),
            EnvVarOccurrence.create("LOG_LEVEL", "/app/.env", 2, "dotenv", "definition", "debug", ValueSource.DOTENV),
            EnvVarOccurrence.create("LOG_LEVEL", "/app/main.py", 7, "python", "os.getenv"),
        ],
    )


@pytest.mark.parametrize("name, sensitive", [
    ("DB_PASSWORD", True),
    ("GITHUB_TOKEN", True),
    ("API_KEY", True),
    ("KEY", True),
    ("AUTH_URL", True),
    ("MONKEY_COUNT", False),
    ("RAPID_MODE", False),
    ("LOG_LEVEL", False),
])
def test_is_sensitive_var(name, sensitive):
    assert is_sensitive_var(name) is sensitive


@pytest.mark.parametrize("value, masked", [
    ("abc", "****"),
    ("abcdefg", "a****g"),
    ("abcdefghijkl", "ab****kl"),
])
def test_mask_value(value, masked):
    assert mask_value(value) == masked


def test_display_value():
    assert display_value("LOG_LEVEL", "debug", True) == "debug"
    assert display_value("API_KEY", "abcdefghijkl", True) == "ab****kl"
    assert display_value("LOG_LEVEL", "debug", False) is None
    assert display_value("LOG_LEVEL", None, True) is None


def test_json_reporter_emits_raw_values():
    out = io.StringIO()
    JsonReporter(out).report_scan(_result(), cloned_from="org/repo", cloned_path="/tmp/org/repo")
    data = json.loads(out.getvalue())
    assert data["path"] == "/app"
    assert data["envVars"][0]["value"] == "abcdefghijkl"
    assert data["envVars"][2]["isDefault"] is False
    assert "value" not in data["envVars"][2]
    assert data["clonedFrom"] == "org/repo"
    assert data["clonedPath"] == "/tmp/org/repo"


def test_json_reporter_comparison():
    out = io.StringIO()
    comparison = ComparisonResult(added=["B"], removed=[], unchanged=["A"])
    JsonReporter(out).report_comparison(comparison, _result(), _result())
    assert json.loads(out.getvalue()) == {"added": ["B"], "removed": [], "unchanged": ["A"]}


def _console():
    return Console(file=io.StringIO(), width=200, color_system=None)


def test_rich_reporter_masks_sensitive_values():
    console = _console()
    RichReporter(console).report_scan(_result(), show_values=True)
    text = console.file.getvalue()
    assert "Found 2 unique environment variables" in text
    assert "ab****kl" in text
    assert "abcdefghijkl" not in text
    assert "debug" in text
    assert "main.py:7" in text


def test_rich_reporter_hides_values_by_default():
    console = _console()
    RichReporter(console).report_scan(_result())
    assert "debug" not in console.file.getvalue()


def test_rich_reporter_empty_result():
    console = _console()
    RichReporter(console).report_scan(ScanResult(path="/app"))
    assert "No environment variables found" in console.file.getvalue()


def test_rich_reporter_comparison():
    base = ScanResult(path="/app", env_vars=[
        EnvVarOccurrence.create("OLD_VAR", "/app/.env", 3, "dotenv", "definition"),
    ])
    head = _result()
    console = _console()
    comparison = ComparisonResult(added=["API_KEY", "LOG_LEVEL"], removed=["OLD_VAR"])
    RichReporter(console).report_comparison(comparison, base, head)
    text = console.file.getvalue()
    assert "+ API_KEY" in text
    assert "- OLD_VAR" in text
    assert "2 added, 1 removed, 0 unchanged" in text
