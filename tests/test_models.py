import pytest

from envvars_scan.core.scanner.models import (
    ComparisonResult,
    EnvVarOccurrence,
    ScanResult,
    ValueSource,
)


def test_create_treats_empty_value_as_absent():
    occ = EnvVarOccurrence.create(
        "PORT", "/app/.env", 3, "dotenv", "definition",
        value="", source=ValueSource.DOTENV, is_default=True,
    )
    assert occ.value is None
    assert occ.value_source is None
    assert occ.is_default is False


def test_value_and_source_must_be_set_together():
    with pytest.raises(ValueError):
        EnvVarOccurrence("PORT", "/app/.env", 3, "dotenv", "definition", value="1")
    with pytest.raises(ValueError):
        EnvVarOccurrence(
            "PORT", "/app/.env", 3, "dotenv", "definition",
            value_source=ValueSource.DOTENV,
        )


def test_default_flag_requires_value():
    with pytest.raises(ValueError):
        EnvVarOccurrence("PORT", "f", 1, "go", "os.getenv", is_default=True)


def test_line_is_one_based():
    with pytest.raises(ValueError):
        EnvVarOccurrence("PORT", "f", 0, "go", "os.getenv")


def test_to_dict_omits_value_fields_when_absent():
    occ = EnvVarOccurrence.create("PORT", "f", 1, "go", "os.getenv")
    data = occ.to_dict()
    assert "value" not in data
    assert "valueSource" not in data
    assert data["isDefault"] is False


def test_to_dict_uses_camel_case():
    occ = EnvVarOccurrence.create(
        "PORT", "f", 1, "python", "os.getenv",
        value="8080", source=ValueSource.CODE_DEFAULT, is_default=True,
    )
    assert occ.to_dict() == {
        "name": "PORT",
        "file": "f",
        "line": 1,
        "language": "python",
        "pattern": "os.getenv",
        "value": "8080",
        "valueSource": "code-default",
        "isDefault": True,
    }


def test_scan_result_json_round_trip():
    result = ScanResult(
        path="/app",
        env_vars=[
            EnvVarOccurrence.create("A", "/app/x", 1, "dotenv", "definition", "1", ValueSource.DOTENV),
            EnvVarOccurrence.create("B", "/app/y", 2, "go", "os.getenv"),
        ],
        errors=["boom"],
    )
    restored = ScanResult.from_json(result.to_json())
    assert restored == result


def test_unique_names_keep_first_seen_order():
    result = ScanResult(
        path="/app",
        env_vars=[
            EnvVarOccurrence.create("B", "f", 1, "go", "os.getenv"),
            EnvVarOccurrence.create("A", "f", 2, "go", "os.getenv"),
            EnvVarOccurrence.create("B", "g", 1, "go", "os.getenv"),
        ],
    )
    assert result.unique_names() == ["B", "A"]
    assert [ev.file for ev in result.group_by_name()["B"]] == ["f", "g"]


def test_comparison_has_changes():
    assert not ComparisonResult(unchanged=["A"]).has_changes
    assert ComparisonResult(added=["B"]).has_changes
    assert ComparisonResult(removed=["C"]).has_changes
