import pytest

from envvars_scan.config import ConfigError
from envvars_scan.core.scanner.models import ValueSource
from envvars_scan.scan import ScanOptions, scan_path

PROJECT = {
    ".env": "DATABASE_URL=postgres://localhost/app\nlower_case=1\n",
    "Dockerfile": "FROM python:3.12\nENV NODE_ENV=production\nARG BUILD_ID\n",
    "src/main/resources/application.yaml": "db: ${DATABASE_URL:postgres://fallback}\n",
    "docker-compose.yml": "services:\n  app:\n    environment:\n      - REDIS_URL=redis://cache\n",
    "k8s/secret.yaml": "apiVersion: v1\nkind: Secret\ndata:\n  PASSWORD: cGFzcw==\n",
    "node_modules/dep/.env": "HIDDEN=1\n",
}


def test_default_scanners(make_tree):
    root = make_tree(PROJECT)
    result = scan_path(root, ScanOptions(semgrep=False))

    names = result.unique_names()
    assert set(names) == {"DATABASE_URL", "NODE_ENV", "BUILD_ID"}
    assert result.path == str(root.resolve())
    assert result.errors == []


def test_optional_scanners(make_tree):
    root = make_tree(PROJECT)
    result = scan_path(root, ScanOptions(semgrep=False, compose=True, k8s=True))

    by_name = result.group_by_name()
    assert by_name["REDIS_URL"][0].value_source is ValueSource.DOCKER_COMPOSE
    assert by_name["PASSWORD"][0].value == "pass"


def test_all_vars_keeps_lowercase_names(make_tree):
    root = make_tree(PROJECT)
    result = scan_path(root, ScanOptions(semgrep=False, filter_uppercase=False))
    assert "lower_case" in result.unique_names()


def test_disabled_scanners(make_tree):
    root = make_tree(PROJECT)
    options = ScanOptions(semgrep=False, properties=False, dotenv=False, docker=False)
    assert scan_path(root, options).env_vars == []


def test_semgrep_findings_merge_with_file_scanners(make_tree, fake_semgrep):
    root = make_tree({".env": "API_KEY=\n"})
    env_file = str(root.resolve() / ".env")
    source = fake_semgrep(results=[
        {
            "check_id": "js-process-env-default",
            "path": ".env",
            "start": {"line": 1},
            "extra": {"message": "API_KEY|||'abc'"},
        },
    ])

    result = scan_path(root, runner=source)

    assert len(result.env_vars) == 1
    occ = result.env_vars[0]
    assert occ.file == env_file
    assert occ.value == "abc"
    assert occ.value_source is ValueSource.CODE_DEFAULT


def test_project_config_extends_excludes(make_tree, fake_semgrep):
    root = make_tree({
        ".skyhook/envvars-scan.yaml": "includeExcludePatterns:\n  - generated\n",
        "generated/.env": "GENERATED=1\n",
        ".env": "KEPT=1\n",
    })
    source = fake_semgrep()
    result = scan_path(root, runner=source)

    assert result.unique_names() == ["KEPT"]
    assert "generated" in source.calls[0][2]


def test_semgrep_errors_do_not_abort_scan(make_tree, fake_semgrep):
    root = make_tree({".env": "A=1\n"})
    source = fake_semgrep(errors=[{"message": "syntax error in broken.js"}])
    result = scan_path(root, runner=source)
    assert result.unique_names() == ["A"]
    assert result.errors == ["syntax error in broken.js"]


def test_missing_semgrep_is_skipped(make_tree, monkeypatch):
    monkeypatch.setattr("envvars_scan.scan.is_semgrep_installed", lambda: False)
    root = make_tree({".env": "A=1\n"})
    assert scan_path(root).unique_names() == ["A"]


def test_missing_path(tmp_path):
    with pytest.raises(FileNotFoundError):
        scan_path(tmp_path / "missing", ScanOptions(semgrep=False))


def test_explicit_config_errors_propagate(tmp_path):
    options = ScanOptions(semgrep=False, custom_rules_path=tmp_path / "nope.yaml")
    with pytest.raises(ConfigError):
        scan_path(tmp_path, options)
