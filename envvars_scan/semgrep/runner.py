"""Semgrep process runner.

This module wraps the one external blocking call of a scan: running
semgrep in JSON mode against a rule file and a target directory.
"""

from dataclasses import dataclass
import json
from pathlib import Path
import shutil
import subprocess
from typing import Any, Protocol


class SemgrepError(Exception):
    """Base class for semgrep failures."""
    pass


class SemgrepNotFoundError(SemgrepError):
    """semgrep is not installed or not on PATH."""
    pass


class SemgrepOutputError(SemgrepError):
    """semgrep produced output that is not valid JSON."""
    pass


class SemgrepExecutionError(SemgrepError):
    """semgrep could not be started or exceeded its timeout."""
    pass


@dataclass
class SemgrepConfig:
    """Semgrep invocation configuration."""
    binary: str = "semgrep"
    timeout: int = 300  # seconds


class FindingSource(Protocol):
    """Anything that turns a rule file and a target into semgrep-shaped output."""

    def run(self, rules_path: Path, target: Path, excludes: list[str]) -> dict[str, Any]:
        """Return a mapping with ``results`` and ``errors`` lists."""
        ...


def is_semgrep_installed(binary: str = "semgrep") -> bool:
    """Check whether the semgrep binary is reachable on PATH."""
    return shutil.which(binary) is not None


class SemgrepRunner:
    """Runs the real semgrep binary."""

    def __init__(self, config: SemgrepConfig | None = None):
        self.config = config or SemgrepConfig()

    def build_command(self, rules_path: Path, target: Path, excludes: list[str]) -> list[str]:
        args = [self.config.binary, "--config", str(rules_path), "--json", "--quiet"]
        for pattern in excludes:
            args.extend(["--exclude", pattern])
        args.append(str(target))
        return args

    def run(self, rules_path: Path, target: Path, excludes: list[str]) -> dict[str, Any]:
        """
        Execute semgrep and parse its JSON output.

        Args:
            rules_path: Rule document to pass via --config
            target: Directory to scan
            excludes: Patterns passed through --exclude

        Returns:
            Parsed semgrep output

        Raises:
            SemgrepNotFoundError: Binary is missing
            SemgrepExecutionError: Process failed to start or timed out
            SemgrepOutputError: Stdout was not valid JSON
        """
        if not is_semgrep_installed(self.config.binary):
            raise SemgrepNotFoundError(
                f"{self.config.binary} not found in PATH. Install with: pip install semgrep"
            )

        command = self.build_command(rules_path, target, excludes)
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise SemgrepExecutionError(
                f"semgrep timed out after {self.config.timeout} seconds"
            ) from e
        except OSError as e:
            raise SemgrepExecutionError(f"Failed to run semgrep: {e}") from e

        try:
            output = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise SemgrepOutputError(
                f"Failed to parse semgrep output: {e}\nstderr: {result.stderr}"
            ) from e

        if not isinstance(output, dict):
            raise SemgrepOutputError(
                f"Unexpected semgrep output type: {type(output).__name__}\nstderr: {result.stderr}"
            )
        return output
