"""
结果合并与去重

多个扫描器（含 semgrep）可能报告同一位置的同一变量。按身份键
(name, file, line) 合并：带值的记录优先；都带值或都不带值时保留先出现的。
"""

from typing import Iterable

from envvars_scan.core.scanner.models import EnvVarOccurrence, ScanResult
from envvars_scan.core.scanner.patterns import is_uppercase_name


def reconcile(occurrences: Iterable[EnvVarOccurrence]) -> list[EnvVarOccurrence]:
    """
    合并去重

    Args:
        occurrences: 所有扫描器输出的记录

    Returns:
        每个身份键一条记录，保持首次出现的顺序
    """
    merged: dict[tuple[str, str, int], EnvVarOccurrence] = {}
    for occurrence in occurrences:
        existing = merged.get(occurrence.key)
        if existing is None or (occurrence.has_value and not existing.has_value):
            merged[occurrence.key] = occurrence
    return list(merged.values())


def filter_uppercase(occurrences: Iterable[EnvVarOccurrence]) -> list[EnvVarOccurrence]:
    """只保留符合 [A-Z][A-Z0-9_]* 的变量名"""
    return [ev for ev in occurrences if is_uppercase_name(ev.name)]


def reconcile_results(path: str, *results: ScanResult) -> ScanResult:
    """把多个扫描结果合并成一个规范结果"""
    occurrences: list[EnvVarOccurrence] = []
    errors: list[str] = []
    for result in results:
        occurrences.extend(result.env_vars)
        errors.extend(result.errors)
    return ScanResult(path=path, env_vars=reconcile(occurrences), errors=errors)
