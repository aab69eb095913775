"""
扫描结果对比

只比较变量名集合：移动文件或默认值变化的变量算作 unchanged。
"""

import json
from pathlib import Path
from typing import Iterable

from envvars_scan.core.scanner.models import ComparisonResult, EnvVarOccurrence, ScanResult


def compare_names(
    base: Iterable[EnvVarOccurrence],
    head: Iterable[EnvVarOccurrence],
) -> ComparisonResult:
    """
    对比两组记录的变量名

    Args:
        base: 旧结果
        head: 新结果

    Returns:
        ComparisonResult，三个列表均按字典序排序
    """
    base_names = {ev.name for ev in base}
    head_names = {ev.name for ev in head}
    return ComparisonResult(
        added=sorted(head_names - base_names),
        removed=sorted(base_names - head_names),
        unchanged=sorted(head_names & base_names),
    )


def compare_results(base: ScanResult, head: ScanResult) -> ComparisonResult:
    return compare_names(base.env_vars, head.env_vars)


def load_scan_result(path: Path) -> ScanResult:
    """
    读取 JSON 格式的扫描输出

    Raises:
        ValueError: 文件不存在或不是有效的扫描输出
    """
    path = Path(path)
    if not path.is_file():
        raise ValueError(f"Scan result file not found: {path}")
    try:
        return ScanResult.from_json(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Invalid scan result file {path}: {e}") from e
