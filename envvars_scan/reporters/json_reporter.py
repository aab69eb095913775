"""
JSON 报告器 - 输出 JSON 格式报告
"""

import json
import sys
from typing import Any, Optional, TextIO

from envvars_scan.core.scanner.models import ComparisonResult, ScanResult


class JsonReporter:
    """JSON 报告器"""

    def __init__(self, output: TextIO | None = None):
        self.output = output or sys.stdout

    def _emit(self, data: dict[str, Any]) -> None:
        print(json.dumps(data, indent=2, ensure_ascii=False), file=self.output)

    def report_scan(
        self,
        result: ScanResult,
        show_values: bool = False,
        cloned_from: Optional[str] = None,
        cloned_path: Optional[str] = None,
    ) -> None:
        """生成 JSON 格式扫描报告（值总是原样输出）"""
        data = result.to_dict()
        if cloned_from:
            data["clonedFrom"] = cloned_from
            if cloned_path:
                data["clonedPath"] = cloned_path
        self._emit(data)

    def report_comparison(
        self,
        comparison: ComparisonResult,
        base: ScanResult,
        head: ScanResult,
        title: str = "Env Var Changes",
    ) -> None:
        """生成 {added, removed, unchanged}"""
        self._emit(comparison.to_dict())
