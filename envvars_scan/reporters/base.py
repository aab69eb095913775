"""
报告器基类 - 定义报告器接口
"""

from typing import Protocol

from envvars_scan.core.scanner.models import ComparisonResult, ScanResult


class Reporter(Protocol):
    """报告器协议"""

    def report_scan(self, result: ScanResult, show_values: bool = False) -> None:
        """输出扫描结果"""
        ...

    def report_comparison(
        self,
        comparison: ComparisonResult,
        base: ScanResult,
        head: ScanResult,
        title: str = "Env Var Changes",
    ) -> None:
        """输出对比结果"""
        ...
