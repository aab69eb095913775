"""
Core Layer - 核心层

包含各格式扫描器、结果合并去重和结果对比。
"""

from envvars_scan.core.scanner import (
    ValueSource,
    EnvVarOccurrence,
    ScanResult,
    ComparisonResult,
    parse_properties_content,
    parse_dockerfile_content,
    parse_dotenv_content,
    parse_compose_content,
    parse_k8s_content,
)
from envvars_scan.core.reconcile import (
    reconcile,
    reconcile_results,
    filter_uppercase,
)
from envvars_scan.core.compare import (
    compare_names,
    compare_results,
    load_scan_result,
)

__all__ = [
    # models
    "ValueSource",
    "EnvVarOccurrence",
    "ScanResult",
    "ComparisonResult",
    # scanner
    "parse_properties_content",
    "parse_dockerfile_content",
    "parse_dotenv_content",
    "parse_compose_content",
    "parse_k8s_content",
    # reconcile
    "reconcile",
    "reconcile_results",
    "filter_uppercase",
    # compare
    "compare_names",
    "compare_results",
    "load_scan_result",
]
