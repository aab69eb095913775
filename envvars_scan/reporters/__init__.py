"""
Reporters Layer - 报告层

包含 Rich 终端报告器、JSON 报告器和敏感值遮蔽。
"""

from envvars_scan.reporters.base import Reporter
from envvars_scan.reporters.rich_reporter import RichReporter
from envvars_scan.reporters.json_reporter import JsonReporter
from envvars_scan.reporters.masking import is_sensitive_var, mask_value, display_value

__all__ = [
    "Reporter",
    "RichReporter",
    "JsonReporter",
    "is_sensitive_var",
    "mask_value",
    "display_value",
]
