"""
CLI Layer - 命令行接口层

提供命令行入口。
"""

from envvars_scan.cli.app import app, scan, compare, version

__all__ = [
    "app",
    "scan",
    "compare",
    "version",
]
