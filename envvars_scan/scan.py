"""
扫描编排模块 - 运行各格式扫描器与 semgrep，并合并为一个规范结果

扫描流程：
1. 解析路径与项目配置
2. 计算生效的排除目录
3. 依次运行启用的扫描器
4. 大写过滤
5. 合并去重
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from envvars_scan.config import UserConfig, load_user_config, resolve_exclude_patterns
from envvars_scan.core.reconcile import filter_uppercase, reconcile
from envvars_scan.core.scanner import (
    EnvVarOccurrence,
    ScanResult,
    scan_compose_files,
    scan_dockerfiles,
    scan_dotenv_files,
    scan_k8s_manifests,
    scan_property_files,
)
from envvars_scan.filters.discovery import DEFAULT_EXCLUDE_PATTERNS, FileDiscovery
from envvars_scan.semgrep import (
    FindingSource,
    SemgrepError,
    SemgrepNotFoundError,
    is_semgrep_installed,
    scan_code,
)

logger = logging.getLogger(__name__)

FormatScanner = Callable[..., tuple[list[EnvVarOccurrence], list[str]]]


@dataclass
class ScanOptions:
    """
    扫描选项

    Attributes:
        filter_uppercase: 只保留大写 snake-case 变量名
        exclude_patterns: 排除目录（项目配置可追加或替换）
        custom_rules_path: 显式指定的配置文件路径
        semgrep: 运行 semgrep 代码扫描
        properties: 扫描 property/YAML 占位符
        dotenv: 扫描 .env 文件
        docker: 扫描 Dockerfile
        compose: 扫描 docker-compose 文件（默认关闭）
        k8s: 扫描 Kubernetes 清单（默认关闭）
    """
    filter_uppercase: bool = True
    exclude_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    custom_rules_path: Optional[Path] = None
    semgrep: bool = True
    properties: bool = True
    dotenv: bool = True
    docker: bool = True
    compose: bool = False
    k8s: bool = False

    def enabled_scanners(self) -> list[tuple[str, FormatScanner]]:
        scanners: list[tuple[str, FormatScanner]] = []
        if self.properties:
            scanners.append(("properties", scan_property_files))
        if self.dotenv:
            scanners.append(("dotenv", scan_dotenv_files))
        if self.docker:
            scanners.append(("dockerfile", scan_dockerfiles))
        if self.compose:
            scanners.append(("docker-compose", scan_compose_files))
        if self.k8s:
            scanners.append(("kubernetes", scan_k8s_manifests))
        return scanners


def _run_semgrep(
    base_path: Path,
    options: ScanOptions,
    user_config: Optional[UserConfig],
    excludes: list[str],
    runner: Optional[FindingSource],
) -> ScanResult:
    """运行 semgrep；未安装时跳过，输出解析失败时记录错误后继续"""
    if runner is None and not is_semgrep_installed():
        logger.warning("semgrep not installed, skipping code scan. Install with: pip install semgrep")
        return ScanResult(path=str(base_path))

    try:
        return scan_code(
            base_path,
            exclude_patterns=excludes,
            custom_patterns=user_config.custom_patterns if user_config else None,
            filter_uppercase=options.filter_uppercase,
            runner=runner,
        )
    except SemgrepNotFoundError:
        raise
    except SemgrepError as e:
        logger.error(f"Code scan failed: {e}")
        return ScanResult(path=str(base_path), errors=[str(e)])


def scan_path(
    path: Path,
    options: Optional[ScanOptions] = None,
    runner: Optional[FindingSource] = None,
) -> ScanResult:
    """
    扫描一个目录

    Args:
        path: 扫描根目录
        options: 扫描选项
        runner: semgrep 替身（测试用），None 时使用真实 semgrep

    Returns:
        合并去重后的 ScanResult

    Raises:
        FileNotFoundError: 路径不存在
        ConfigError: 显式指定的配置文件无效
    """
    if options is None:
        options = ScanOptions()

    base_path = Path(path).resolve()
    if not base_path.exists():
        raise FileNotFoundError(f"Path does not exist: {base_path}")

    user_config = load_user_config(base_path, options.custom_rules_path)
    excludes = resolve_exclude_patterns(options.exclude_patterns, user_config)
    discovery = FileDiscovery(base_path, excludes)

    occurrences: list[EnvVarOccurrence] = []
    errors: list[str] = []

    if options.semgrep:
        code_result = _run_semgrep(base_path, options, user_config, excludes, runner)
        occurrences.extend(code_result.env_vars)
        errors.extend(code_result.errors)

    for label, scanner in options.enabled_scanners():
        found, scan_errors = scanner(base_path, discovery=discovery)
        logger.debug(f"{label}: {len(found)} occurrences")
        occurrences.extend(found)
        errors.extend(scan_errors)

    if options.filter_uppercase:
        occurrences = filter_uppercase(occurrences)

    return ScanResult(path=str(base_path), env_vars=reconcile(occurrences), errors=errors)
