"""
Property 占位符解析

扫描 Spring / Quarkus 风格配置文件中的 ${VAR} 与 ${VAR:default} 占位符。
"""

import re
from pathlib import Path
from typing import Optional

from envvars_scan.core.scanner.models import EnvVarOccurrence, ValueSource
from envvars_scan.filters.discovery import FileDiscovery, scan_matching_files

# ${VAR_NAME} 或 ${VAR_NAME:default}
# 默认值非贪婪截止到第一个 }，嵌套占位符 ${A:${B:d}} 只取到 "${B:d"
PLACEHOLDER_PATTERN = re.compile(r'\$\{([A-Z][A-Z0-9_]*)(?::([^}]*))?\}')


def clean_placeholder_default(raw: Optional[str]) -> Optional[str]:
    """
    清理占位符默认值

    带引号的默认值原样保留；未加引号时去掉行内 # 注释（# 不在首位时）。
    """
    if raw is None:
        return None
    if raw.startswith('"') or raw.startswith("'"):
        return raw or None
    value = raw
    comment_idx = value.find('#')
    if comment_idx > 0:
        value = value[:comment_idx]
    value = value.strip()
    return value or None


def parse_properties_content(content: str, file_path: str = "") -> list[EnvVarOccurrence]:
    """解析配置文件内容字符串"""
    occurrences: list[EnvVarOccurrence] = []

    for line_num, line in enumerate(content.split('\n'), 1):
        for match in PLACEHOLDER_PATTERN.finditer(line):
            default = clean_placeholder_default(match.group(2))
            occurrences.append(EnvVarOccurrence.create(
                name=match.group(1),
                file=file_path,
                line=line_num,
                language="properties",
                pattern="spring.placeholder",
                value=default,
                source=ValueSource.PROPERTIES,
                is_default=True,
            ))

    return occurrences


def scan_property_files(
    base_path: Path,
    exclude_patterns: Optional[list[str]] = None,
    discovery: Optional[FileDiscovery] = None,
) -> tuple[list[EnvVarOccurrence], list[str]]:
    """扫描 application*/bootstrap*/*.properties 文件"""
    return scan_matching_files(
        base_path, "properties", parse_properties_content, exclude_patterns, discovery
    )
