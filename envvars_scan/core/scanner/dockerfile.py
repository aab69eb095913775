"""
Dockerfile 解析

提取 ENV 与 ARG 声明。
"""

import re
from pathlib import Path
from typing import Optional

from envvars_scan.core.scanner.models import EnvVarOccurrence, ValueSource
from envvars_scan.filters.discovery import FileDiscovery, scan_matching_files

# ENV NAME=value 要先于 ENV NAME value 匹配，避免把 = 之后带空格的值拆错
ENV_EQUALS_PATTERN = re.compile(r'^ENV\s+([A-Z][A-Z0-9_]*)=(.*)$', re.IGNORECASE)
ENV_SPACE_PATTERN = re.compile(r'^ENV\s+([A-Z][A-Z0-9_]*)\s+(.+)$', re.IGNORECASE)
# ARG NAME 或 ARG NAME=default
ARG_PATTERN = re.compile(r'^ARG\s+([A-Z][A-Z0-9_]*)(?:=(.*))?$', re.IGNORECASE)


def parse_dockerfile_content(content: str, file_path: str = "") -> list[EnvVarOccurrence]:
    """解析 Dockerfile 内容字符串"""
    occurrences: list[EnvVarOccurrence] = []

    for line_num, raw_line in enumerate(content.split('\n'), 1):
        line = raw_line.strip()

        match = ENV_EQUALS_PATTERN.match(line) or ENV_SPACE_PATTERN.match(line)
        if match:
            occurrences.append(EnvVarOccurrence.create(
                name=match.group(1),
                file=file_path,
                line=line_num,
                language="dockerfile",
                pattern="ENV",
                value=(match.group(2) or "").strip(),
                source=ValueSource.DOCKERFILE_ENV,
            ))
            continue

        match = ARG_PATTERN.match(line)
        if match:
            # 没有默认值的 ARG 是必填构建参数
            occurrences.append(EnvVarOccurrence.create(
                name=match.group(1),
                file=file_path,
                line=line_num,
                language="dockerfile",
                pattern="ARG",
                value=(match.group(2) or "").strip(),
                source=ValueSource.DOCKERFILE_ARG,
                is_default=True,
            ))

    return occurrences


def scan_dockerfiles(
    base_path: Path,
    exclude_patterns: Optional[list[str]] = None,
    discovery: Optional[FileDiscovery] = None,
) -> tuple[list[EnvVarOccurrence], list[str]]:
    """扫描 Dockerfile*"""
    return scan_matching_files(
        base_path, "dockerfile", parse_dockerfile_content, exclude_patterns, discovery
    )
