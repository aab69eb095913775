"""
DotEnv 文件解析

解析 .env / .env.local / container.env 等文件中的变量定义。
"""

import re
from pathlib import Path
from typing import Optional

from envvars_scan.core.scanner.models import EnvVarOccurrence, ValueSource
from envvars_scan.filters.discovery import FileDiscovery, scan_matching_files

# [export ]NAME=value，名称大小写交给扫描编排的大写过滤
LINE_PATTERN = re.compile(r'^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)=(.*)$')


def parse_env_value(raw_value: str) -> str:
    """
    解析 .env 值

    - 首尾为成对引号时去掉引号，内容按字面保留
    - 未加引号时去掉首位之后的 # 行内注释
    """
    value = raw_value.strip()

    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]

    if not value.startswith('"') and not value.startswith("'"):
        comment_idx = value.find('#')
        if comment_idx > 0:
            value = value[:comment_idx].strip()

    return value


def parse_dotenv_content(content: str, file_path: str = "") -> list[EnvVarOccurrence]:
    """解析 .env 文件内容字符串"""
    occurrences: list[EnvVarOccurrence] = []

    for line_num, raw_line in enumerate(content.split('\n'), 1):
        line = raw_line.strip()
        if not line or line.startswith('#'):
            continue

        match = LINE_PATTERN.match(line)
        if match:
            occurrences.append(EnvVarOccurrence.create(
                name=match.group(1),
                file=file_path,
                line=line_num,
                language="dotenv",
                pattern="definition",
                value=parse_env_value(match.group(2)),
                source=ValueSource.DOTENV,
            ))

    return occurrences


def scan_dotenv_files(
    base_path: Path,
    exclude_patterns: Optional[list[str]] = None,
    discovery: Optional[FileDiscovery] = None,
) -> tuple[list[EnvVarOccurrence], list[str]]:
    """扫描 .env* 与 *.env 文件"""
    return scan_matching_files(
        base_path, "dotenv", parse_dotenv_content, exclude_patterns, discovery
    )
