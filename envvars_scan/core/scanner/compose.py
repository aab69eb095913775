"""
docker-compose 文件解析

两遍匹配：变量定义（带值）与 ${VAR} / $VAR 引用（不带值）。
"""

import re
from pathlib import Path
from typing import Optional

from envvars_scan.core.scanner.models import EnvVarOccurrence, ValueSource
from envvars_scan.core.scanner.patterns import strip_quotes
from envvars_scan.filters.discovery import FileDiscovery, scan_matching_files

# - NAME=value 或 NAME: value（可带列表前缀）
DEFINITION_PATTERN = re.compile(r'^\s*-?\s*([A-Z][A-Z0-9_]*)([=:])(.*)$')
# ${NAME} 或 $NAME
REFERENCE_PATTERN = re.compile(r'\$\{?([A-Z][A-Z0-9_]*)\}?')


def parse_compose_content(content: str, file_path: str = "") -> list[EnvVarOccurrence]:
    """解析 docker-compose 内容字符串"""
    occurrences: list[EnvVarOccurrence] = []

    for line_num, line in enumerate(content.split('\n'), 1):
        match = DEFINITION_PATTERN.match(line)
        if match:
            occurrences.append(EnvVarOccurrence.create(
                name=match.group(1),
                file=file_path,
                line=line_num,
                language="docker-compose",
                pattern="environment-definition",
                value=strip_quotes(match.group(3).strip()),
                source=ValueSource.DOCKER_COMPOSE,
            ))
            # 定义行不再作为引用扫描，NAME=${NAME} 只记一次
            continue

        for ref in REFERENCE_PATTERN.finditer(line):
            occurrences.append(EnvVarOccurrence.create(
                name=ref.group(1),
                file=file_path,
                line=line_num,
                language="docker-compose",
                pattern="variable-reference",
            ))

    return occurrences


def scan_compose_files(
    base_path: Path,
    exclude_patterns: Optional[list[str]] = None,
    discovery: Optional[FileDiscovery] = None,
) -> tuple[list[EnvVarOccurrence], list[str]]:
    """扫描 docker-compose*.yml / compose*.yml"""
    return scan_matching_files(
        base_path, "compose", parse_compose_content, exclude_patterns, discovery
    )
