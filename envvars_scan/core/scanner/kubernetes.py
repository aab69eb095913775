"""
Kubernetes 清单解析

支持的资源：
- 工作负载 (Deployment, StatefulSet, DaemonSet, Job, CronJob, Pod, ReplicaSet)：env: 列表
- ConfigMap：data: 键值（含多行块标量）
- Secret：data:（base64 解码）与 stringData:（字面值）

按行扫描，每个文档使用一个小状态机跟踪当前所在的段落及其缩进。
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

from envvars_scan.core.scanner.models import EnvVarOccurrence, ValueSource
from envvars_scan.core.scanner.patterns import BLOCK_SCALAR_INDICATORS, clean_scalar
from envvars_scan.filters.discovery import FileDiscovery, scan_matching_files

logger = logging.getLogger(__name__)

WORKLOAD_KINDS = frozenset({
    "Deployment",
    "StatefulSet",
    "DaemonSet",
    "Job",
    "CronJob",
    "Pod",
    "ReplicaSet",
})

API_VERSION_PATTERN = re.compile(r'^apiVersion:', re.MULTILINE)
KIND_PATTERN = re.compile(r'^kind:\s*["\']?(\w+)', re.MULTILINE)
ENV_NAME_PATTERN = re.compile(r'^-\s*name:\s*["\']?([A-Z][A-Z0-9_]*)["\']?\s*(?:#.*)?$')
ENV_VALUE_PATTERN = re.compile(r'^value:\s*(.*)$')
DATA_ENTRY_PATTERN = re.compile(r'^([A-Z][A-Z0-9_]*):\s*(.*)$')


class Section(Enum):
    """扫描器当前所在的段落"""
    OUTSIDE = "outside"
    WORKLOAD_ENV = "workload-env"
    CONFIG_DATA = "config-data"
    SECRET_DATA = "secret-data"
    SECRET_STRING_DATA = "secret-string-data"


@dataclass(frozen=True)
class SectionState:
    """段落状态：段落类型 + 段落键所在的缩进"""
    section: Section = Section.OUTSIDE
    indent: int = 0


OUTSIDE = SectionState()


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def _opening_section(kind: str, trimmed: str) -> Optional[Section]:
    """该行是否开启一个与资源类型相关的段落"""
    if kind in WORKLOAD_KINDS:
        if trimmed.startswith('env:'):
            return Section.WORKLOAD_ENV
    elif kind == "ConfigMap":
        if trimmed.startswith('data:'):
            return Section.CONFIG_DATA
    elif kind == "Secret":
        if trimmed.startswith('data:'):
            return Section.SECRET_DATA
        if trimmed.startswith('stringData:'):
            return Section.SECRET_STRING_DATA
    return None


def ends_section(state: SectionState, line: str) -> bool:
    """
    判断该行是否结束当前段落

    只有非空、非注释、非 "-" 列表项的行才可能结束段落，
    且其缩进不深于段落键。
    """
    if state.section is Section.OUTSIDE:
        return False
    trimmed = line.strip()
    if not trimmed or trimmed.startswith('#'):
        return False
    if trimmed.startswith('-'):
        return False
    return _indent_of(line) <= state.indent


def next_state(state: SectionState, kind: str, line: str) -> tuple[SectionState, bool]:
    """
    状态转移

    Returns:
        (新状态, 该行是否为段落头)
    """
    trimmed = line.strip()
    opened = _opening_section(kind, trimmed)
    if opened is not None:
        # data: 与 stringData: 互斥，进入其一即退出另一个
        return SectionState(opened, _indent_of(line)), True
    if ends_section(state, line):
        return OUTSIDE, False
    return state, False


def split_documents(content: str) -> Iterator[tuple[int, list[str]]]:
    """
    按 "---" 拆分多文档 YAML

    Yields:
        (文档首行在文件中的 0-based 偏移, 文档各行)
    """
    lines = [line.rstrip('\r') for line in content.split('\n')]
    start = 0
    current: list[str] = []
    for i, line in enumerate(lines):
        if line == '---':
            if current:
                yield start, current
            start = i + 1
            current = []
        else:
            current.append(line)
    if current:
        yield start, current


def get_manifest_kind(doc_text: str) -> Optional[str]:
    """同时有顶层 apiVersion: 和 kind: 才视为清单，返回 kind"""
    if not API_VERSION_PATTERN.search(doc_text):
        return None
    match = KIND_PATTERN.search(doc_text)
    return match.group(1) if match else None


def _read_block_scalar(lines: list[str], start: int, key_indent: int) -> tuple[list[str], int]:
    """
    读取块标量 (|, >, |-, >-) 的续行

    缩进至少比键深两列的行属于该值，空行跳过；遇到更浅的非空行停止。

    Returns:
        (续行内容, 下一个未消费行的索引)
    """
    parts: list[str] = []
    expected_indent = key_indent + 2
    j = start
    while j < len(lines):
        next_line = lines[j]
        next_trimmed = next_line.strip()
        if not next_trimmed:
            j += 1
            continue
        if _indent_of(next_line) < expected_indent:
            break
        parts.append(next_trimmed)
        j += 1
    return parts, j


def _decode_base64(value: str) -> str:
    """base64 解码，失败时原样返回"""
    try:
        return base64.b64decode(value, validate=True).decode('utf-8')
    except (binascii.Error, ValueError, UnicodeDecodeError):
        return value


def _data_value(section: Section, lines: list[str], i: int, raw: str) -> tuple[str, int]:
    """解析 data:/stringData: 条目的值，返回 (值, 下一个待扫描行索引)"""
    value = clean_scalar(raw)
    next_index = i + 1

    if value in BLOCK_SCALAR_INDICATORS:
        parts, next_index = _read_block_scalar(lines, i + 1, _indent_of(lines[i]))
        joiner = '' if section is Section.SECRET_DATA else '\n'
        value = joiner.join(parts)

    if section is Section.SECRET_DATA and value:
        value = _decode_base64(value)
    return value, next_index


SECTION_TAGS: dict[Section, tuple[str, ValueSource]] = {
    Section.CONFIG_DATA: ("configmap", ValueSource.K8S_CONFIGMAP),
    Section.SECRET_DATA: ("secret", ValueSource.K8S_SECRET),
    Section.SECRET_STRING_DATA: ("secret", ValueSource.K8S_SECRET),
}


def scan_document(
    lines: list[str],
    kind: str,
    file_path: str,
    line_offset: int = 0,
) -> list[EnvVarOccurrence]:
    """扫描单个清单文档"""
    occurrences: list[EnvVarOccurrence] = []
    state = OUTSIDE
    i = 0

    while i < len(lines):
        line = lines[i]
        state, is_header = next_state(state, kind, line)
        trimmed = line.strip()

        if is_header or state.section is Section.OUTSIDE or not trimmed or trimmed.startswith('#'):
            i += 1
            continue

        if state.section is Section.WORKLOAD_ENV:
            match = ENV_NAME_PATTERN.match(trimmed)
            if match:
                # value: 只认紧随其后的一行
                value = None
                if i + 1 < len(lines):
                    value_match = ENV_VALUE_PATTERN.match(lines[i + 1].strip())
                    if value_match:
                        value = clean_scalar(value_match.group(1))
                occurrences.append(EnvVarOccurrence.create(
                    name=match.group(1),
                    file=file_path,
                    line=line_offset + i + 1,
                    language="kubernetes",
                    pattern=kind.lower(),
                    value=value,
                    source=ValueSource.K8S_DEPLOYMENT,
                ))
            i += 1
            continue

        match = DATA_ENTRY_PATTERN.match(trimmed)
        if not match:
            i += 1
            continue

        value, next_index = _data_value(state.section, lines, i, match.group(2))
        pattern, source = SECTION_TAGS[state.section]
        occurrences.append(EnvVarOccurrence.create(
            name=match.group(1),
            file=file_path,
            line=line_offset + i + 1,
            language="kubernetes",
            pattern=pattern,
            value=value,
            source=source,
        ))
        i = next_index

    return occurrences


def parse_k8s_content(content: str, file_path: str = "") -> list[EnvVarOccurrence]:
    """解析 Kubernetes 清单内容字符串（可含多个文档）"""
    occurrences: list[EnvVarOccurrence] = []
    for line_offset, doc_lines in split_documents(content):
        kind = get_manifest_kind('\n'.join(doc_lines))
        if kind is None:
            continue
        if kind in WORKLOAD_KINDS or kind in ("ConfigMap", "Secret"):
            occurrences.extend(scan_document(doc_lines, kind, file_path, line_offset))
    return occurrences


def scan_k8s_manifests(
    base_path: Path,
    exclude_patterns: Optional[list[str]] = None,
    discovery: Optional[FileDiscovery] = None,
) -> tuple[list[EnvVarOccurrence], list[str]]:
    """扫描所有 *.yaml / *.yml 中的 Kubernetes 清单（读取失败静默跳过）"""
    occurrences, _ = scan_matching_files(
        base_path, "kubernetes", parse_k8s_content, exclude_patterns, discovery, quiet=True
    )
    return occurrences, []
