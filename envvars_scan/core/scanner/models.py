"""
数据模型定义

包含扫描器使用的所有数据类。
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ValueSource(str, Enum):
    """值的来源"""
    CODE_DEFAULT = "code-default"
    DOTENV = "dotenv"
    DOCKERFILE_ENV = "dockerfile-env"
    DOCKERFILE_ARG = "dockerfile-arg"
    K8S_DEPLOYMENT = "k8s-deployment"
    K8S_CONFIGMAP = "k8s-configmap"
    K8S_SECRET = "k8s-secret"
    DOCKER_COMPOSE = "docker-compose"
    PROPERTIES = "properties"


@dataclass(frozen=True)
class EnvVarOccurrence:
    """
    环境变量出现记录

    Attributes:
        name: 环境变量名称
        file: 源文件绝对路径
        line: 行号 (1-based)
        language: 来源格式/语言 (dotenv, dockerfile, kubernetes, python ...)
        pattern: 来源内的子类型 (ENV, configmap, spring.placeholder ...)
        value: 解析出的值
        value_source: 值的来源，仅在 value 存在时设置
        is_default: 值是否为回退默认值
    """
    name: str
    file: str
    line: int
    language: str
    pattern: str
    value: Optional[str] = None
    value_source: Optional[ValueSource] = None
    is_default: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("occurrence name must not be empty")
        if self.line < 1:
            raise ValueError(f"line must be >= 1, got {self.line}")
        if (self.value is None) != (self.value_source is None):
            raise ValueError(
                f"value and value_source must be set together ({self.name} at {self.file}:{self.line})"
            )
        if self.is_default and self.value is None:
            raise ValueError(f"is_default requires a value ({self.name} at {self.file}:{self.line})")

    @classmethod
    def create(
        cls,
        name: str,
        file: str,
        line: int,
        language: str,
        pattern: str,
        value: Optional[str] = None,
        source: Optional[ValueSource] = None,
        is_default: bool = False,
    ) -> "EnvVarOccurrence":
        """创建记录，空值视为缺失（同时丢弃来源和默认标记）"""
        if not value:
            return cls(name=name, file=file, line=line, language=language, pattern=pattern)
        return cls(
            name=name,
            file=file,
            line=line,
            language=language,
            pattern=pattern,
            value=value,
            value_source=source,
            is_default=is_default,
        )

    @property
    def key(self) -> tuple[str, str, int]:
        """去重用的身份键 (name, file, line)"""
        return (self.name, self.file, self.line)

    @property
    def has_value(self) -> bool:
        return self.value is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "file": self.file,
            "line": self.line,
            "language": self.language,
            "pattern": self.pattern,
        }
        if self.value is not None:
            data["value"] = self.value
            data["valueSource"] = self.value_source.value
        data["isDefault"] = self.is_default
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EnvVarOccurrence":
        source = data.get("valueSource")
        return cls.create(
            name=data["name"],
            file=data["file"],
            line=data["line"],
            language=data.get("language", "unknown"),
            pattern=data.get("pattern", ""),
            value=data.get("value"),
            source=ValueSource(source) if source else None,
            is_default=bool(data.get("isDefault", False)),
        )


@dataclass
class ScanResult:
    """
    扫描结果

    Attributes:
        path: 被扫描的根路径
        env_vars: 去重后的环境变量记录
        errors: 非致命的错误/警告信息
    """
    path: str
    env_vars: list[EnvVarOccurrence] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def unique_names(self) -> list[str]:
        """按首次出现顺序返回不重复的变量名"""
        seen: set[str] = set()
        names: list[str] = []
        for ev in self.env_vars:
            if ev.name not in seen:
                seen.add(ev.name)
                names.append(ev.name)
        return names

    def group_by_name(self) -> dict[str, list[EnvVarOccurrence]]:
        groups: dict[str, list[EnvVarOccurrence]] = {}
        for ev in self.env_vars:
            groups.setdefault(ev.name, []).append(ev)
        return groups

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "envVars": [ev.to_dict() for ev in self.env_vars],
            "errors": list(self.errors),
        }

    def to_json(self) -> str:
        """序列化为 JSON 字符串"""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "ScanResult":
        """从 JSON 字符串反序列化"""
        data = json.loads(json_str)
        return cls(
            path=data.get("path", ""),
            env_vars=[EnvVarOccurrence.from_dict(ev) for ev in data.get("envVars", [])],
            errors=list(data.get("errors", [])),
        )


@dataclass
class ComparisonResult:
    """
    两次扫描的变量名对比

    Attributes:
        added: 仅在新结果中出现的变量名
        removed: 仅在旧结果中出现的变量名
        unchanged: 两边都有的变量名
    """
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "added": list(self.added),
            "removed": list(self.removed),
            "unchanged": list(self.unchanged),
        }
