"""
用户配置模块 - 读取项目内的 .skyhook/envvars-scan.yaml

支持：
1. customPatterns：自定义 semgrep 模式
2. includeExcludePatterns：追加到默认排除目录
3. excludePatterns：完全替换默认排除目录
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


# ============================================================
# 配置常量
# ============================================================

CONFIG_DIR_NAME = ".skyhook"
CONFIG_FILE_NAME = "envvars-scan.yaml"

EXAMPLE_CONFIG = """# Environment Variable Scanner Configuration
# Place this file at .skyhook/envvars-scan.yaml in your repository

# Custom patterns for detecting environment variables
# These are specific to your codebase and not covered by built-in patterns
customPatterns:
  # Example: Custom env var helper
  # - id: my-custom-helper
  #   description: "Custom helper that gets env var with default value"
  #   pattern: 'getEnvVar("$VAR", ...)'
  #   languages: [javascript, typescript]

# Additional directories to exclude from scanning (merged with defaults)
# Default excludes: node_modules, .next, dist, .git, vendor, build, .mastra, coverage
# includeExcludePatterns:
#   - "generated"
#   - "third_party"

# Override default exclude patterns entirely (use with caution)
# excludePatterns:
#   - "node_modules"
#   - "dist"
"""


# ============================================================
# 数据模型
# ============================================================

class ConfigError(Exception):
    """配置文件错误"""
    pass


@dataclass
class CustomPattern:
    """
    用户自定义模式

    Attributes:
        id: 规则 ID（生成规则时加 custom- 前缀）
        pattern: semgrep 模式表达式，用 $VAR 捕获变量名
        languages: 适用的语言
        description: 说明
    """
    id: str
    pattern: str
    languages: list[str]
    description: Optional[str] = None


@dataclass
class UserConfig:
    """
    项目配置

    Attributes:
        custom_patterns: 自定义模式
        exclude_patterns: 替换默认排除目录（None 表示不替换）
        include_exclude_patterns: 追加的排除目录
    """
    custom_patterns: list[CustomPattern] = field(default_factory=list)
    exclude_patterns: Optional[list[str]] = None
    include_exclude_patterns: Optional[list[str]] = None


# ============================================================
# 加载函数
# ============================================================

def default_config_path(base_path: Path) -> Path:
    return Path(base_path) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def _string_list(data: dict[str, Any], key: str) -> Optional[list[str]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list")
    return [str(item) for item in value]


def _parse_custom_pattern(entry: Any) -> CustomPattern:
    if not isinstance(entry, dict):
        raise ConfigError(f"Custom pattern must be a mapping, got: {entry!r}")
    missing = [key for key in ("id", "pattern", "languages") if not entry.get(key)]
    if missing:
        raise ConfigError(f"Custom pattern {entry.get('id', '?')} is missing: {', '.join(missing)}")
    languages = entry["languages"]
    if isinstance(languages, str):
        languages = [languages]
    return CustomPattern(
        id=str(entry["id"]),
        pattern=str(entry["pattern"]),
        languages=[str(lang) for lang in languages],
        description=entry.get("description"),
    )


def parse_user_config(content: str) -> UserConfig:
    """
    解析配置文件内容

    Raises:
        ConfigError: YAML 无效或字段格式错误
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}") from e

    if data is None:
        return UserConfig()
    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping")

    patterns = data.get("customPatterns") or []
    if not isinstance(patterns, list):
        raise ConfigError("'customPatterns' must be a list")

    return UserConfig(
        custom_patterns=[_parse_custom_pattern(entry) for entry in patterns],
        exclude_patterns=_string_list(data, "excludePatterns"),
        include_exclude_patterns=_string_list(data, "includeExcludePatterns"),
    )


def load_user_config(base_path: Path, config_path: Optional[Path] = None) -> Optional[UserConfig]:
    """
    加载项目配置

    Args:
        base_path: 扫描根目录
        config_path: 显式指定的配置文件（可选）

    Returns:
        UserConfig；默认位置没有配置文件时返回 None

    Raises:
        ConfigError: 显式指定的配置文件不存在或无效
    """
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        try:
            return parse_user_config(config_path.read_text(encoding="utf-8"))
        except ConfigError as e:
            raise ConfigError(f"{config_path}: {e}") from e

    path = default_config_path(base_path)
    if not path.is_file():
        return None

    try:
        return parse_user_config(path.read_text(encoding="utf-8"))
    except (ConfigError, OSError) as e:
        logger.warning(f"Ignoring config file {path}: {e}")
        return None


def resolve_exclude_patterns(defaults: list[str], user_config: Optional[UserConfig]) -> list[str]:
    """
    计算生效的排除目录

    excludePatterns 完全替换默认值；否则默认值加上 includeExcludePatterns。
    """
    if user_config is None:
        return list(defaults)
    if user_config.exclude_patterns is not None:
        return list(user_config.exclude_patterns)
    excludes = list(defaults)
    for pattern in user_config.include_exclude_patterns or []:
        if pattern not in excludes:
            excludes.append(pattern)
    return excludes


def init_config(base_path: Path) -> tuple[Path, bool]:
    """
    写入示例配置文件

    Returns:
        (配置文件路径, 是否新建)
    """
    path = default_config_path(base_path)
    if path.exists():
        return path, False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(EXAMPLE_CONFIG, encoding="utf-8")
    return path, True
