"""
正则表达式模式定义

各格式扫描器共用的名称模式和引号处理。
"""

import re

# 约定的环境变量名：大写 snake-case
UPPERCASE_NAME_RE = re.compile(r'^[A-Z][A-Z0-9_]*$')

BLOCK_SCALAR_INDICATORS = frozenset({"|", ">", "|-", ">-"})


def is_uppercase_name(name: str) -> bool:
    return bool(UPPERCASE_NAME_RE.match(name))


def strip_quotes(value: str) -> str:
    """去掉成对的单引号或双引号"""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def clean_scalar(raw: str) -> str:
    """
    清理单行 YAML 标量值

    带引号时取到匹配的闭合引号为止；未加引号时去掉 " #" 之后的行内注释。
    """
    value = raw.strip()
    if value[:1] in ('"', "'"):
        end = value.find(value[0], 1)
        if end > 0:
            return value[1:end]
        return value
    comment_idx = value.find(' #')
    if comment_idx >= 0:
        value = value[:comment_idx]
    return value.strip()
