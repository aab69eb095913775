"""
敏感值遮蔽

变量名看起来像密钥、口令等时，显示值只保留首尾字符。
"""

import re
from typing import Optional

SENSITIVE_PATTERNS: list[re.Pattern] = [
    re.compile(r'secret', re.IGNORECASE),
    re.compile(r'password', re.IGNORECASE),
    re.compile(r'passwd', re.IGNORECASE),
    re.compile(r'(?:^|_)key(?:_|$)', re.IGNORECASE),
    re.compile(r'token', re.IGNORECASE),
    re.compile(r'(?:^|_)api(?:_|$)', re.IGNORECASE),
    re.compile(r'auth', re.IGNORECASE),
    re.compile(r'credential', re.IGNORECASE),
    re.compile(r'private', re.IGNORECASE),
]


def is_sensitive_var(name: str) -> bool:
    """变量名是否暗示敏感数据"""
    return any(p.search(name) for p in SENSITIVE_PATTERNS)


def mask_value(value: str) -> str:
    """遮蔽值：长度 <= 4 全遮，<= 8 保留首尾各 1 个字符，否则各 2 个"""
    if len(value) <= 4:
        return "****"
    if len(value) <= 8:
        return value[:1] + "****" + value[-1:]
    return value[:2] + "****" + value[-2:]


def display_value(name: str, value: Optional[str], show_values: bool) -> Optional[str]:
    if not value or not show_values:
        return None
    return mask_value(value) if is_sensitive_var(name) else value
