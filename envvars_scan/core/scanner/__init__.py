"""
Scanner 模块 - 各配置格式的环境变量扫描器

模块化结构：
- models.py: 数据类定义
- patterns.py: 共用的名称模式
- properties.py: Spring/Quarkus 占位符
- dockerfile.py: Dockerfile ENV/ARG
- dotenv.py: .env 文件
- compose.py: docker-compose 文件
- kubernetes.py: Kubernetes 清单
"""

from envvars_scan.core.scanner.models import (
    ValueSource,
    EnvVarOccurrence,
    ScanResult,
    ComparisonResult,
)
from envvars_scan.core.scanner.patterns import (
    UPPERCASE_NAME_RE,
    is_uppercase_name,
    strip_quotes,
    clean_scalar,
)
from envvars_scan.core.scanner.properties import (
    parse_properties_content,
    scan_property_files,
)
from envvars_scan.core.scanner.dockerfile import (
    parse_dockerfile_content,
    scan_dockerfiles,
)
from envvars_scan.core.scanner.dotenv import (
    parse_env_value,
    parse_dotenv_content,
    scan_dotenv_files,
)
from envvars_scan.core.scanner.compose import (
    parse_compose_content,
    scan_compose_files,
)
from envvars_scan.core.scanner.kubernetes import (
    Section,
    SectionState,
    WORKLOAD_KINDS,
    next_state,
    split_documents,
    parse_k8s_content,
    scan_k8s_manifests,
)

__all__ = [
    # Models
    "ValueSource",
    "EnvVarOccurrence",
    "ScanResult",
    "ComparisonResult",
    # Patterns
    "UPPERCASE_NAME_RE",
    "is_uppercase_name",
    "strip_quotes",
    "clean_scalar",
    # Properties
    "parse_properties_content",
    "scan_property_files",
    # Dockerfile
    "parse_dockerfile_content",
    "scan_dockerfiles",
    # DotEnv
    "parse_env_value",
    "parse_dotenv_content",
    "scan_dotenv_files",
    # Compose
    "parse_compose_content",
    "scan_compose_files",
    # Kubernetes
    "Section",
    "SectionState",
    "WORKLOAD_KINDS",
    "next_state",
    "split_documents",
    "parse_k8s_content",
    "scan_k8s_manifests",
]
