"""
envvars-scan - 发现代码库中的环境变量并解析其配置值与来源
"""

__version__ = "0.3.0"
