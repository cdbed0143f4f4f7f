"""集中配置管理

环境变量只在入口处读取一次，填充 Config 后显式传给各组件；
组件内部不直接访问 os.environ。
支持从 YAML 文件加载默认值，环境变量优先级更高。
"""

from __future__ import annotations

import logging
import platform
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ngxbuild.core.exceptions import ConfigError
from ngxbuild.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

ZLIB_DEFAULT_VERSION = "1.3"
PCRE2_DEFAULT_VERSION = "10.42"
OPENSSL_DEFAULT_VERSION = "3.0.7"
NGX_DEFAULT_VERSION = "1.24.0"

# 环境变量名 -> Config 字段名
ENV_FIELDS: dict[str, str] = {
    "ZLIB_VERSION": "zlib_version",
    "PCRE2_VERSION": "pcre2_version",
    "OPENSSL_VERSION": "openssl_version",
    "NGX_VERSION": "nginx_version",
    "NUM_JOBS": "num_jobs",
    "CARGO_CFG_TARGET_OS": "target_os",
    "CARGO_TARGET_TMPDIR": "source_dir_override",
    "CARGO_MANIFEST_DIR": "manifest_dir",
    "NGX_CACHE_DIR": "cache_dir",
    "OUT_DIR": "out_dir",
}

# 这些变量变化时需要重新执行整个准备流程（cargo build script 场景）
ENV_VARS_TRIGGERING_RECOMPILE = (
    "DEBUG",
    "OUT_DIR",
    "ZLIB_VERSION",
    "PCRE2_VERSION",
    "OPENSSL_VERSION",
    "NGX_VERSION",
    "CARGO_CFG_TARGET_OS",
    "CARGO_MANIFEST_DIR",
    "CARGO_TARGET_TMPDIR",
)

_OS_NAMES = {"darwin": "macos"}
_ARCH_NAMES = {"amd64": "x86_64", "arm64": "aarch64"}


def detect_host_os() -> str:
    """当前主机操作系统名（linux / macos / windows / freebsd ...）"""
    name = platform.system().lower()
    return _OS_NAMES.get(name, name)


def detect_host_arch() -> str:
    """当前主机 CPU 架构名（x86_64 / aarch64 ...）"""
    name = platform.machine().lower()
    return _ARCH_NAMES.get(name, name)


@dataclass
class Config:
    """依赖准备流程配置"""

    # 版本
    zlib_version: str = ZLIB_DEFAULT_VERSION
    pcre2_version: str = PCRE2_DEFAULT_VERSION
    openssl_version: str = OPENSSL_DEFAULT_VERSION
    nginx_version: str = NGX_DEFAULT_VERSION

    # 构建
    debug: bool = False
    num_jobs: str | None = None  # 原样保留，由编排器解析
    target_os: str | None = None

    # 目录
    manifest_dir: str | None = None
    cache_dir: str | None = None
    source_dir_override: str | None = None
    out_dir: str | None = None

    # 主机平台（可在测试中覆盖）
    host_os: str = field(default_factory=detect_host_os)
    host_arch: str = field(default_factory=detect_host_arch)

    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def effective_target_os(self) -> str:
        return self.target_os or self.host_os

    @property
    def platform_tag(self) -> str:
        """<os>-<arch>，用于区分不同平台的源码和安装目录"""
        return f"{self.host_os}-{self.host_arch}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> Config:
        """仅从环境变量构建配置"""
        cfg = cls()
        cfg.apply_env(environ)
        return cfg

    @classmethod
    def from_file(cls, path: str, environ: Mapping[str, str] | None = None) -> Config:
        """从 YAML 文件加载配置，再叠加环境变量（环境变量优先）"""
        try:
            data = load_yaml(path)
        except (ValueError, OSError) as e:
            raise ConfigError(f"配置文件读取失败: {path}: {e}") from e
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        try:
            cfg = cls(**matched)
        except TypeError as e:
            raise ConfigError(f"配置文件内容无效: {path}: {e}") from e
        if not isinstance(cfg.debug, bool):
            raise ConfigError(f"debug 必须是布尔值: {cfg.debug!r}")
        if cfg.num_jobs is not None:
            cfg.num_jobs = str(cfg.num_jobs)
        cfg.extra = extra
        if environ is not None:
            cfg.apply_env(environ)
        logger.info("配置已加载: %s", path)
        return cfg

    def apply_env(self, environ: Mapping[str, str]) -> None:
        """用环境变量覆盖字段；未设置的变量不影响现有值"""
        for var, attr in ENV_FIELDS.items():
            if var in environ:
                setattr(self, attr, environ[var])
        if "NGX_DEBUG" in environ:
            self.debug = environ["NGX_DEBUG"] == "true"
