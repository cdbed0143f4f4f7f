"""configure 参数规划与重建判定

参数列表顺序固定:
  1. --prefix
  2. --with-debug（NGX_DEBUG=true 时）
  3. Linux 专用参数（目标系统为 linux 时）
  4. --with-zlib / --with-pcre / --with-openssl 源码路径
  5. 模块开关列表

构建指纹是参数列表用单个空格拼接的文本，仅做文本比较：
参数顺序或重复项的任何变化都视为配置变化。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from ngxbuild.core.config import Config
from ngxbuild.core.exceptions import ValidationError
from ngxbuild.core.models import BuildDecision
from ngxbuild.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)

BUILD_INFO_FILE = "last-build-info"

# --with-http_slice_module 重复出现两次，与历史指纹保持一致，不要去重
NGX_BASE_MODULES = (
    "--with-compat",
    "--with-http_addition_module",
    "--with-http_auth_request_module",
    "--with-http_flv_module",
    "--with-http_gunzip_module",
    "--with-http_gzip_static_module",
    "--with-http_random_index_module",
    "--with-http_realip_module",
    "--with-http_secure_link_module",
    "--with-http_slice_module",
    "--with-http_slice_module",
    "--with-http_ssl_module",
    "--with-http_stub_status_module",
    "--with-http_sub_module",
    "--with-http_v2_module",
    "--with-stream_realip_module",
    "--with-stream_ssl_module",
    "--with-stream_ssl_preread_module",
    "--with-stream",
    "--with-threads",
)

NGX_LINUX_ADDITIONAL_OPTS = (
    "--with-file-aio",
    "--with-cc-opt=-g -fstack-protector-strong -Wformat -Werror=format-security "
    "-Wp,-D_FORTIFY_SOURCE=2 -fPIC",
    "--with-ld-opt=-Wl,-Bsymbolic-functions -Wl,-z,relro -Wl,-z,now "
    "-Wl,--as-needed -pie",
)

# (configure 参数, 依赖名)
SOURCE_PATH_FLAGS = (
    ("--with-zlib", "zlib"),
    ("--with-pcre", "pcre2"),
    ("--with-openssl", "openssl"),
)


def fingerprint(flags: list[str]) -> str:
    return " ".join(flags)


class BuildPlanner:
    """根据配置和依赖源码路径生成 configure 参数，并判断是否需要重建"""

    def __init__(self, config: Config) -> None:
        self.config = config

    def plan(self, install_dir: Path, sources: Mapping[str, Path]) -> list[str]:
        """生成 configure 参数列表（相同输入总是得到相同输出）"""
        flags = [f"--prefix={install_dir}"]
        if self.config.debug:
            logger.info("启用 --with-debug")
            flags.append("--with-debug")
        if self.config.effective_target_os == "linux":
            flags.extend(NGX_LINUX_ADDITIONAL_OPTS)
        for flag, name in SOURCE_PATH_FLAGS:
            path = sources.get(name)
            if path is None:
                raise ValidationError(f"缺少依赖 [{name}] 的源码路径")
            flags.append(f"{flag}={path}")
        flags.extend(NGX_BASE_MODULES)
        return flags

    @staticmethod
    def build_info_path(source_dir: Path) -> Path:
        return source_dir / BUILD_INFO_FILE

    def read_fingerprint(self, source_dir: Path) -> str | None:
        path = self.build_info_path(source_dir)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("读取构建指纹失败，按已变化处理: %s (%s)", path, e)
            return None

    def decide(self, install_dir: Path, source_dir: Path, flags: list[str]) -> BuildDecision:
        """二进制、Makefile、指纹三者任一不满足即需要重建"""
        current = fingerprint(flags)
        decision = BuildDecision(
            binary_exists=(install_dir / "sbin" / "nginx").exists(),
            makefile_exists=(source_dir / "Makefile").exists(),
            fingerprint_unchanged=self.read_fingerprint(source_dir) == current,
            fingerprint=current,
        )
        logger.info("nginx 已安装: %s", decision.binary_exists)
        logger.info("autoconf Makefile 已生成: %s", decision.makefile_exists)
        logger.info("构建配置已变化: %s", not decision.fingerprint_unchanged)
        return decision

    def record(self, source_dir: Path, build_fingerprint: str) -> None:
        """记录最近一次成功构建的指纹（只能在 configure + make install 成功后调用）"""
        atomic_write(self.build_info_path(source_dir), build_fingerprint)
