"""缓存目录布局

所有下载的源码包、签名、GPG 数据和解压后的源码都位于同一个缓存根目录下:

    <root>/.gnupg/                          GPG home + 每个已导入公钥一个标记文件
    <root>/<archive-name>                   源码包与签名
    <root>/src/<os>-<arch>/<stem>/          解压后的源码（可由 CARGO_TARGET_TMPDIR 重定向）
    <root>/nginx/<version>/<os>-<arch>/     nginx 安装目录
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ngxbuild.core.config import Config
from ngxbuild.core.exceptions import CacheError

logger = logging.getLogger(__name__)


def ensure(path: Path) -> Path:
    """创建目录（含父目录），已存在时不做任何事"""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CacheError(f"无法创建目录: {path}: {e}") from e
    return path


def default_cache_root(config: Config) -> Path:
    """缓存根目录: NGX_CACHE_DIR，否则为项目目录的上级目录下的 .cache"""
    if config.cache_dir:
        return Path(config.cache_dir)
    project_dir = Path(config.manifest_dir) if config.manifest_dir else Path.cwd()
    return project_dir.absolute().parent / ".cache"


class CacheStore:
    """缓存根目录及其派生路径"""

    def __init__(self, root: Path, config: Config) -> None:
        self.root = root
        self.config = config

    @classmethod
    def open(cls, config: Config) -> CacheStore:
        store = cls(ensure(default_cache_root(config)), config)
        logger.info("缓存目录: %s", store.root)
        return store

    @property
    def gnupg_home(self) -> Path:
        """缓存内独立的 GPG home，不触碰用户默认的 ~/.gnupg"""
        home = self.root / ".gnupg"
        if not home.exists():
            ensure(home)
            os.chmod(home, 0o700)
        return home

    @property
    def source_root(self) -> Path:
        if self.config.source_dir_override:
            return Path(self.config.source_dir_override)
        return self.root / "src" / self.config.platform_tag

    def install_dir(self, nginx_version: str | None = None) -> Path:
        version = nginx_version or self.config.nginx_version
        return self.root / "nginx" / version / self.config.platform_tag
