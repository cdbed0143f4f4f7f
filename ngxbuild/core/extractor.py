"""源码包解压

<name>-<version>.tar.gz 解压到 <output_root>/<name>-<version>/，
去掉包内自带的顶层目录。目标目录已存在时直接跳过。
单个条目解压失败（如宿主不支持的链接）会被跳过，跳过数量以告警形式输出。
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import zlib
from pathlib import Path, PurePosixPath

from ngxbuild.core.exceptions import ExtractionError
from ngxbuild.core.models import ExtractedSource

logger = logging.getLogger(__name__)


def archive_stem(archive: Path) -> str:
    """去掉最后两个后缀: nginx-1.24.0.tar.gz -> nginx-1.24.0"""
    return archive.name.rsplit(".", 2)[0]


def dependency_name(stem: str) -> str:
    """第一个连字符之前的部分: pcre2-10.42 -> pcre2"""
    name, sep, _ = stem.partition("-")
    if not sep or not name:
        raise ExtractionError(f"无法从文件名推导依赖名: {stem}")
    return name


def _strip_first(name: str) -> str:
    parts = PurePosixPath(name).parts[1:]
    return str(PurePosixPath(*parts)) if parts else ""


def extract(archive: Path, output_root: Path) -> ExtractedSource:
    """解压源码包，返回 (依赖名, 源码目录)

    Raises:
        ExtractionError: 文件名不符合 <name>-<version> 规则，或压缩包整体损坏
    """
    stem = archive_stem(archive)
    name = dependency_name(stem)
    target = output_root / stem

    if target.exists():
        logger.info("源码包 [%s] 已解压: %s", stem, target)
        return ExtractedSource(name=name, path=target)

    output_root.mkdir(parents=True, exist_ok=True)
    skipped = 0
    try:
        with tarfile.open(archive, "r:gz") as tf:
            members = tf.getmembers()
            # 硬链接按成员名查找目标，需与成员名一起去掉顶层目录
            for member in members:
                member.name = _strip_first(member.name)
                if member.islnk():
                    member.linkname = _strip_first(member.linkname)
            for member in members:
                if not member.name:
                    continue
                try:
                    tf.extract(member, path=target, filter="data")
                except (OSError, tarfile.TarError) as e:
                    skipped += 1
                    logger.debug("跳过条目 %s: %s", member.name, e)
    except (OSError, EOFError, zlib.error, tarfile.TarError) as e:
        # 截断的 gzip 流抛 EOFError 而不是 OSError
        # 不留下半截目录，否则下次运行会误判为已解压
        shutil.rmtree(target, ignore_errors=True)
        raise ExtractionError(f"解压失败: {archive}: {e}") from e

    if skipped:
        logger.warning("解压 %s 时跳过了 %d 个条目", archive.name, skipped)
    logger.info("已解压: %s -> %s", archive.name, target)
    return ExtractedSource(name=name, path=target)
