"""远程资源下载

本地优先: 缓存中已有非空文件时直接返回，不访问网络。
下载先写入同目录临时文件，完整写完后再 rename，
中途失败或被中断不会留下会被误认为"已下载"的半截文件。
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import urllib.error
import urllib.request
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ngxbuild.core.exceptions import FetchError
from ngxbuild.utils.net import url_filename, validate_url_scheme

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 120  # 秒
CHUNK_SIZE = 64 * 1024


def _urlopen(url: str) -> Any:
    return urllib.request.urlopen(url, timeout=DOWNLOAD_TIMEOUT)  # nosec B310


def is_present(path: Path) -> bool:
    """文件存在且非空才算已下载"""
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False


class Fetcher:
    """把 URL 下载到缓存根目录，文件名取 URL 最后一段"""

    def __init__(self, root: Path, opener: Callable[[str], Any] | None = None) -> None:
        self.root = root
        self._opener = opener or _urlopen

    def local_path(self, url: str) -> Path:
        return self.root / url_filename(url)

    def fetch(self, url: str) -> Path:
        """返回本地路径，必要时下载

        Raises:
            ValidationError: 非 http/https URL
            FetchError: 网络或写盘失败（不重试）
        """
        dest = self.local_path(url)
        if is_present(dest):
            logger.info("缓存命中: %s", dest)
            return dest

        validate_url_scheme(url, context="fetch")
        logger.info("下载: %s", url)
        self.root.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.root), prefix=f".{dest.name}.", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as out, self._opener(url) as resp:
                shutil.copyfileobj(resp, out, CHUNK_SIZE)
            os.replace(tmp, dest)
        except (urllib.error.URLError, OSError) as e:
            Path(tmp).unlink(missing_ok=True)
            raise FetchError(f"下载失败: {url} - {e}") from e
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.info("已保存: %s (%d 字节)", dest, dest.stat().st_size)
        return dest
