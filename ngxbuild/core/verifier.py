"""签名校验

先确认签名文件本身可被 gpg 解析，再用缓存内的公钥校验源码包。
任一步失败都会删除相关文件后再抛出，保证下次运行从干净状态重新下载。
gpg 不可用时跳过校验并告警。
"""

from __future__ import annotations

import logging
from pathlib import Path

from ngxbuild.core.exceptions import SignatureFormatError, SignatureVerificationError
from ngxbuild.core.fetcher import Fetcher
from ngxbuild.core.gpg import GnuPG

logger = logging.getLogger(__name__)


class Verifier:
    """源码包 + 分离签名校验"""

    def __init__(self, gpg: GnuPG, fetcher: Fetcher) -> None:
        self.gpg = gpg
        self.fetcher = fetcher

    def check_signature_well_formed(self, signature: Path) -> None:
        """用 gpg --list-packets 解析签名文件（不做校验）

        Raises:
            SignatureFormatError: 签名文件损坏或不是签名（文件已删除）
        """
        if not self.gpg.available:
            logger.warning("未找到 gpg，跳过签名文件格式检查: %s", signature.name)
            return
        r = self.gpg.list_packets(signature)
        if not r.success:
            signature.unlink(missing_ok=True)
            raise SignatureFormatError(
                f"签名文件无效: {signature}", output=r.output,
            )

    def check_archive_against_signature(self, archive: Path, signature: Path) -> None:
        """用 gpg --verify 校验源码包

        Raises:
            SignatureVerificationError: 校验失败（源码包与签名均已删除）
        """
        if not self.gpg.available:
            logger.warning("未找到 gpg，跳过签名校验: %s", archive.name)
            return
        r = self.gpg.verify(signature, archive)
        if not r.success:
            archive.unlink(missing_ok=True)
            # 签名与被删除的源码包一起作废，下次成对重新下载
            signature.unlink(missing_ok=True)
            raise SignatureVerificationError(
                f"源码包签名校验失败: {archive}", output=r.output,
            )
        logger.info("签名校验通过: %s", archive.name)

    def get_verified_archive(self, archive_url: str, signature_url: str) -> Path:
        """下载签名 → 检查格式 → 下载源码包 → 校验，返回可信的源码包路径"""
        signature = self.fetcher.fetch(signature_url)
        self.check_signature_well_formed(signature)
        archive = self.fetcher.fetch(archive_url)
        self.check_archive_against_signature(archive, signature)
        return archive
