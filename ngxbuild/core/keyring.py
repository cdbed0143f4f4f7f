"""GPG 公钥导入

每个公钥在每个缓存根目录下只导入一次，成功后在 GPG home 中写一个
<key_id>.key 标记文件。gpg 不可用时整体跳过并告警，后续校验同样会跳过。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from ngxbuild.core.exceptions import KeyImportError
from ngxbuild.core.gpg import GnuPG
from ngxbuild.core.models import KeyIdentity

logger = logging.getLogger(__name__)


class KeyRing:
    """缓存本地的受信公钥集合"""

    def __init__(self, gpg: GnuPG) -> None:
        self.gpg = gpg

    @property
    def home(self) -> Path:
        return self.gpg.home

    def record_path(self, key_id: str) -> Path:
        return self.home / f"{key_id}.key"

    def is_imported(self, key_id: str) -> bool:
        return self.record_path(key_id).exists()

    def ensure_imported(self, identities: Iterable[KeyIdentity]) -> list[str]:
        """导入尚未记录的公钥，返回本次新导入的 key id 列表

        Raises:
            KeyImportError: gpg 存在但拉取某个公钥失败
        """
        if not self.gpg.available:
            logger.warning("未找到 gpg，跳过公钥导入，下载文件将不做签名校验")
            return []

        imported: list[str] = []
        for identity in identities:
            if self.is_imported(identity.key_id):
                continue
            r = self.gpg.recv_key(identity.server, identity.key_id)
            if not r.success:
                raise KeyImportError(
                    f"导入 GPG 公钥失败: {identity.key_id} (server={identity.server})",
                    output=r.output,
                )
            self.record_path(identity.key_id).touch()
            logger.info("已导入 GPG 公钥: %s", identity.key_id)
            imported.append(identity.key_id)
        return imported
