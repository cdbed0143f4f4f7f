"""GnuPG 调用封装

所有 gpg 调用都使用缓存目录内的 --homedir。
系统未安装 gpg 时 available 为 False，由调用方决定降级（跳过校验并告警）。
"""

from __future__ import annotations

import logging
from pathlib import Path

from ngxbuild.utils.shell import CommandExecutor, CommandResult

logger = logging.getLogger(__name__)


class GnuPG:
    """gpg 命令行的最小封装: recv-keys / list-packets / verify"""

    def __init__(self, executor: CommandExecutor, home: Path, binary: str = "gpg") -> None:
        self.executor = executor
        self.home = home
        self._path = executor.which(binary)

    @property
    def available(self) -> bool:
        return self._path is not None

    def _run(self, *args: str) -> CommandResult:
        if self._path is None:
            raise RuntimeError("gpg 不可用")
        cmd = [self._path, "--homedir", str(self.home), *args]
        logger.debug("gpg: %s", " ".join(cmd))
        return self.executor.execute(cmd, cwd=str(self.home))

    def recv_key(self, server: str, key_id: str) -> CommandResult:
        return self._run("--keyserver", server, "--recv-keys", key_id)

    def list_packets(self, signature: Path) -> CommandResult:
        return self._run("--list-packets", str(signature))

    def verify(self, signature: Path, archive: Path) -> CommandResult:
        return self._run("--verify", str(signature), str(archive))
