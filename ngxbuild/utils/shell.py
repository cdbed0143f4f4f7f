"""Shell 命令执行工具: 统一子进程调用

通过 CommandExecutor 协议抽象子进程执行和 PATH 查找，
gpg / configure / make 均经此调用，方便测试时注入假实现。
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Protocol

from ngxbuild.core.exceptions import ExecutionError

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）

    merge_output=True 执行时 stderr 已合并进 stdout，stderr 为空。
    """

    returncode: int
    stdout: str
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return self.stdout + self.stderr


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议: 抽象子进程调用

    实现此协议即可替换底层执行方式。
    测试时可注入 fake 实现，无需 patch subprocess。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        merge_output: bool = True,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...

    def which(self, name: str) -> str | None:
        """在 PATH 中查找可执行文件，找不到返回 None"""
        ...


# =========================================================================
# 默认实现: 本地执行器
# =========================================================================

class LocalExecutor:
    """本地子进程执行器（默认实现）

    输出逐行记录到 DEBUG 日志，同时完整收集用于失败诊断。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        merge_output: bool = True,
    ) -> CommandResult:
        proc = subprocess.Popen(
            cmd, cwd=cwd, env=env, text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_output else subprocess.PIPE,
        )
        lines: list[str] = []
        assert proc.stdout is not None
        for line in proc.stdout:
            logger.debug("  | %s", line.rstrip("\n"))
            lines.append(line)
        stderr = proc.stderr.read() if proc.stderr is not None else ""
        returncode = proc.wait()
        return CommandResult(
            returncode=returncode,
            stdout="".join(lines),
            stderr=stderr,
        )

    def which(self, name: str) -> str | None:
        return shutil.which(name)


def format_cmd(cmd: list[str]) -> str:
    return " ".join(shlex.quote(str(part)) for part in cmd)


def run_checked(
    executor: CommandExecutor,
    cmd: list[str], *, cwd: str = ".",
    env: dict[str, str] | None = None,
    label: str = "cmd",
) -> CommandResult:
    """执行命令，失败抛 ExecutionError（携带命令和合并输出）

    Args:
        executor: 命令执行器
        cmd: 参数列表
        cwd: 工作目录
        env: 环境变量（不传则继承当前进程）
        label: 日志标签
    """
    logger.info("  %s: %s (cwd=%s)", label, format_cmd(cmd), cwd)
    r = executor.execute(
        cmd, cwd=cwd, env=env if env is not None else dict(os.environ),
    )
    if not r.success:
        raise ExecutionError(
            f"{label}失败 (rc={r.returncode}): {format_cmd(cmd)}",
            command=cmd, returncode=r.returncode, output=r.output,
        )
    return r
