"""configure / make 子进程编排

只负责定位工具、确定并发度并以合并输出方式运行；
并行编译本身交给 make -j。
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from ngxbuild.core.exceptions import ToolNotFoundError
from ngxbuild.utils.shell import CommandExecutor, CommandResult, run_checked

logger = logging.getLogger(__name__)

# gmake 优先: macOS 上通过 homebrew 安装的 GNU make 4+ 通常叫 gmake
MAKE_CANDIDATES = ("gmake", "make")


def resolve_job_count(
    num_jobs: str | None,
    cpu_count: Callable[[], int | None] = os.cpu_count,
) -> int:
    """并发度: 显式 NUM_JOBS > 主机 CPU 数 > 1

    NUM_JOBS 已设置但无法解析时取 1。
    """
    if num_jobs is not None:
        try:
            n = int(num_jobs)
        except ValueError:
            logger.warning("NUM_JOBS 无法解析: %r，使用 1", num_jobs)
            return 1
        return n if n > 0 else 1
    return cpu_count() or 1


class ProcessOrchestrator:
    """运行依赖源码树中的 configure 与 make"""

    def __init__(self, executor: CommandExecutor, num_jobs: str | None = None) -> None:
        self.executor = executor
        self.num_jobs = num_jobs

    def find_make(self) -> str:
        for name in MAKE_CANDIDATES:
            path = self.executor.which(name)
            if path:
                return path
        raise ToolNotFoundError("PATH 中找不到 make（gmake 或 make）")

    def run_configure(self, source_dir: Path, flags: list[str]) -> CommandResult:
        """在源码目录运行 ./configure

        Raises:
            ToolNotFoundError: configure 脚本不存在
            ExecutionError: configure 返回非零
        """
        configure = source_dir / "configure"
        if not configure.exists():
            raise ToolNotFoundError(f"找不到 configure 脚本: {configure}")
        logger.info("运行 configure，参数: %s", " ".join(flags))
        return run_checked(
            self.executor, [str(configure), *flags],
            cwd=str(source_dir), label="configure",
        )

    def run_build(self, source_dir: Path, stage: str = "install") -> CommandResult:
        """在源码目录运行 make -j <n> <stage>

        Raises:
            ToolNotFoundError: 找不到 make
            ExecutionError: make 返回非零
        """
        make = self.find_make()
        jobs = resolve_job_count(self.num_jobs)
        return run_checked(
            self.executor, [make, "-j", str(jobs), stage],
            cwd=str(source_dir), label=f"make {stage}",
        )
