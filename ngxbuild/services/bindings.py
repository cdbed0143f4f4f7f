"""绑定生成器边界

生成器本身是外部工具；这里只负责把头文件路径转换成编译器参数并调用它。
默认实现调用 bindgen 命令行。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from ngxbuild.core.exceptions import ToolNotFoundError
from ngxbuild.utils.shell import CommandExecutor, run_checked

logger = logging.getLogger(__name__)

DEFAULT_HEADER = "wrapper.h"
BINDINGS_FILE = "bindings.rs"

# 不屏蔽该项时 Linux 上生成的绑定无法编译
BLOCKLIST_ITEMS = ("IPPORT_RESERVED",)


def clang_args(include_paths: Iterable[Path]) -> list[str]:
    return [f"-I{p}" for p in include_paths]


class BindingGenerator(Protocol):
    """绑定生成器协议"""

    def generate(self, include_paths: list[Path], header: Path, output: Path) -> Path:
        """生成绑定文件并返回其路径"""
        ...


class BindgenCli:
    """调用外部 bindgen 命令行生成绑定"""

    def __init__(self, executor: CommandExecutor, binary: str = "bindgen") -> None:
        self.executor = executor
        self.binary = binary

    def command(self, include_paths: list[Path], header: Path, output: Path) -> list[str]:
        path = self.executor.which(self.binary)
        if path is None:
            raise ToolNotFoundError(f"PATH 中找不到 {self.binary}")
        cmd = [path, str(header)]
        for item in BLOCKLIST_ITEMS:
            cmd += ["--blocklist-item", item]
        cmd += ["--no-layout-tests", "-o", str(output), "--"]
        return cmd + clang_args(include_paths)

    def generate(self, include_paths: list[Path], header: Path, output: Path) -> Path:
        cmd = self.command(include_paths, header, output)
        output.parent.mkdir(parents=True, exist_ok=True)
        run_checked(self.executor, cmd, cwd=str(header.parent), label="bindgen")
        logger.info("绑定已生成: %s", output)
        return output
