"""ngxbuild 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
环境变量只在这里读取一次，之后以 Config 形式传给服务层。
"""

from __future__ import annotations

import contextlib
import os
from collections.abc import Iterator

import click

from ngxbuild import __version__
from ngxbuild.core.config import Config
from ngxbuild.core.exceptions import NgxBuildError
from ngxbuild.utils.logger import setup_logging


class BuildFailed(click.ClickException):
    """把 NgxBuildError 转换为 click 的错误输出（exit code 1）"""

    def __init__(self, error: NgxBuildError) -> None:
        super().__init__(f"[{error.code}] {error}")


@contextlib.contextmanager
def fatal_errors() -> Iterator[None]:
    try:
        yield
    except NgxBuildError as e:
        raise BuildFailed(e) from e


def load_config(path: str | None) -> Config:
    """有配置文件时先加载文件，再叠加环境变量"""
    if path:
        return Config.from_file(path, os.environ)
    return Config.from_env(os.environ)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """ngxbuild - nginx 原生依赖树准备工具"""
    setup_logging(
        level=os.getenv("NGXBUILD_LOG_LEVEL", "INFO"),
        json_output=os.getenv("NGXBUILD_LOG_JSON", "") == "1",
    )


# 注册各领域子命令
from ngxbuild.cli.cmd_prepare import register as _reg_prepare  # noqa: E402
from ngxbuild.cli.cmd_bindings import register as _reg_bindings  # noqa: E402

_reg_prepare(main)
_reg_bindings(main)
