"""CLI: 依赖准备与构建命令"""

from __future__ import annotations

from pathlib import Path

import click

from ngxbuild.cli import fatal_errors, load_config
from ngxbuild.core.includes import parse_includes_from_makefile
from ngxbuild.services.prepare_service import PrepareService

_config_option = click.option(
    "--config", "-c", "config_path", default=None,
    type=click.Path(dir_okay=False), help="YAML 配置文件路径（可选）",
)


def register(group: click.Group) -> None:
    group.add_command(prepare)
    group.add_command(plan)
    group.add_command(includes)


@click.command()
@_config_option
def prepare(config_path: str | None) -> None:
    """下载、校验、解压依赖并按需构建 nginx，输出头文件路径"""
    with fatal_errors():
        result = PrepareService(load_config(config_path)).prepare()
    status = "已重建" if result.rebuilt else "复用上次构建"
    click.echo(f"nginx: {result.install_dir} ({status})", err=True)
    for path in result.include_paths:
        click.echo(str(path))


@click.command()
@_config_option
def plan(config_path: str | None) -> None:
    """输出 configure 参数以及是否需要重建（不执行构建）"""
    with fatal_errors():
        flags, decision = PrepareService(load_config(config_path)).plan()
    for flag in flags:
        click.echo(flag)
    click.echo(f"需要重建: {'是' if decision.rebuild_required else '否'}", err=True)


@click.command()
@click.argument("makefile", type=click.Path(dir_okay=False, path_type=Path))
def includes(makefile: Path) -> None:
    """从 autoconf 生成的 Makefile 中解析头文件路径"""
    with fatal_errors():
        paths = parse_includes_from_makefile(makefile)
    for path in paths:
        click.echo(str(path))
