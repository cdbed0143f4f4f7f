"""CLI: 绑定生成与 cargo 集成"""

from __future__ import annotations

from pathlib import Path

import click

from ngxbuild.cli import fatal_errors, load_config
from ngxbuild.core.config import ENV_VARS_TRIGGERING_RECOMPILE
from ngxbuild.services.bindings import BINDINGS_FILE, DEFAULT_HEADER, BindgenCli
from ngxbuild.services.prepare_service import PrepareService


def register(group: click.Group) -> None:
    group.add_command(bindings)
    group.add_command(cargo_hints)


@click.command()
@click.option("--config", "-c", "config_path", default=None, help="YAML 配置文件路径（可选）")
@click.option("--header", default=DEFAULT_HEADER, show_default=True, help="绑定入口头文件")
@click.option("--out", "out_dir", default=None, help="输出目录（默认取 OUT_DIR）")
def bindings(config_path: str | None, header: str, out_dir: str | None) -> None:
    """准备依赖后调用 bindgen 生成绑定"""
    with fatal_errors():
        config = load_config(config_path)
        out_dir = out_dir or config.out_dir
        if not out_dir:
            raise click.UsageError("需要 --out 或环境变量 OUT_DIR")
        svc = PrepareService(config)
        result = svc.prepare()
        output = BindgenCli(svc.executor).generate(
            result.include_paths, Path(header).absolute(), Path(out_dir) / BINDINGS_FILE,
        )
    click.echo(str(output))


@click.command(name="cargo-hints")
@click.option("--header", default=DEFAULT_HEADER, show_default=True, help="绑定入口头文件")
def cargo_hints(header: str) -> None:
    """输出 cargo:rerun-if-* 指令，这些输入变化时需要重新准备"""
    for var in ENV_VARS_TRIGGERING_RECOMPILE:
        click.echo(f"cargo:rerun-if-env-changed={var}")
    click.echo("cargo:rerun-if-changed=build.rs")
    click.echo(f"cargo:rerun-if-changed={header}")
