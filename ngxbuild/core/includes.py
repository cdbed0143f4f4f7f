"""从 autoconf 生成的 objs/Makefile 中提取头文件搜索路径

nginx 的 Makefile 中形如:

    ALL_INCS = -I src/core \\
        -I src/event \\
        -I objs

从 ALL_INCS 行开始，逐行取每个 "-I " 之后的路径，遇到第一行不含 "-I " 的行即停止。
相对路径以项目根目录（Makefile 所在目录的上一级）为基准解析。
"""

from __future__ import annotations

import logging
from pathlib import Path

from ngxbuild.core.exceptions import MakefileParseError

logger = logging.getLogger(__name__)

INCLUDES_VARIABLE = "ALL_INCS"


def _includes_on_line(line: str) -> list[str] | None:
    """取每个 "-I " 之后的路径，去掉行尾续行符；行内没有 "-I " 返回 None"""
    segments = line.split("-I ")
    if len(segments) < 2:
        return None
    paths = []
    for segment in segments[1:]:
        segment = segment.strip()
        if segment.endswith("\\"):
            segment = segment[:-1].strip()
        if segment:
            paths.append(segment)
    return paths


def parse_includes_from_makefile(makefile: Path) -> list[Path]:
    """返回 Makefile 中 ALL_INCS 块的全部路径（保持原顺序）

    Raises:
        MakefileParseError: Makefile 不可读
    """
    try:
        contents = makefile.read_text(encoding="utf-8", errors="replace")
        project_root = makefile.parent.parent.resolve(strict=True)
    except OSError as e:
        raise MakefileParseError(f"无法读取 Makefile [{makefile}]: {e}") from e

    raw: list[str] = []
    in_block = False
    for line in contents.splitlines():
        if not in_block:
            if line.startswith(INCLUDES_VARIABLE):
                in_block = True
                raw.extend(_includes_on_line(line[len(INCLUDES_VARIABLE):]) or [])
            continue
        parts = _includes_on_line(line)
        if parts is None:
            break
        raw.extend(parts)

    if not in_block:
        logger.warning("Makefile 中未找到 %s: %s", INCLUDES_VARIABLE, makefile)

    includes = [
        p if p.is_absolute() else project_root / p
        for p in map(Path, raw)
    ]
    logger.debug("解析到 %d 个头文件路径", len(includes))
    return includes
