"""测试公共夹具: 假命令执行器 / 假下载器 / 源码包构造"""

from __future__ import annotations

import io
import tarfile
from collections.abc import Callable
from pathlib import Path

import pytest

from ngxbuild.core.config import Config
from ngxbuild.utils.shell import CommandResult


class FakeExecutor:
    """记录所有调用的命令执行器

    tools: which() 能找到的可执行文件名
    failures: 参数中出现该 token 时返回的失败结果
    on_call: 每次调用时执行的副作用（模拟 configure / make 写文件）
    """

    def __init__(self, tools: tuple[str, ...] = ()) -> None:
        self.tools = {name: f"/usr/bin/{name}" for name in tools}
        self.calls: list[tuple[list[str], str]] = []
        self.failures: dict[str, CommandResult] = {}
        self.on_call: Callable[[list[str], str], None] | None = None

    def fail_on(self, token: str, output: str = "boom", returncode: int = 2) -> None:
        self.failures[token] = CommandResult(returncode=returncode, stdout=output)

    def execute(self, cmd, *, cwd=".", env=None, merge_output=True) -> CommandResult:
        cmd = [str(c) for c in cmd]
        self.calls.append((cmd, cwd))
        for token, result in self.failures.items():
            if token in cmd:
                return result
        if self.on_call is not None:
            self.on_call(cmd, cwd)
        return CommandResult(returncode=0, stdout="ok\n")

    def which(self, name: str) -> str | None:
        return self.tools.get(name)

    def commands_with(self, token: str) -> list[list[str]]:
        return [cmd for cmd, _ in self.calls if token in cmd]


class FakeOpener:
    """按 URL 返回固定内容的下载器，记录请求次数"""

    def __init__(self, payloads: dict[str, bytes] | None = None) -> None:
        self.payloads = dict(payloads or {})
        self.requests: list[str] = []

    def __call__(self, url: str) -> io.BytesIO:
        self.requests.append(url)
        if url not in self.payloads:
            raise OSError(f"404 {url}")
        return io.BytesIO(self.payloads[url])


def build_tarball(wrapper: str, files: dict[str, str], mode: int = 0o644) -> bytes:
    """构造 <wrapper>/<file> 结构的 tar.gz 字节串"""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        top = tarfile.TarInfo(wrapper)
        top.type = tarfile.DIRTYPE
        top.mode = 0o755
        tf.addfile(top)
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(f"{wrapper}/{name}")
            info.size = len(data)
            info.mode = 0o755 if name == "configure" else mode
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture()
def fake_executor() -> Callable[..., FakeExecutor]:
    return FakeExecutor


@pytest.fixture()
def fake_opener() -> Callable[..., FakeOpener]:
    return FakeOpener


@pytest.fixture()
def make_tarball() -> Callable[..., bytes]:
    return build_tarball


@pytest.fixture()
def config(tmp_path: Path) -> Config:
    """不依赖宿主环境的配置"""
    return Config(
        cache_dir=str(tmp_path / "cache"),
        host_os="linux",
        host_arch="x86_64",
        num_jobs="4",
    )
