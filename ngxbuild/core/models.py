"""核心数据模型"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class KeyIdentity:
    """keyserver 上的一个 GPG 公钥"""

    server: str
    key_id: str


@dataclass(frozen=True)
class Dependency:
    """一个源码依赖：源码包 URL + 分离签名 URL + 签名公钥"""

    name: str
    version: str
    archive_url: str
    signature_url: str
    keys: tuple[KeyIdentity, ...] = ()


@dataclass(frozen=True)
class ExtractedSource:
    """解压后的源码目录"""

    name: str  # 依赖名，如 "pcre2"
    path: Path  # <source_root>/<stem>


@dataclass
class BuildDecision:
    """是否需要重新 configure + make install

    三个条件任一不满足即需要重建。
    """

    binary_exists: bool
    makefile_exists: bool
    fingerprint_unchanged: bool
    fingerprint: str = ""

    @property
    def rebuild_required(self) -> bool:
        return not (
            self.binary_exists
            and self.makefile_exists
            and self.fingerprint_unchanged
        )


@dataclass
class PrepareResult:
    """一次完整准备流程的结果，交给绑定生成器使用"""

    install_dir: Path
    nginx_source_dir: Path
    include_paths: list[Path] = field(default_factory=list)
    rebuilt: bool = False
    sources: list[ExtractedSource] = field(default_factory=list)

    @property
    def makefile_path(self) -> Path:
        return self.nginx_source_dir / "objs" / "Makefile"
