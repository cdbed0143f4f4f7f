"""依赖准备服务: 下载 / 校验 / 解压 / 构建 / 头文件路径

串起全部核心组件，单线程顺序执行:

  1. 建立缓存目录
  2. 导入 GPG 公钥
  3. 逐个依赖: 下载签名 → 检查签名格式 → 下载源码包 → 校验 → 解压
  4. 生成 configure 参数与构建指纹，判断是否需要重建
  5. 需要时 configure → make install → 记录指纹
  6. 解析 objs/Makefile 得到头文件路径

任何一步失败都直接抛出，不做重试；重新运行时缓存会让已完成的步骤被跳过。

用法:
    svc = PrepareService(Config.from_env(os.environ))
    result = svc.prepare()
    result.include_paths
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ngxbuild.core import dependencies
from ngxbuild.core.cache_store import CacheStore, ensure
from ngxbuild.core.config import Config
from ngxbuild.core.exceptions import ValidationError
from ngxbuild.core.extractor import extract
from ngxbuild.core.fetcher import Fetcher
from ngxbuild.core.gpg import GnuPG
from ngxbuild.core.includes import parse_includes_from_makefile
from ngxbuild.core.keyring import KeyRing
from ngxbuild.core.models import BuildDecision, Dependency, ExtractedSource, PrepareResult
from ngxbuild.core.orchestrator import ProcessOrchestrator
from ngxbuild.core.planner import BuildPlanner
from ngxbuild.core.verifier import Verifier
from ngxbuild.utils.shell import CommandExecutor, LocalExecutor

logger = logging.getLogger(__name__)


class PrepareService:
    """nginx 依赖树准备流程"""

    def __init__(
        self,
        config: Config,
        *,
        executor: CommandExecutor | None = None,
        opener: Callable[[str], Any] | None = None,
        store: CacheStore | None = None,
    ) -> None:
        self.config = config
        self.executor = executor or LocalExecutor()
        self.store = store or CacheStore.open(config)
        self.gpg = GnuPG(self.executor, self.store.gnupg_home)
        self.keyring = KeyRing(self.gpg)
        self.fetcher = Fetcher(self.store.root, opener=opener)
        self.verifier = Verifier(self.gpg, self.fetcher)
        self.planner = BuildPlanner(config)
        self.orchestrator = ProcessOrchestrator(self.executor, num_jobs=config.num_jobs)

    def dependencies(self) -> list[Dependency]:
        return dependencies.all_dependencies(self.config)

    # ---- 源码获取 ----

    def acquire_sources(self) -> list[ExtractedSource]:
        """导入公钥并下载、校验、解压全部依赖"""
        deps = self.dependencies()
        self.keyring.ensure_imported(dependencies.all_keys(deps))
        source_root = ensure(self.store.source_root)
        sources = []
        for dep in deps:
            archive = self.verifier.get_verified_archive(dep.archive_url, dep.signature_url)
            sources.append(extract(archive, source_root))
        return sources

    @staticmethod
    def _source_map(sources: list[ExtractedSource]) -> dict[str, Path]:
        return {s.name: s.path for s in sources}

    @staticmethod
    def _nginx_source(source_map: dict[str, Path]) -> Path:
        path = source_map.get("nginx")
        if path is None:
            raise ValidationError("缺少依赖 [nginx] 的源码路径")
        return path

    # ---- 规划 / 构建 ----

    def plan(self, sources: list[ExtractedSource] | None = None) -> tuple[list[str], BuildDecision]:
        """返回 configure 参数与重建判定，不执行构建"""
        if sources is None:
            sources = self.acquire_sources()
        source_map = self._source_map(sources)
        install_dir = self.store.install_dir()
        flags = self.planner.plan(install_dir, source_map)
        decision = self.planner.decide(install_dir, self._nginx_source(source_map), flags)
        return flags, decision

    def prepare(self) -> PrepareResult:
        """执行完整流程，返回安装目录、nginx 源码目录和头文件路径"""
        sources = self.acquire_sources()
        nginx_src = self._nginx_source(self._source_map(sources))
        install_dir = self.store.install_dir()
        flags, decision = self.plan(sources)

        if decision.rebuild_required:
            ensure(install_dir)
            self.orchestrator.run_configure(nginx_src, flags)
            self.orchestrator.run_build(nginx_src, "install")
            # 只有 configure + make install 都成功才记录，失败时下次必然重试
            self.planner.record(nginx_src, decision.fingerprint)
            logger.info("nginx 已构建并安装到: %s", install_dir)
        else:
            logger.info("nginx 构建配置未变化，跳过重建")

        result = PrepareResult(
            install_dir=install_dir,
            nginx_source_dir=nginx_src,
            rebuilt=decision.rebuild_required,
            sources=sources,
        )
        result.include_paths = parse_includes_from_makefile(result.makefile_path)
        return result
