"""批量解析 - 有界并发地解析全部依赖

每个依赖的解析是独立任务，最多同时 max_workers 个在途（限制的是并发的
网络查询，而不是总任务数）。单个失败只记录和计数，不影响其他任务。
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Iterable, Protocol

from modglide.core.exceptions import ModglideError
from modglide.core.models import BatchResult, Dependency, ResolutionFailure, RevisionRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 20


class DependencyResolver(Protocol):
    def resolve(self, dep: Dependency) -> RevisionRecord:
        ...


class BatchResolver:
    """有界并发的批量解析器"""

    def __init__(self, resolver: DependencyResolver, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        self.resolver = resolver
        self.max_workers = max(1, max_workers)

    def run(self, deps: Iterable[Dependency]) -> BatchResult:
        """解析所有已固定版本的依赖，返回按 path 排序的结果

        未固定版本（version 为空）的依赖直接跳过。
        InvariantViolation 不属于可恢复错误，会原样抛出。
        """
        pinned = [d for d in deps if d.version]
        result = BatchResult()
        if not pinned:
            return result

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="resolve") as executor:
            futures: dict[Future[RevisionRecord], Dependency] = {
                executor.submit(self.resolver.resolve, d): d for d in pinned
            }
            for future in as_completed(futures):
                dep = futures[future]
                try:
                    result.records.append(future.result())
                except ModglideError as e:
                    logger.error(
                        "%s@%s: %s", dep.path, dep.version, e,
                        extra={"dependency": dep.path, "version": dep.version, "code": e.code},
                    )
                    if e.__cause__ is not None:
                        logger.error("error: %s", e.__cause__)
                    result.failures.append(ResolutionFailure(dependency=dep, message=str(e)))

        result.records.sort(key=lambda r: r.path)
        result.failures.sort(key=lambda f: f.dependency.path)
        if result.failures:
            logger.warning(
                "解析汇总: %d 成功, %d 失败", len(result.records), result.failed,
            )
        return result
