"""比对流程编排

依赖来源 -> 批量解析 -> 排序 -> 与基线比对 -> 报告。
失败计数作为返回值的一部分，由调用方决定退出码。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from modglide.core.batch import BatchResolver
from modglide.core.commit_date import CommitDateResolver
from modglide.core.config import Config
from modglide.core.models import Dependency, ReportSummary, ResolutionFailure
from modglide.core.repo_root import GoImportRepoRootFinder, RepoInfoResolver, RepoRootFinder
from modglide.core.report import CommitLookup, ReconciliationReport
from modglide.core.revision import RevisionResolver
from modglide.core.sources import GoListSource, load_glide_lock
from modglide.core.vcs import default_registry
from modglide.utils.shell import CommandExecutor, LocalExecutor

logger = logging.getLogger(__name__)


class DependencySource(Protocol):
    def dependencies(self) -> list[Dependency]:
        ...


@dataclass
class ReconcileOutcome:
    """一次比对的结果"""

    summary: ReportSummary
    failures: list[ResolutionFailure] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 1 if self.failures else 0


class Reconciler:
    """组装各阶段并执行一次完整比对

    所有协作者都可注入，未提供时按 Config 构建默认实现。
    """

    def __init__(
        self,
        config: Config,
        *,
        executor: CommandExecutor | None = None,
        finder: RepoRootFinder | None = None,
        source: DependencySource | None = None,
        commits: CommitLookup | None = None,
        verbose: bool = False,
    ) -> None:
        self.config = config
        executor = executor or LocalExecutor(echo=verbose)
        finder = finder or GoImportRepoRootFinder(verbose=verbose, timeout=config.http_timeout)
        registry = default_registry(executor, git_command=config.git_command)
        self.source = source or GoListSource(
            executor, work_dir=config.work_dir, go_command=config.go_command,
        )
        self.batch = BatchResolver(
            RevisionResolver(RepoInfoResolver(finder, registry)),
            max_workers=config.max_workers,
        )
        self.report = ReconciliationReport(
            commits or CommitDateResolver(
                config.resolved_clone_root(), executor, git_command=config.git_command,
            )
        )

    def run(self) -> ReconcileOutcome:
        baseline = load_glide_lock(self.config.lock_file)
        deps = self.source.dependencies()
        result = self.batch.run(deps)
        logger.info(
            "已解析 %d 个依赖 (%d 失败)", len(result.records), result.failed,
        )
        summary = self.report.build(result.records, baseline)
        return ReconcileOutcome(summary=summary, failures=result.failures)
