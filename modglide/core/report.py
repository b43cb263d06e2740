"""基线比对报告

对每个（已按 path 排序的）解析结果:
  1. 基线中没有或版本为空 -> 无可比对的旧版本，跳过
  2. 截断到较短一方长度后相等 -> 未变化
  3. 否则查询两侧提交的时间；同一提交视为未变化，
     新提交早于旧提交标记为 reversion
查询失败只降级当前这一行（不输出时间），不中断整个报告。
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from modglide.core.exceptions import InvariantViolation, ModglideError
from modglide.core.models import (
    Classification,
    CommitInfo,
    ReportEntry,
    ReportSummary,
    RevisionRecord,
    VCSKind,
)

logger = logging.getLogger(__name__)


class CommitLookup(Protocol):
    def commit_info(self, repo: str, repo_url: str, ref: str) -> CommitInfo:
        ...


def same_revision(old: str, new: str) -> bool:
    """截断到较短一方的长度后比较，兼容基线中的短 hash"""
    n = min(len(old), len(new))
    return old[:n] == new[:n]


def classify(old_info: CommitInfo | None, new_info: CommitInfo | None) -> Classification:
    if old_info is None or new_info is None:
        return Classification.CHANGED
    if old_info.commit == new_info.commit:
        return Classification.UNCHANGED
    if new_info.timestamp < old_info.timestamp:
        return Classification.REVERSION
    return Classification.CHANGED


class ReconciliationReport:
    """基线比对"""

    def __init__(self, commits: CommitLookup) -> None:
        self.commits = commits

    def build(self, records: Iterable[RevisionRecord], baseline: dict[str, str]) -> ReportSummary:
        summary = ReportSummary()
        for rec in sorted(records, key=lambda r: r.path):
            if rec.vcs_kind is not VCSKind.GIT:
                raise InvariantViolation(f"{rec.path} uses {rec.vcs_kind.value} not git")
            old_vers = baseline.get(rec.path)
            if not old_vers:
                continue
            new_vers = rec.short_revision
            old_vers = old_vers[:len(new_vers)]
            if same_revision(old_vers, new_vers):
                summary.unchanged += 1
                continue

            old_info = self._lookup(rec, old_vers)
            new_info = self._lookup(rec, new_vers)
            classification = classify(old_info, new_info)
            if classification is Classification.UNCHANGED:
                summary.unchanged += 1
                continue
            summary.entries.append(ReportEntry(
                path=rec.path,
                old_version=old_vers,
                new_version=new_vers,
                classification=classification,
                old_info=old_info,
                new_info=new_info,
            ))
        return summary

    def _lookup(self, rec: RevisionRecord, ref: str) -> CommitInfo | None:
        try:
            return self.commits.commit_info(rec.clone_key, rec.repo_url, ref)
        except ModglideError as e:
            logger.warning("cannot get commit date for %s %s: %s", rec.path, ref, e)
            return None
