"""核心数据模型

解析、比对、报告各阶段共享的数据类集中定义于此。
除 BatchResult / ReportSummary 这类聚合容器外均为不可变对象。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

# 报告中修订号的显示宽度
SHORT_REV_LEN = 12


class VCSKind(str, Enum):
    """版本控制系统类型（仅 git 可用）"""
    GIT = "git"
    BZR = "bzr"
    HG = "hg"


class Classification(str, Enum):
    """依赖相对基线的变化分类"""
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    REVERSION = "reversion"


# =========================================================================
# 输入
# =========================================================================


@dataclass(frozen=True)
class Dependency:
    """单个模块依赖；version 为空表示未固定版本"""

    path: str
    version: str = ""


# =========================================================================
# 解析结果
# =========================================================================


@dataclass(frozen=True)
class RepoInfo:
    """依赖对应的代码仓位置与 VCS 类型"""

    dependency: Dependency
    repo_url: str
    vcs_kind: VCSKind
    root: str = ""


@dataclass(frozen=True)
class RevisionRecord:
    """依赖声明版本解析得到的具体提交"""

    path: str
    vcs_kind: VCSKind
    revision: str
    repo_url: str = ""
    # 代码仓根导入路径，同一仓库的嵌套模块共用一份本地克隆
    repo_root: str = ""

    @property
    def short_revision(self) -> str:
        return self.revision[:SHORT_REV_LEN]

    @property
    def clone_key(self) -> str:
        return self.repo_root or self.path


@dataclass(frozen=True)
class ResolutionFailure:
    """单个依赖解析失败的记录"""

    dependency: Dependency
    message: str


@dataclass
class BatchResult:
    """批量解析结果：按 path 排序的成功记录 + 失败列表"""

    records: list[RevisionRecord] = field(default_factory=list)
    failures: list[ResolutionFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


@dataclass(frozen=True)
class CommitInfo:
    """提交的完整 hash 与 UTC 时间"""

    commit: str
    timestamp: datetime


# =========================================================================
# 报告
# =========================================================================


@dataclass(frozen=True)
class ReportEntry:
    """一条发生变化的依赖"""

    path: str
    old_version: str
    new_version: str
    classification: Classification
    old_info: CommitInfo | None = None
    new_info: CommitInfo | None = None

    def render(self) -> str:
        """渲染为报告行，提交时间未知时省略"""
        marker = " reversion" if self.classification is Classification.REVERSION else ""
        return (
            f"{self.path}{marker}\n"
            f"\t{_describe(self.old_version, self.old_info)}\n"
            f"\t{_describe(self.new_version, self.new_info)}"
        )


@dataclass
class ReportSummary:
    """比对汇总"""

    entries: list[ReportEntry] = field(default_factory=list)
    unchanged: int = 0

    @property
    def changed(self) -> int:
        return len(self.entries)

    @property
    def total(self) -> int:
        return self.changed + self.unchanged

    def summary_line(self) -> str:
        return f"{self.changed}/{self.total} changed"


def format_commit_time(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%d %H:%M:%S +0000 UTC")


def _describe(version: str, info: CommitInfo | None) -> str:
    if info is None:
        return version
    return f"{version} {format_commit_time(info.timestamp)}"
