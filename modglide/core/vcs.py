"""版本控制系统抽象与注册表

每种 VCS 提供相同的能力集 {kind, resolve_tag}。目前只有 git 有实际实现，
bzr / hg 仅占位，保证注册表完整，新增实现时调用方无需改动。
"""

from __future__ import annotations

import logging
from typing import Protocol

from modglide.core.exceptions import (
    AmbiguousTag,
    InvariantViolation,
    UnknownVCS,
    UnresolvedTag,
    UnsupportedVCS,
    VCSError,
)
from modglide.core.models import VCSKind
from modglide.utils.shell import CommandExecutor, LocalExecutor, run_cmd

logger = logging.getLogger(__name__)


class VCS(Protocol):
    """VCS 能力协议"""

    @property
    def kind(self) -> VCSKind:
        ...

    def resolve_tag(self, repo_url: str, tag: str) -> str:
        """把 tag 解析为完整的提交 hash"""
        ...


class GitVCS:
    """git 实现：通过 git ls-remote 查询远端 ref"""

    kind = VCSKind.GIT

    def __init__(self, executor: CommandExecutor | None = None, command: str = "git") -> None:
        self.executor = executor or LocalExecutor()
        self.command = command

    def resolve_tag(self, repo_url: str, tag: str) -> str:
        if not tag:
            raise InvariantViolation(f"empty tag in {repo_url}")
        out = run_cmd(
            self.executor,
            [self.command, "ls-remote", "-q", repo_url, tag, f"{tag}^{{}}"],
        )
        return select_tag_ref(out, repo_url, tag)


def select_tag_ref(out: str, repo_url: str, tag: str) -> str:
    """从 ls-remote 输出中选出 tag 对应的提交

    附注 tag 的 refs/tags/<tag> 指向 tag 对象，refs/tags/<tag>^{} 才是提交，
    因此先用剥离后的 hash 覆盖同名 ref。之后优先精确匹配 refs/tags/<tag>；
    否则若恰好只剩一条 ref 则接受它（子模块 tag 形如 sub/v1.2.3，ls-remote 按后缀匹配）。
    """
    refs: dict[str, str] = {}
    peeled: dict[str, str] = {}
    for line in out.splitlines():
        fields = line.split()
        if not fields:
            continue
        if len(fields) != 2:
            raise VCSError(
                f"unexpected ls-remote output {out!r} from repo {repo_url!r}, tag {tag!r}"
            )
        commit, ref = fields
        if ref.endswith("^{}"):
            peeled[ref[:-3]] = commit
        else:
            refs[ref] = commit
    for ref, commit in peeled.items():
        refs[ref] = commit

    want = f"refs/tags/{tag}"
    if want in refs:
        return refs[want]

    if not refs:
        raise UnresolvedTag(f"no tag ref for {tag!r} found in {repo_url}")
    if len(refs) > 1:
        raise AmbiguousTag(
            f"ambiguous tag for {tag!r} in {repo_url}: {', '.join(sorted(refs))}"
        )
    (ref, commit), = refs.items()
    # TODO: 对照真实的子模块 tag 仓库验证这一单条回退的正确性
    logger.warning("tag %s 在 %s 无精确匹配，使用唯一 ref %s", tag, repo_url, ref)
    return commit


class BzrVCS:
    """bzr 占位实现"""

    kind = VCSKind.BZR

    def resolve_tag(self, repo_url: str, tag: str) -> str:
        raise UnsupportedVCS("bzr unimplemented")


class HgVCS:
    """hg 占位实现"""

    kind = VCSKind.HG

    def resolve_tag(self, repo_url: str, tag: str) -> str:
        raise UnsupportedVCS("hg unimplemented")


class VCSRegistry:
    """VCS 命令标识 -> 实现 的固定映射"""

    def __init__(self, entries: dict[str, VCS]) -> None:
        self._entries = dict(entries)

    def lookup(self, cmd: str) -> VCS:
        try:
            return self._entries[cmd]
        except KeyError:
            raise UnknownVCS(f"unknown VCS kind {cmd!r}") from None

    def kinds(self) -> list[str]:
        return sorted(self._entries)


def default_registry(executor: CommandExecutor | None = None, git_command: str = "git") -> VCSRegistry:
    """构建标准注册表"""
    return VCSRegistry({
        VCSKind.GIT.value: GitVCS(executor, command=git_command),
        VCSKind.BZR.value: BzrVCS(),
        VCSKind.HG.value: HgVCS(),
    })
