"""单个依赖的版本 -> 提交解析"""

from __future__ import annotations

import logging

from modglide.core.exceptions import (
    InvalidPseudoVersion,
    InvariantViolation,
    ModglideError,
    UnsupportedVCS,
    VCSInfoError,
)
from modglide.core.models import Dependency, RevisionRecord, VCSKind
from modglide.core.pseudo import is_pseudo_version, pseudo_version_rev, strip_incompatible
from modglide.core.repo_root import RepoInfoResolver

logger = logging.getLogger(__name__)


class RevisionResolver:
    """把依赖声明的版本解析为具体修订

    伪版本直接解码出修订前缀，不访问网络；普通版本按 tag 查询远端。
    """

    def __init__(self, repo_info: RepoInfoResolver) -> None:
        self.repo_info = repo_info

    def resolve(self, dep: Dependency) -> RevisionRecord:
        try:
            info = self.repo_info.resolve(dep)
        except ModglideError as e:
            raise VCSInfoError(f"cannot get VCS info for {dep.path}: {e}") from e

        if info.vcs_kind is not VCSKind.GIT:
            raise UnsupportedVCS(
                f"unsupported VCS {info.vcs_kind.value!r} in module {dep.path}@{dep.version}"
            )

        if is_pseudo_version(dep.version):
            try:
                rev = pseudo_version_rev(dep.version)
            except InvalidPseudoVersion as e:
                raise InvalidPseudoVersion(f"cannot get rev from {dep.version!r}: {e}") from e
        else:
            tag = strip_incompatible(dep.version)
            if not tag:
                raise InvariantViolation(f"empty version in {dep.path} (declared {dep.version!r})")
            vcs = self.repo_info.registry.lookup(info.vcs_kind.value)
            try:
                rev = vcs.resolve_tag(info.repo_url, tag)
            except ModglideError as e:
                raise type(e)(f"cannot resolve {tag!r} in {info.repo_url}: {e}") from e

        logger.debug("%s@%s -> %s", dep.path, dep.version, rev)
        return RevisionRecord(
            path=dep.path,
            vcs_kind=info.vcs_kind,
            revision=rev,
            repo_url=info.repo_url,
            repo_root=info.root,
        )
