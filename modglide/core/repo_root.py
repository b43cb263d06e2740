"""导入路径 -> 代码仓位置

默认发现器先匹配已知托管站点（github.com 等），匹配不到时按 go get 的约定
请求 https://<path>?go-get=1，解析 <meta name="go-import"> 得到真实代码仓
（用于 gopkg.in、golang.org/x 等 vanity 导入路径）。
"""

from __future__ import annotations

import html.parser
import logging
import re
import sys
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol

from modglide.core.exceptions import InvariantViolation, RepoRootNotFound
from modglide.core.models import Dependency, RepoInfo, VCSKind
from modglide.core.vcs import VCSRegistry

logger = logging.getLogger(__name__)

# go-get 页面最多读取 1MB
_MAX_META_PAGE = 1024 * 1024


@dataclass(frozen=True)
class RepoRoot:
    """代码仓根：导入路径前缀、仓库 URL、VCS 命令标识"""

    root: str
    repo_url: str
    vcs: str


class RepoRootFinder(Protocol):
    """代码仓根发现协议（可能访问网络）"""

    def find(self, import_path: str) -> RepoRoot:
        ...


# (前缀, 正则, vcs)；正则的 root 分组即代码仓根
_KNOWN_HOSTS: list[tuple[str, re.Pattern[str], str]] = [
    ("github.com/", re.compile(r"^(?P<root>github\.com/[A-Za-z0-9_.\-]+/[A-Za-z0-9_.\-]+)(/[A-Za-z0-9_.\-]+)*$"), "git"),
    ("bitbucket.org/", re.compile(r"^(?P<root>bitbucket\.org/[A-Za-z0-9_.\-]+/[A-Za-z0-9_.\-]+)(/[A-Za-z0-9_.\-]+)*$"), "git"),
    ("hub.jazz.net/git/", re.compile(r"^(?P<root>hub\.jazz\.net/git/[a-z0-9]+/[A-Za-z0-9_.\-]+)(/[A-Za-z0-9_.\-]+)*$"), "git"),
    ("git.apache.org/", re.compile(r"^(?P<root>git\.apache\.org/[a-z0-9_.\-]+\.git)(/[A-Za-z0-9_.\-]+)*$"), "git"),
    ("git.openstack.org/", re.compile(r"^(?P<root>git\.openstack\.org/[A-Za-z0-9_.\-]+/[A-Za-z0-9_.\-]+)(\.git)?(/[A-Za-z0-9_.\-]+)*$"), "git"),
    ("launchpad.net/", re.compile(r"^(?P<root>launchpad\.net/(([A-Za-z0-9_.\-]+)(/[A-Za-z0-9_.\-]+)?|~[A-Za-z0-9_.\-]+/(\+junk|[A-Za-z0-9_.\-]+)/[A-Za-z0-9_.\-]+))(/[A-Za-z0-9_.\-]+)*$"), "bzr"),
]

# 路径中显式带有 VCS 后缀，如 example.org/repo.git/sub
_EXPLICIT_VCS_RE = re.compile(
    r"^(?P<root>(?P<repo>([a-z0-9.\-]+\.)+[a-z0-9.\-]+(:[0-9]+)?(/~?[A-Za-z0-9_.\-]+)+?)"
    r"\.(?P<vcs>bzr|git|hg))(/~?[A-Za-z0-9_.\-]+)*$"
)


class GoImportParser(html.parser.HTMLParser):
    """收集 go-import meta 标签: (prefix, vcs, repo_url)"""

    def __init__(self) -> None:
        super().__init__()
        self.imports: list[tuple[str, str, str]] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag != "meta":
            return
        attrs_dict = dict(attrs)
        if attrs_dict.get("name") != "go-import":
            return
        parts = (attrs_dict.get("content") or "").split()
        if len(parts) == 3:
            self.imports.append((parts[0], parts[1], parts[2]))


def match_go_import(import_path: str, page: str) -> RepoRoot | None:
    """从 go-get 页面中选出与导入路径匹配的最长前缀"""
    parser = GoImportParser()
    parser.feed(page)
    best: tuple[str, str, str] | None = None
    for prefix, vcs, repo_url in parser.imports:
        if import_path != prefix and not import_path.startswith(prefix + "/"):
            continue
        # mod 条目指向模块代理，不是代码仓
        if vcs == "mod":
            continue
        if best is None or len(prefix) > len(best[0]):
            best = (prefix, vcs, repo_url)
    if best is None:
        return None
    return RepoRoot(root=best[0], repo_url=best[2], vcs=best[1])


class GoImportRepoRootFinder:
    """默认发现器：已知站点静态匹配 + go-get vanity 查询"""

    def __init__(self, verbose: bool = False, timeout: int = 30) -> None:
        self.verbose = verbose
        self.timeout = timeout

    def find(self, import_path: str) -> RepoRoot:
        root = self._match_static(import_path)
        if root is not None:
            return root
        return self._query_meta(import_path)

    @staticmethod
    def _match_static(import_path: str) -> RepoRoot | None:
        for prefix, pattern, vcs in _KNOWN_HOSTS:
            if not import_path.startswith(prefix):
                continue
            m = pattern.match(import_path)
            if m is None:
                raise RepoRootNotFound(f"invalid {prefix.rstrip('/')} import path {import_path!r}")
            root = m.group("root")
            return RepoRoot(root=root, repo_url=f"https://{root}", vcs=vcs)
        m = _EXPLICIT_VCS_RE.match(import_path)
        if m is not None:
            return RepoRoot(root=m.group("root"), repo_url=f"https://{m.group('root')}", vcs=m.group("vcs"))
        return None

    def _query_meta(self, import_path: str) -> RepoRoot:
        host = import_path.split("/", 1)[0]
        if "." not in host:
            raise RepoRootNotFound(f"unrecognized import path {import_path!r}")
        url = f"https://{import_path}?go-get=1"
        if self.verbose:
            print(f"Fetching {url}", file=sys.stderr)
        req = urllib.request.Request(url, headers={"User-Agent": "modglide"})
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # nosec B310
                page = resp.read(_MAX_META_PAGE).decode("utf-8", errors="replace")
        except (urllib.error.URLError, OSError) as e:
            raise RepoRootNotFound(f"cannot fetch {url}: {e}") from e
        root = match_go_import(import_path, page)
        if root is None:
            raise RepoRootNotFound(f"no go-import meta tags for {import_path!r} at {url}")
        logger.debug("vanity 解析: %s -> %s (%s)", import_path, root.repo_url, root.vcs)
        return root


class RepoInfoResolver:
    """依赖 -> RepoInfo：发现代码仓根，再在注册表中查找 VCS"""

    def __init__(self, finder: RepoRootFinder, registry: VCSRegistry) -> None:
        self.finder = finder
        self.registry = registry

    def resolve(self, dep: Dependency) -> RepoInfo:
        if not dep.version:
            raise InvariantViolation(f"empty version in {dep.path}")
        root = self.finder.find(dep.path)
        vcs = self.registry.lookup(root.vcs)
        return RepoInfo(
            dependency=dep, repo_url=root.repo_url,
            vcs_kind=VCSKind(vcs.kind), root=root.root,
        )
