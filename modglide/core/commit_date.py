"""提交时间解析

每个代码仓在本地维护一份按需克隆的完整仓库（位于 clone_root/<仓库根>），
用 git log 把提交引用（完整 hash 或前缀）解析为 {完整 hash, UTC 时间}。
本地找不到时 fetch origin 后重试一次。
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path

from modglide.core.exceptions import CommandError, CommitNotFound, FetchFailed
from modglide.core.models import CommitInfo
from modglide.utils.shell import CommandExecutor, LocalExecutor, run_cmd

logger = logging.getLogger(__name__)

_LOG_FORMAT = "--pretty=format:%H %ct"


class CommitDateResolver:
    """按需克隆 + git log 查询提交时间"""

    def __init__(
        self,
        clone_root: str | Path,
        executor: CommandExecutor | None = None,
        git_command: str = "git",
    ) -> None:
        self.clone_root = Path(clone_root)
        self.executor = executor or LocalExecutor()
        self.git = git_command
        self._locks: dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def repo_dir(self, repo: str) -> Path:
        return self.clone_root / repo

    def commit_info(self, repo: str, repo_url: str, ref: str) -> CommitInfo:
        """解析提交引用；repo 为代码仓根导入路径，失败抛 FetchFailed / CommitNotFound"""
        if not ref or ref.startswith("-"):
            raise CommitNotFound(f"invalid commit ref {ref!r} for {repo}")
        repo_dir = self.repo_dir(repo)
        with self._lock_for(repo_dir):
            self._ensure_clone(repo, repo_url, repo_dir)
            info = self._log(repo_dir, ref)
            if info is not None:
                return info

            logger.info("本地未找到 %s@%s，fetch origin 后重试", repo, ref)
            try:
                run_cmd(self.executor, [self.git, "fetch", "origin"], cwd=str(repo_dir))
            except CommandError as e:
                raise FetchFailed(f"cannot fetch origin in {repo}: {e}") from e

            info = self._log(repo_dir, ref)
            if info is None:
                raise CommitNotFound(f"commit {ref!r} not found in {repo}")
            return info

    def _lock_for(self, repo_dir: Path) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(repo_dir, threading.Lock())

    def _ensure_clone(self, repo: str, repo_url: str, repo_dir: Path) -> None:
        """本地不存在时克隆完整历史；已存在的目录须位于某个 git 工作区内"""
        if repo_dir.is_dir():
            try:
                run_cmd(self.executor, [self.git, "rev-parse", "--git-dir"], cwd=str(repo_dir))
            except CommandError as e:
                raise FetchFailed(f"no git repository in {repo_dir} for {repo}: {e}") from e
            return
        if repo_dir.exists():
            raise FetchFailed(f"no repo dir for {repo}: {repo_dir} is not a directory")
        if not repo_url:
            raise FetchFailed(f"could not fetch {repo}: no repository URL")

        logger.info("克隆仓库: %s -> %s", repo_url, repo_dir)
        repo_dir.parent.mkdir(parents=True, exist_ok=True)
        try:
            run_cmd(self.executor, [self.git, "clone", "-q", repo_url, str(repo_dir)])
        except CommandError as e:
            raise FetchFailed(f"could not fetch {repo}: {e}") from e

    def _log(self, repo_dir: Path, ref: str) -> CommitInfo | None:
        """git log -1 查询；引用不存在时返回 None"""
        try:
            out = run_cmd(
                self.executor, [self.git, "log", "-1", _LOG_FORMAT, ref, "--"],
                cwd=str(repo_dir),
            )
        except CommandError as e:
            logger.debug("git log %s 失败: %s", ref, e)
            return None
        return parse_log_line(out, ref)


def parse_log_line(out: str, ref: str) -> CommitInfo:
    """解析 "<hash> <unix 时间>" 格式的 git log 输出"""
    fields = out.split()
    if len(fields) != 2 or not fields[1].isdigit():
        raise CommitNotFound(f"scan {out!r} for {ref!r} failed")
    return CommitInfo(
        commit=fields[0],
        timestamp=datetime.fromtimestamp(int(fields[1]), tz=timezone.utc),
    )
