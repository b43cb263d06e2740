"""端到端：依赖来源 -> 批量解析 -> 基线比对 -> CLI 输出"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest
from click.testing import CliRunner

from modglide.cli import main
from modglide.core.config import Config
from modglide.core.exceptions import CommitNotFound, RepoRootNotFound
from modglide.core.models import CommitInfo, Dependency
from modglide.core.reconcile import Reconciler
from modglide.core.repo_root import RepoRoot
from modglide.utils.logger import reset_logging

OLD = "a" * 40
NEW = "b" * 20


class ListSource:
    def __init__(self, deps: list[Dependency]) -> None:
        self.deps = deps

    def dependencies(self) -> list[Dependency]:
        return list(self.deps)


class PkgFinder:
    """pkg/ 前缀的路径视为 git 仓库，其余无法发现"""

    def find(self, import_path: str) -> RepoRoot:
        if not import_path.startswith("pkg/"):
            raise RepoRootNotFound(f"unrecognized import path {import_path!r}")
        return RepoRoot(import_path, f"https://example.org/{import_path}", "git")


class DictCommits:
    def __init__(self, infos: dict[str, CommitInfo]) -> None:
        self.infos = infos

    def commit_info(self, path: str, repo_url: str, ref: str) -> CommitInfo:
        if ref not in self.infos:
            raise CommitNotFound(f"commit {ref!r} not found in {path}")
        return self.infos[ref]


@pytest.fixture(autouse=True)
def _clean_logging():
    yield
    reset_logging()


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def _write_lock(tmp_path: Path, entries: dict[str, str]) -> Path:
    lock = tmp_path / "glide.lock"
    lines = ["imports:"]
    for name, version in entries.items():
        lines += [f"- name: {name}", f"  version: {version}"]
    lock.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return lock


def _reconciler(tmp_path: Path, fake_executor, deps: list[Dependency], new_ts: datetime) -> Reconciler:
    fake_executor.on("git", "ls-remote", stdout=f"{NEW}\trefs/tags/v1.0.1\n")
    commits = DictCommits({
        "aaaaaaaaaaaa": CommitInfo(OLD, _utc(2020, 1, 1)),
        "bbbbbbbbbbbb": CommitInfo(NEW, new_ts),
    })
    cfg = Config(lock_file=str(_write_lock(tmp_path, {"pkg/x": "aaaaaaaaaaaa"})))
    return Reconciler(
        cfg, executor=fake_executor, finder=PkgFinder(),
        source=ListSource(deps), commits=commits,
    )


class TestReconciler:
    def test_changed(self, tmp_path: Path, fake_executor) -> None:
        outcome = _reconciler(
            tmp_path, fake_executor,
            [Dependency("example.org/main", ""), Dependency("pkg/x", "v1.0.1")],
            _utc(2021, 6, 1),
        ).run()
        entry, = outcome.summary.entries
        assert entry.render() == (
            "pkg/x\n"
            "\taaaaaaaaaaaa 2020-01-01 00:00:00 +0000 UTC\n"
            "\tbbbbbbbbbbbb 2021-06-01 00:00:00 +0000 UTC"
        )
        assert outcome.summary.summary_line() == "1/1 changed"
        assert outcome.exit_code == 0
        # 未固定版本的主模块不会被解析
        assert all("example.org/main" not in " ".join(a) for a, _ in fake_executor.calls)

    def test_reversion(self, tmp_path: Path, fake_executor) -> None:
        outcome = _reconciler(
            tmp_path, fake_executor, [Dependency("pkg/x", "v1.0.1")], _utc(2019, 1, 1),
        ).run()
        entry, = outcome.summary.entries
        assert entry.render().startswith("pkg/x reversion\n\taaaaaaaaaaaa 2020-01-01")
        assert outcome.summary.summary_line() == "1/1 changed"

    def test_failure_sets_exit_code(self, tmp_path: Path, fake_executor) -> None:
        outcome = _reconciler(
            tmp_path, fake_executor,
            [Dependency("pkg/x", "v1.0.1"), Dependency("other.org/y", "v2.0.0")],
            _utc(2021, 6, 1),
        ).run()
        assert outcome.exit_code == 1
        assert [f.dependency.path for f in outcome.failures] == ["other.org/y"]
        assert outcome.summary.summary_line() == "1/1 changed"


class TestCli:
    def _patch(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, fake_executor,
               deps: list[Dependency]) -> None:
        def factory(cfg: Config, verbose: bool = False) -> Reconciler:
            r = _reconciler(tmp_path, fake_executor, deps, _utc(2021, 6, 1))
            r.config = cfg
            return r

        monkeypatch.setattr("modglide.cli.Reconciler", factory)

    def test_output_and_exit_zero(self, tmp_path: Path, fake_executor, monkeypatch: pytest.MonkeyPatch) -> None:
        self._patch(monkeypatch, tmp_path, fake_executor, [Dependency("pkg/x", "v1.0.1")])
        result = CliRunner().invoke(main, [
            "--config", str(tmp_path / "none.yml"), "--lock", str(tmp_path / "glide.lock"),
        ])
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == [
            "pkg/x",
            "\taaaaaaaaaaaa 2020-01-01 00:00:00 +0000 UTC",
            "\tbbbbbbbbbbbb 2021-06-01 00:00:00 +0000 UTC",
            "1/1 changed",
        ]

    def test_exit_one_on_resolution_failure(self, tmp_path: Path, fake_executor,
                                             monkeypatch: pytest.MonkeyPatch) -> None:
        self._patch(monkeypatch, tmp_path, fake_executor,
                    [Dependency("pkg/x", "v1.0.1"), Dependency("bad.org/z", "v1.0.0")])
        result = CliRunner().invoke(main, [
            "--config", str(tmp_path / "none.yml"), "--lock", str(tmp_path / "glide.lock"),
        ])
        assert result.exit_code == 1
        assert "1/1 changed" in result.stdout

    def test_missing_lock_file(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, [
            "--config", str(tmp_path / "none.yml"), "--lock", str(tmp_path / "missing.lock"),
        ])
        assert result.exit_code == 1
        assert "glide.lock 不存在" in result.output
