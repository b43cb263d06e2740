"""外部命令执行工具 — 统一子进程调用

所有 git / go 调用都经过 CommandExecutor 协议，方便测试替换。
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import sys
from dataclasses import dataclass
from typing import Protocol

from modglide.core.exceptions import CommandError

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 — 抽象子进程调用

    进程无法启动时抛 OSError；非零退出码通过 CommandResult 返回。
    测试时可注入 fake 实现，无需 patch subprocess。
    """

    def execute(self, args: list[str], *, cwd: str | None = None) -> CommandResult:
        """执行命令并返回结果"""
        ...


# =========================================================================
# 默认实现: 本地执行器
# =========================================================================

class LocalExecutor:
    """本地命令执行器（默认实现）

    echo=True 时在执行前把命令以 shell 引号格式打印到 stderr。
    """

    def __init__(self, echo: bool = False, timeout: int | None = None) -> None:
        self.echo = echo
        self.timeout = timeout

    def execute(self, args: list[str], *, cwd: str | None = None) -> CommandResult:
        if self.echo:
            print(shlex.join(args), file=sys.stderr)
        r = subprocess.run(
            args, capture_output=True, text=True,
            cwd=cwd, check=False, timeout=self.timeout,
        )
        return CommandResult(
            returncode=r.returncode,
            stdout=r.stdout,
            stderr=r.stderr,
        )


def run_cmd(
    executor: CommandExecutor, args: list[str], *, cwd: str | None = None,
) -> str:
    """执行命令，成功返回 stdout，失败抛 CommandError

    非零退出且 stderr 非空时，错误信息为去掉首尾空白的 stderr；
    否则描述为无法运行该命令。
    """
    logger.debug("exec: %s (cwd=%s)", shlex.join(args), cwd or ".")
    try:
        r = executor.execute(args, cwd=cwd)
    except (OSError, subprocess.SubprocessError) as e:
        raise CommandError(f"cannot run {args!r}: {e}") from e
    if r.success:
        return r.stdout
    diagnostic = r.stderr.strip()
    if diagnostic:
        raise CommandError(diagnostic)
    raise CommandError(f"cannot run {args!r}: exit status {r.returncode}")
