"""共享测试夹具"""

from __future__ import annotations

from typing import Callable, Union

import pytest

from modglide.utils.shell import CommandResult

Handler = Union[CommandResult, Callable[..., CommandResult]]


class FakeExecutor:
    """按命令前缀返回预设结果的执行器，记录全部调用"""

    def __init__(self) -> None:
        self.rules: list[tuple[tuple[str, ...], Handler]] = []
        self.calls: list[tuple[list[str], str | None]] = []

    def on(self, *prefix: str, stdout: str = "", stderr: str = "", rc: int = 0,
           handler: Handler | None = None) -> None:
        self.rules.append((prefix, handler or CommandResult(rc, stdout, stderr)))

    def execute(self, args: list[str], *, cwd: str | None = None) -> CommandResult:
        self.calls.append((list(args), cwd))
        for prefix, handler in reversed(self.rules):
            if tuple(args[:len(prefix)]) == prefix:
                if isinstance(handler, CommandResult):
                    return handler
                return handler(args, cwd)
        return CommandResult(1, "", f"unexpected command: {args}")

    def commands(self, *prefix: str) -> list[list[str]]:
        return [a for a, _ in self.calls if tuple(a[:len(prefix)]) == prefix]


@pytest.fixture()
def fake_executor() -> FakeExecutor:
    return FakeExecutor()
