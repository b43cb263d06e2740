"""输入来源

- GoListSource: 通过 `go list -m -json all` 列出当前模块的依赖
- load_glide_lock: 读取 glide.lock 中记录的基线版本
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml

from modglide.core.exceptions import CommandError, ConfigError
from modglide.core.models import Dependency
from modglide.utils.shell import CommandExecutor, LocalExecutor, run_cmd
from modglide.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


def decode_module_stream(data: str) -> list[Dependency]:
    """解码 go list -json 输出的拼接 JSON 对象流，保持原顺序"""
    decoder = json.JSONDecoder()
    deps: list[Dependency] = []
    idx = 0
    length = len(data)
    while idx < length:
        while idx < length and data[idx].isspace():
            idx += 1
        if idx >= length:
            break
        try:
            obj, idx = decoder.raw_decode(data, idx)
        except json.JSONDecodeError as e:
            raise ConfigError(f"cannot decode go list output at offset {idx}: {e}") from e
        path = obj.get("Path") or ""
        if not path:
            continue
        deps.append(Dependency(path=path, version=obj.get("Version") or ""))
    return deps


class GoListSource:
    """依赖来源：当前目录 Go 模块的完整依赖列表"""

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        work_dir: str = ".",
        go_command: str = "go",
    ) -> None:
        self.executor = executor or LocalExecutor()
        self.work_dir = work_dir
        self.go_command = go_command

    def dependencies(self) -> list[Dependency]:
        try:
            out = run_cmd(
                self.executor, [self.go_command, "list", "-m", "-json", "all"],
                cwd=self.work_dir,
            )
        except CommandError as e:
            raise ConfigError(f"cannot list modules: {e}") from e
        deps = decode_module_stream(out)
        logger.info("go list: %d 个模块", len(deps))
        return deps


def load_glide_lock(path: str | Path) -> dict[str, str]:
    """读取 glide.lock，返回 {导入路径: 记录的版本}

    imports 与 testImports 两段都计入基线。
    """
    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"glide.lock 不存在: {p}")
    try:
        data = load_yaml(p, raw=True)
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigError(f"无法解析 {p}: {e}") from e

    deps: dict[str, str] = {}
    for section in ("imports", "testImports"):
        for imp in data.get(section) or []:
            if not isinstance(imp, dict) or not imp.get("name"):
                continue
            deps[str(imp["name"])] = str(imp.get("version") or "")
    logger.info("基线 %s: %d 条记录", p, len(deps))
    return deps
