"""集中配置管理

支持从 YAML 文件加载 + CLI 选项覆盖。
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path

from modglide.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "modglide.yml"


@dataclass
class Config:
    """全局配置"""

    # 输入
    lock_file: str = "glide.lock"
    work_dir: str = "."

    # 本地克隆根目录，为空时使用 $GOPATH/src
    clone_root: str = ""

    # 执行
    max_workers: int = 20
    go_command: str = "go"
    git_command: str = "git"
    http_timeout: int = 30

    # 放不到字段里的配置项
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def resolved_clone_root(self) -> Path:
        """本地克隆根目录：显式配置 > $GOPATH/src > ~/go/src"""
        if self.clone_root:
            return Path(self.clone_root).expanduser()
        gopath = os.environ.get("GOPATH", "")
        if gopath:
            # GOPATH 可能包含多个条目，取第一个
            return Path(gopath.split(os.pathsep)[0]) / "src"
        return Path.home() / "go" / "src"

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
