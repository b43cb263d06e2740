"""modglide 命令行接口"""

from __future__ import annotations

import os
import sys

import click

from modglide import __version__
from modglide.core.config import DEFAULT_CONFIG_FILE, init_config
from modglide.core.exceptions import ModglideError
from modglide.core.reconcile import Reconciler
from modglide.utils.logger import setup_logging


@click.command()
@click.version_option(version=__version__)
@click.option("-x", "--show-commands", is_flag=True, help="打印执行的外部命令")
@click.option("--config", "-c", "config_path", default=DEFAULT_CONFIG_FILE, help="配置文件路径")
@click.option("--lock", default=None, help="glide.lock 路径（覆盖配置）")
@click.option("--workers", "-p", default=None, type=click.IntRange(min=1), help="最大并发解析数")
def main(show_commands: bool, config_path: str, lock: str | None, workers: int | None) -> None:
    """比较 Go 模块依赖与 glide.lock 中记录的版本

    每个发生变化的依赖输出一行，最后输出 "<变化数>/<比较总数> changed"。
    任一依赖解析失败时退出码为 1。
    """
    setup_logging(
        level=os.getenv("MODGLIDE_LOG_LEVEL", "WARNING"),
        json_output=os.getenv("MODGLIDE_LOG_JSON", "") == "1",
    )
    cfg = init_config(config_path)
    if lock:
        cfg.lock_file = lock
    if workers:
        cfg.max_workers = workers

    try:
        outcome = Reconciler(cfg, verbose=show_commands).run()
    except ModglideError as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)

    for entry in outcome.summary.entries:
        click.echo(entry.render())
    click.echo(outcome.summary.summary_line())
    sys.exit(outcome.exit_code)


if __name__ == "__main__":
    main()
