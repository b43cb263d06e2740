"""modglide 日志配置

诊断信息统一输出到 stderr，stdout 只留给报告本身。
MODGLIDE_LOG_JSON=1 时每条日志一行 JSON，解析失败的依赖会带上
dependency / version / code 字段，便于 CI 按依赖聚合失败原因。
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

# 通过 logger.xxx(..., extra={...}) 附加到记录上的依赖上下文
CONTEXT_FIELDS = ("dependency", "version", "code")


class JSONFormatter(logging.Formatter):
    """一行一条的 JSON 日志

    {"timestamp": ..., "level": ..., "logger": ..., "message": ...,
     "dependency": ..., "version": ..., "code": ...}
    上下文字段只在记录携带时输出。
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """配置根日志器，输出到 stderr；重复调用不会叠加 handler"""
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)


def reset_logging() -> None:
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
