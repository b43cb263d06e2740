"""伪版本编解码

伪版本把未打 tag 的提交的时间戳和修订前缀直接编码在版本号里，例如:

    v0.0.0-20180917221912-90fa682c2a6e
    v1.2.4-0.20191109021931-daa7c04131f5
    v2.0.0-pre.0.20200101000000-abcdefabcdef+incompatible

解码不需要访问网络。
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from modglide.core.exceptions import InvalidPseudoVersion

_PSEUDO_RE = re.compile(
    r"^v[0-9]+\.(0\.0-|\d+\.\d+-([^+]*\.)?0\.)\d{14}-[A-Za-z0-9]+"
    r"(\+[0-9A-Za-z-]+(\.[0-9A-Za-z-]+)*)?$"
)
_TIMESTAMP_RE = re.compile(r"^\d{14}$")
_REV_RE = re.compile(r"^[A-Za-z0-9]+$")

INCOMPATIBLE_SUFFIX = "+incompatible"


def is_pseudo_version(v: str) -> bool:
    """v 是否符合伪版本语法"""
    return v.count("-") >= 2 and _PSEUDO_RE.match(v) is not None


def strip_incompatible(v: str) -> str:
    """去掉末尾的 +incompatible 兼容标记"""
    return v.removesuffix(INCOMPATIBLE_SUFFIX)


def _split(v: str) -> tuple[str, str]:
    """拆出 (时间戳, 修订前缀)"""
    if not is_pseudo_version(v):
        raise InvalidPseudoVersion(f"not a pseudo-version: {v!r}")
    body = v.split("+", 1)[0]
    body, _, rev = body.rpartition("-")
    dash = body.rfind("-")
    dot = body.rfind(".")
    timestamp = body[dot + 1:] if dot > dash else body[dash + 1:]
    if not _TIMESTAMP_RE.match(timestamp):
        raise InvalidPseudoVersion(f"malformed timestamp {timestamp!r} in {v!r}")
    if not _REV_RE.match(rev):
        raise InvalidPseudoVersion(f"malformed revision {rev!r} in {v!r}")
    return timestamp, rev


def pseudo_version_rev(v: str) -> str:
    """返回伪版本中嵌入的修订前缀"""
    return _split(v)[1]


def pseudo_version_time(v: str) -> datetime:
    """返回伪版本中嵌入的 UTC 时间"""
    timestamp, _ = _split(v)
    try:
        parsed = datetime.strptime(timestamp, "%Y%m%d%H%M%S")
    except ValueError as e:
        raise InvalidPseudoVersion(f"malformed timestamp {timestamp!r} in {v!r}") from e
    return parsed.replace(tzinfo=timezone.utc)
