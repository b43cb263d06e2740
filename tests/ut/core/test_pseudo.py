"""伪版本编解码测试"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from modglide.core.exceptions import InvalidPseudoVersion
from modglide.core.pseudo import (
    is_pseudo_version,
    pseudo_version_rev,
    pseudo_version_time,
    strip_incompatible,
)


class TestIsPseudoVersion:
    @pytest.mark.parametrize("v", [
        "v0.0.0-20180917221912-90fa682c2a6e",
        "v1.2.4-0.20191109021931-daa7c04131f5",
        "v2.0.0-pre.0.20200101000000-abcdefabcdef",
        "v3.0.0-20170101000000-0123456789ab+incompatible",
    ])
    def test_accepts(self, v: str) -> None:
        assert is_pseudo_version(v)

    @pytest.mark.parametrize("v", [
        "", "v1.2.3", "v1.2.3+incompatible", "v1.2.3-rc.1",
        "v0.0.0-2018091722191-90fa682c2a6e",  # 时间戳只有 13 位
        "v0.0.0-20180917221912", "1.0.0-20180917221912-90fa682c2a6e",
    ])
    def test_rejects(self, v: str) -> None:
        assert not is_pseudo_version(v)


class TestDecode:
    @pytest.mark.parametrize(("v", "rev"), [
        ("v0.0.0-20180917221912-90fa682c2a6e", "90fa682c2a6e"),
        ("v1.2.4-0.20191109021931-daa7c04131f5", "daa7c04131f5"),
        ("v2.0.0-pre.0.20200101000000-abcdefabcdef", "abcdefabcdef"),
        ("v3.0.0-20170101000000-0123456789ab+incompatible", "0123456789ab"),
    ])
    def test_rev(self, v: str, rev: str) -> None:
        assert pseudo_version_rev(v) == rev

    def test_time(self) -> None:
        ts = pseudo_version_time("v1.2.4-0.20191109021931-daa7c04131f5")
        assert ts == datetime(2019, 11, 9, 2, 19, 31, tzinfo=timezone.utc)

    def test_invalid_calendar_time(self) -> None:
        with pytest.raises(InvalidPseudoVersion, match="timestamp"):
            pseudo_version_time("v0.0.0-20181399000000-90fa682c2a6e")

    def test_not_pseudo_raises(self) -> None:
        with pytest.raises(InvalidPseudoVersion, match="not a pseudo-version"):
            pseudo_version_rev("v1.2.3")


class TestStripIncompatible:
    @pytest.mark.parametrize(("v", "expected"), [
        ("v2.1.0+incompatible", "v2.1.0"),
        ("v1.0.0", "v1.0.0"),
        ("+incompatible", ""),
    ])
    def test_strip(self, v: str, expected: str) -> None:
        assert strip_incompatible(v) == expected
