from __future__ import annotations

import pytest

from greeter import build_info
from greeter.build_info import BuildInfo, version_string


def test_version_string_joins_with_hyphens() -> None:
    info = BuildInfo(branch="main", date="2024-01-01", version="v1.0.0", commit="abc123")
    assert version_string(info) == "main-2024-01-01-v1.0.0-abc123"


def test_version_string_without_embedded_metadata() -> None:
    assert version_string(BuildInfo()) == "---"


def test_version_string_defaults_to_embedded_metadata(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(build_info, "BUILD_INFO", BuildInfo("release", "20240601", "v2.1.0", "deadbeef"))
    assert version_string() == "release-20240601-v2.1.0-deadbeef"
