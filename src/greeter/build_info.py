"""Build metadata embedded when a release is produced.

The release pipeline rewrites the four ``BUILD_*`` constants below (for example
with ``git rev-parse`` output) before building the wheel. Source checkouts keep
the empty strings, which render as ``---``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

BUILD_BRANCH: Final[str] = ""  # active branch
BUILD_DATE: Final[str] = ""  # date stamp
BUILD_VERSION: Final[str] = ""  # version tag or "tip"
BUILD_COMMIT: Final[str] = ""  # active commit hash (no "dirty" flag)


@dataclass(frozen=True, slots=True)
class BuildInfo:
    """Version metadata fixed at build time."""

    branch: str = ""
    date: str = ""
    version: str = ""
    commit: str = ""


BUILD_INFO: Final[BuildInfo] = BuildInfo(
    branch=BUILD_BRANCH,
    date=BUILD_DATE,
    version=BUILD_VERSION,
    commit=BUILD_COMMIT,
)


def version_string(info: BuildInfo | None = None) -> str:
    """Return ``branch-date-version-commit`` joined with literal hyphens.

    Examples
    --------
    >>> version_string(BuildInfo("main", "20240101", "v1.2.0", "abc123"))
    'main-20240101-v1.2.0-abc123'
    >>> version_string(BuildInfo())
    '---'
    """

    if info is None:
        info = BUILD_INFO
    return f"{info.branch}-{info.date}-{info.version}-{info.commit}"
