"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts adapters satisfy so the composition root can
assemble override layers without depending on concrete implementations.

Contents
--------
* :class:`EnvLoader` – materialises the environment override layer.
* :class:`Merger` – combines layer payloads and produces provenance metadata.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol, Tuple, runtime_checkable

from ..domain.config import SourceInfo


@runtime_checkable
class EnvLoader(Protocol):
    """Translate process environment variables into a configuration override layer."""

    def load(self) -> Mapping[str, object]:
        """Return typed overrides for every recognised variable that is set."""


@runtime_checkable
class Merger(Protocol):
    """Combine layers and produce both merged data and provenance metadata."""

    def __call__(
        self, layers: Iterable[tuple[str, Mapping[str, object]]]
    ) -> Tuple[Mapping[str, object], Mapping[str, SourceInfo]]:
        """Deterministically merge *layers* preserving precedence order."""
