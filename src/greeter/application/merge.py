"""Application-layer merge policy.

Purpose
-------
Turn an ordered sequence of override layers into one effective mapping while
tracking which layer supplied each key. The module performs no I/O so it can be
reused by any composition root.

Contents
    - ``merge_layers``: public entry point driven by a simple loop.
    - ``apply_layer``: one idempotent override step.

System Role
-----------
Receives layer payloads from :mod:`greeter.core`, applies precedence
(``defaults → env → flags``), and returns the data consumed by
:class:`greeter.domain.config.GreeterConfig`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Iterable

from ..domain.config import SourceInfo


def merge_layers(
    layers: Iterable[tuple[str, Mapping[str, object]]],
) -> tuple[dict[str, object], dict[str, SourceInfo]]:
    """Merge configuration *layers* honouring precedence and provenance.

    Parameters
    ----------
    layers:
        Iterable of ``(layer_name, mapping)`` tuples ordered from lowest to
        highest precedence.

    Returns
    -------
    tuple[dict[str, object], dict[str, SourceInfo]]
        ``(merged_values, provenance)`` where ``provenance`` maps every key to
        the layer that supplied its final value.

    Examples
    --------
    >>> merged, meta = merge_layers([
    ...     ("defaults", {"prefix": "Hello", "verbose": False}),
    ...     ("env", {"prefix": "Env"}),
    ...     ("flags", {"prefix": "Flag"}),
    ... ])
    >>> merged["prefix"], meta["prefix"]["layer"], meta["verbose"]["layer"]
    ('Flag', 'flags', 'defaults')
    """

    merged: dict[str, object] = {}
    meta: dict[str, SourceInfo] = {}

    for layer_name, data in layers:
        apply_layer(merged, meta, layer_name, data)
    return merged, meta


def apply_layer(
    target: dict[str, object],
    meta: dict[str, SourceInfo],
    layer: str,
    payload: Mapping[str, object],
) -> None:
    """Override *target* with every key in *payload* and record *layer* as the source.

    Keys missing from *payload* keep their previous value and provenance, so
    applying the same layer twice yields the same result as applying it once.
    """

    for key, value in payload.items():
        target[key] = value
        meta[key] = {"layer": layer, "key": key}
