"""Domain-level configuration value object.

Purpose
-------
Hold the effective greeter configuration once every override layer has been
applied. The object is frozen, carries the provenance of each attribute, and is
handed explicitly to the server so no module-level state is involved.

Contents
--------
* :class:`SourceInfo` – typed metadata naming the layer that supplied a key.
* :class:`GreeterConfig` – immutable configuration with dump and provenance
  helpers.
* :data:`CONFIG_KEYS` – attribute names in resolution order.
* :data:`DUMP_ORDER` – ``(attribute, label)`` pairs rendered by
  :meth:`GreeterConfig.dump`.

System Role
-----------
Produced by :func:`greeter.core.resolve_config`, read by the CLI and the
server. Contains no I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final, TypedDict


class SourceInfo(TypedDict):
    """Describe the origin of an effective configuration value.

    Attributes
    ----------
    layer:
        Logical layer name (``"defaults"``, ``"env"`` or ``"flags"``).
    key:
        Attribute name the entry belongs to.
    """

    layer: str
    key: str


CONFIG_KEYS: Final[tuple[str, ...]] = ("verbose", "prefix", "listen", "version")

DUMP_ORDER: Final[tuple[tuple[str, str], ...]] = (
    ("verbose", "VERBOSE"),
    ("listen", "LISTEN"),
    ("prefix", "PREFIX"),
)


@dataclass(frozen=True, slots=True)
class GreeterConfig:
    """Immutable effective configuration.

    Why
    ----
    The server reads the configuration from many request threads; a frozen
    value removes any need for synchronisation and keeps tests free of global
    state.

    Parameters
    ----------
    verbose:
        Print the effective configuration and the startup line.
    prefix:
        Greeting prefix used in every response body.
    listen:
        ``host:port`` address the listener binds to.
    version:
        Print the version string and exit without serving.
    sources:
        Mapping from attribute name to :class:`SourceInfo`.

    Examples
    --------
    >>> cfg = GreeterConfig(prefix="Howdy", sources={"prefix": {"layer": "env", "key": "prefix"}})
    >>> cfg.greeting()
    'Howdy World!\\n'
    >>> cfg.origin("prefix")
    {'layer': 'env', 'key': 'prefix'}
    """

    verbose: bool = False
    prefix: str = "Hello"
    listen: str = "0.0.0.0:8080"
    version: bool = False
    sources: Mapping[str, SourceInfo] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Wrap provenance in ``MappingProxyType`` so it stays read-only."""

        object.__setattr__(self, "sources", MappingProxyType(dict(self.sources)))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], sources: Mapping[str, SourceInfo]) -> GreeterConfig:
        """Build a configuration from merged *values*, ignoring unknown keys."""

        known = {key: values[key] for key in CONFIG_KEYS if key in values}
        return cls(**known, sources=sources)

    def greeting(self) -> str:
        """Return the response body served for every request."""

        return f"{self.prefix} World!\n"

    def dump(self) -> str:
        """Render the user-facing settings as ``KEY=value`` lines.

        Booleans render in lower case so the output can be pasted back into
        an environment file.

        Examples
        --------
        >>> print(GreeterConfig().dump())
        VERBOSE=false
        LISTEN=0.0.0.0:8080
        PREFIX=Hello
        """

        return "\n".join(f"{label}={_render(getattr(self, name))}" for name, label in DUMP_ORDER)

    def origin(self, key: str) -> SourceInfo | None:
        """Return provenance for *key* or ``None`` when it was never recorded."""

        return self.sources.get(key)

    def as_dict(self) -> dict[str, Any]:
        """Return the effective values as a plain mutable ``dict``."""

        return {key: getattr(self, key) for key in CONFIG_KEYS}


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
