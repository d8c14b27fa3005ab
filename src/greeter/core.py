"""Composition root for ``greeter`` configuration.

Purpose
-------
Provide the single entry point that turns built-in defaults, environment
variables, and command-line flags into the effective
:class:`~greeter.domain.config.GreeterConfig`.

Contents
--------
* :data:`DEFAULTS` – the built-in defaults layer.
* :func:`load_env_layer` – materialises the environment layer (fatal on bad
  booleans).
* :func:`resolve_config` – runs ``defaults → env → flags`` and returns the
  frozen configuration.

System Role
-----------
Connects the env adapter with the merge policy and the domain value object
while emitting observability signals. It is the canonical location for
adjusting precedence rules or wiring additional layers.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Final

from .adapters.env.default import DefaultEnvLoader
from .application.merge import merge_layers
from .application.ports import EnvLoader, Merger
from .domain.config import CONFIG_KEYS, GreeterConfig
from .domain.errors import ConfigError
from .observability import log_debug, log_info, make_event

DEFAULTS: Final[Mapping[str, object]] = MappingProxyType(
    {
        "verbose": False,
        "prefix": "Hello",
        "listen": "0.0.0.0:8080",
        "version": False,
    }
)


def load_env_layer(environ: Mapping[str, str] | None = None, *, loader: EnvLoader | None = None) -> dict[str, object]:
    """Return the environment override layer.

    Raises
    ------
    InvalidBoolean
        When a boolean variable is set to an unparsable value. Callers must
        treat this as fatal and stop before parsing flags.
    """

    env_loader = loader if loader is not None else DefaultEnvLoader(environ=environ)
    return dict(env_loader.load())


def resolve_config(
    *,
    environ: Mapping[str, str] | None = None,
    env_layer: Mapping[str, object] | None = None,
    flags: Mapping[str, object] | None = None,
    merger: Merger = merge_layers,
) -> GreeterConfig:
    """Return the effective configuration for the current process.

    Parameters
    ----------
    environ:
        Environment mapping used when *env_layer* is not supplied. Defaults to
        :data:`os.environ`.
    env_layer:
        Pre-loaded environment overrides (the CLI loads them before flag
        parsing so a bad boolean aborts first).
    flags:
        Only the flags explicitly given on the command line.
    merger:
        Merge policy, :func:`greeter.application.merge.merge_layers` by default.

    Returns
    -------
    GreeterConfig
        Frozen configuration with provenance for every attribute.

    Side Effects
    ------------
    Emits ``layer_loaded`` debug events and a ``configuration_merged`` info
    event through the package logger.

    Examples
    --------
    >>> cfg = resolve_config(environ={"PREFIX": "Env"}, flags={"verbose": True})
    >>> cfg.prefix, cfg.verbose, cfg.origin("prefix")["layer"]
    ('Env', True, 'env')
    >>> resolve_config(environ={"PREFIX": "Env"}, flags={"prefix": "Flag"}).prefix
    'Flag'
    """

    if env_layer is None:
        env_layer = load_env_layer(environ)
    flag_layer = _known_keys("flags", flags or {})

    layers: list[tuple[str, Mapping[str, object]]] = [("defaults", DEFAULTS)]
    for layer_name, payload in (("env", env_layer), ("flags", flag_layer)):
        if payload:
            log_debug("layer_loaded", **make_event(layer_name, {"keys": sorted(payload)}))
            layers.append((layer_name, payload))

    values, sources = merger(layers)
    config = GreeterConfig.from_mapping(values, sources)
    log_info(
        "configuration_merged",
        layer="final",
        total_layers=len(layers),
        values=config.as_dict(),
        sources={key: info["layer"] for key, info in config.sources.items()},
    )
    return config


def _known_keys(layer: str, payload: Mapping[str, object]) -> dict[str, object]:
    """Reject keys that do not name a configuration attribute."""

    unknown = sorted(set(payload) - set(CONFIG_KEYS))
    if unknown:
        raise ConfigError(f"unknown {layer} settings: {', '.join(unknown)}")
    return dict(payload)


__all__ = [
    "DEFAULTS",
    "GreeterConfig",
    "load_env_layer",
    "resolve_config",
]
