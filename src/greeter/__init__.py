"""Public package surface for the ``greeter`` service.

Exports the composition root (:func:`resolve_config`), the configuration value
object, the server entry points, and the error taxonomy so that both
``import greeter`` and ``python -m greeter`` flows share the same objects.
"""

from __future__ import annotations

from .build_info import BUILD_INFO, BuildInfo, version_string
from .core import DEFAULTS, load_env_layer, resolve_config
from .domain.config import GreeterConfig, SourceInfo
from .domain.errors import BindError, ConfigError, GreeterError, InvalidBoolean, ServeError
from .observability import get_logger
from .server import GreeterServer, GreetingHandler, serve

__all__ = [
    "BUILD_INFO",
    "BindError",
    "BuildInfo",
    "ConfigError",
    "DEFAULTS",
    "GreeterConfig",
    "GreeterError",
    "GreeterServer",
    "GreetingHandler",
    "InvalidBoolean",
    "ServeError",
    "SourceInfo",
    "get_logger",
    "load_env_layer",
    "resolve_config",
    "serve",
    "version_string",
]
