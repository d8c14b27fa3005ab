"""Domain-level exception hierarchy.

Purpose
-------
Expose the error taxonomy shared by the configuration resolver, the greeting
server, and the CLI. The hierarchy lives in the domain layer so adapters and the
composition root can raise it without importing outer layers.

Contents
--------
* :class:`GreeterError` – umbrella base class for everything the package raises.
* :class:`ConfigError` – configuration could not be resolved.
* :class:`InvalidBoolean` – a boolean environment variable failed to parse.
* :class:`ServeError` – the server could not run.
* :class:`BindError` – the listen address is invalid or the bind failed.

System Role
-----------
Configuration errors are fatal and propagate to ``lib_cli_exit_tools`` which
prints the diagnostic. :class:`BindError` is caught by the CLI, printed to the
error stream, and turned into exit status ``1``.
"""

from __future__ import annotations


class GreeterError(Exception):
    """Base type for all exceptions emitted by ``greeter``."""


class ConfigError(GreeterError):
    """Raised when the effective configuration cannot be resolved.

    Why
    ----
    The service must not start with an ambiguous value, so every resolution
    failure aborts the process before the server is created.
    """


class InvalidBoolean(ConfigError):
    """Raised when a boolean environment variable holds an unparsable value.

    Attributes
    ----------
    key:
        Name of the offending environment variable (``VERBOSE``).
    value:
        Raw value found in the environment.

    Examples
    --------
    >>> str(InvalidBoolean("VERBOSE", "notabool"))
    'invalid boolean value "notabool" for VERBOSE'
    """

    def __init__(self, key: str, value: str) -> None:
        super().__init__(f'invalid boolean value "{value}" for {key}')
        self.key = key
        self.value = value


class ServeError(GreeterError):
    """Base type for failures raised while starting or running the server."""


class BindError(ServeError):
    """Raised when the listener cannot be created for the configured address.

    Covers malformed addresses as well as operating system refusals (address
    already in use, permission denied, unknown host).
    """
