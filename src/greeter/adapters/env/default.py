"""Environment variable adapter.

Purpose
-------
Translate the process environment into the ``env`` override layer. Each
setting has exactly one variable, looked up by its exact upper-case name.

Key behaviours
--------------
* Only ``VERBOSE``, ``PREFIX``, ``LISTEN`` and ``VERSION`` are read; everything
  else in the environment is ignored.
* String settings are taken verbatim, including the empty string.
* Boolean settings accept ``1``, ``t``, ``true``, ``0``, ``f`` and ``false`` in
  any letter case. Anything else raises :class:`InvalidBoolean` so the process
  never continues with an ambiguous value.
* Emits structured logging via :mod:`greeter.observability`.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Callable, Final

from ...domain.errors import InvalidBoolean
from ...observability import log_debug

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "t", "true"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"0", "f", "false"})


def parse_bool(key: str, value: str) -> bool:
    """Parse *value* using the standard boolean vocabulary.

    Parameters
    ----------
    key:
        Variable name, used only for the error message.
    value:
        Raw text from the environment.

    Raises
    ------
    InvalidBoolean
        When *value* is not one of the recognised spellings.

    Examples
    --------
    >>> parse_bool("VERBOSE", "TRUE"), parse_bool("VERBOSE", "0")
    (True, False)
    >>> parse_bool("VERBOSE", "yes")
    Traceback (most recent call last):
    ...
    greeter.domain.errors.InvalidBoolean: invalid boolean value "yes" for VERBOSE
    """

    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise InvalidBoolean(key, value)


def parse_str(key: str, value: str) -> str:
    return value


#: Environment variable name mapped to ``(attribute, parser)``. Booleans are
#: listed first so a bad boolean aborts before any string is consumed.
ENV_VARIABLES: Final[Mapping[str, tuple[str, Callable[[str, str], object]]]] = {
    "VERSION": ("version", parse_bool),
    "VERBOSE": ("verbose", parse_bool),
    "PREFIX": ("prefix", parse_str),
    "LISTEN": ("listen", parse_str),
}


class DefaultEnvLoader:
    """Load the environment variables that belong to the greeter configuration."""

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Initialise the loader with a specific ``environ`` mapping for testability.

        Parameters
        ----------
        environ:
            Mapping to read from. Defaults to :data:`os.environ`.
        """

        self._environ = os.environ if environ is None else environ

    def load(self) -> dict[str, object]:
        """Return typed overrides for every recognised variable that is set.

        Side Effects
        ------------
        Emits an ``env_variables_loaded`` debug event listing the keys found.

        Examples
        --------
        >>> DefaultEnvLoader(environ={"PREFIX": "Hi", "VERBOSE": "t", "HOME": "/root"}).load()
        {'verbose': True, 'prefix': 'Hi'}
        """

        collected: dict[str, object] = {}
        for variable, (attribute, parser) in ENV_VARIABLES.items():
            if variable not in self._environ:
                continue
            collected[attribute] = parser(variable, self._environ[variable])
        log_debug("env_variables_loaded", layer="env", keys=sorted(collected))
        return collected
