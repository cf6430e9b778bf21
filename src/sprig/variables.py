"""Sources of named external values.

The default source reads the process environment and falls back to a registry
of named constants, which may be a mapping or any object exposing the
constants as attributes (a class or a module).
"""

import logging
import os
from collections.abc import Mapping
from typing import Any, Optional, Protocol

from sprig.errors import NoSuchVariableError

__all__ = ["VariableSource", "EnvironmentVariableSource"]

logger = logging.getLogger(__name__)


class VariableSource(Protocol):
    def lookup(self, name: str) -> str:
        """Return the text of variable ``name``, raising NoSuchVariableError if absent."""
        ...


class EnvironmentVariableSource:
    """Look variables up in the environment first, then in the constants.

    Example:
        >>> class Constants:
        ...     numbers = "1,2,3"
        >>> EnvironmentVariableSource(Constants).lookup("numbers")
        '1,2,3'
    """

    def __init__(self, constants: Any = None, environ: Optional[Mapping[str, str]] = None):
        self._constants = constants
        self._environ = os.environ if environ is None else environ

    def lookup(self, name: str) -> str:
        content = self._environ.get(name)
        if content is not None:
            logger.debug("Variable %s resolved from the environment", name)
            return content

        constant = self._constant(name)
        if constant is None:
            raise NoSuchVariableError(name)
        logger.debug("Variable %s resolved from the constants", name)
        return constant if isinstance(constant, str) else str(constant)

    def _constant(self, name: str) -> Any:
        if self._constants is None:
            return None
        if isinstance(self._constants, Mapping):
            return self._constants.get(name)
        if name.startswith("_"):
            return None
        return getattr(self._constants, name, None)
