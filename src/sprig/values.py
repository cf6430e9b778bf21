"""Conversion of textual values into typed scalars.

Supported scalars are kept in a dispatch table mapping each type to the
function parsing it from text. ``str`` is returned unchanged. New scalar
types are supported by registering a parser, e.g.::

    >>> converter = ScalarConverter()
    >>> converter.register(Path, Path)
"""

import decimal
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Optional

from sprig.declarations import unwrap_optional
from sprig.errors import ConversionError

__all__ = [
    "ScalarConverter",
    "DEFAULT_CONVERTER",
    "convert",
    "is_supported_scalar",
    "parse_bool",
]

_TRUE_TOKENS = frozenset({"true", "1", "yes", "on"})
_FALSE_TOKENS = frozenset({"false", "0", "no", "off"})


def parse_bool(token: str) -> bool:
    """Parse ``true``/``false``, ``1``/``0``, ``yes``/``no`` or ``on``/``off``, ignoring case."""
    lowered = token.strip().lower()
    if lowered in _TRUE_TOKENS:
        return True
    if lowered in _FALSE_TOKENS:
        return False
    raise ValueError(f"invalid boolean literal: {token!r}")


def _parse_int(token: str) -> int:
    return int(token.strip())


def _parse_float(token: str) -> float:
    return float(token.strip())


def _parse_decimal(token: str) -> Decimal:
    try:
        return Decimal(token.strip())
    except decimal.InvalidOperation as e:
        raise ValueError(f"invalid decimal literal: {token!r}") from e


def _parse_complex(token: str) -> complex:
    return complex(token.strip())


def _parse_fraction(token: str) -> Fraction:
    return Fraction(token.strip())


def _parse_bytes(token: str) -> bytes:
    return token.encode("utf-8")


class ScalarConverter:
    """Dispatch table of parsers for the supported scalar types.

    Attributes:
        parsers: Mapping from scalar type to a function parsing it from text.
    """

    def __init__(self, parsers: Optional[dict[type, Callable[[str], Any]]] = None):
        self.parsers: dict[type, Callable[[str], Any]] = {
            str: str,
            int: _parse_int,
            float: _parse_float,
            bool: parse_bool,
            complex: _parse_complex,
            Decimal: _parse_decimal,
            Fraction: _parse_fraction,
            bytes: _parse_bytes,
        }
        if parsers:
            self.parsers.update(parsers)

    def register(self, target: type, parser: Callable[[str], Any]) -> None:
        """Add or replace the parser used for ``target``."""
        self.parsers[target] = parser

    def supports(self, target: Any) -> bool:
        """Whether ``target`` (or ``Optional[target]``) is a supported scalar type."""
        return unwrap_optional(target) in self.parsers

    @property
    def supported_types(self) -> frozenset:
        return frozenset(self.parsers)

    def convert(self, token: str, target: Any) -> Any:
        """Convert ``token`` to an instance of ``target``.

        Args:
            token: The textual value.
            target: A supported scalar type, optionally wrapped in ``Optional``.

        Returns:
            The parsed value; ``token`` itself when ``target`` is ``str``.

        Raises:
            ConversionError: If ``target`` is unsupported or ``token`` is malformed.
        """
        target = unwrap_optional(target)
        if target is str:
            return token
        try:
            parser = self.parsers[target]
        except (KeyError, TypeError) as e:
            raise ConversionError(token, target) from e
        try:
            return parser(token)
        except (ValueError, TypeError, ArithmeticError) as e:
            raise ConversionError(token, target) from e

    def zero_value(self, target: Any) -> Any:
        """The value a conversion falls back to when failures are tolerated."""
        target = unwrap_optional(target)
        if target is str:
            return ""
        if target is bytes:
            return b""
        return target() if target in (int, float, bool, complex, Decimal, Fraction) else None


DEFAULT_CONVERTER = ScalarConverter()


def convert(token: str, target: Any) -> Any:
    """Convert ``token`` with the default converter; see :meth:`ScalarConverter.convert`."""
    return DEFAULT_CONVERTER.convert(token, target)


def is_supported_scalar(target: Any) -> bool:
    return DEFAULT_CONVERTER.supports(target)
