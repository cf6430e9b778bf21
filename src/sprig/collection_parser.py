"""Parsing of delimited text into arrays, lists, sets and mappings of scalars.

The supported containers and the Python types declaring them:

===============  ==========================================================
array            ``tuple[S, ...]``
ordered          ``list[S]``, ``typing.List[S]``, ``Sequence[S]``
set              ``set[S]``, ``frozenset[S]``, ``AbstractSet[S]``
mapping          ``dict[K, V]``, ``typing.Dict[K, V]``, ``Mapping[K, V]``
===============  ==========================================================

where ``S``, ``K`` and ``V`` are scalars supported by the
:class:`~sprig.values.ScalarConverter`. Mapping entries are ``key:value``.
"""

import collections.abc
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, get_args, get_origin

from sprig.declarations import unwrap_optional
from sprig.errors import ConversionError, IllegalTypeError, UnmappableStringError
from sprig.values import DEFAULT_CONVERTER, ScalarConverter

__all__ = [
    "CollectionKind",
    "CollectionShape",
    "CollectionParser",
    "collection_shape",
    "split_values",
]

logger = logging.getLogger(__name__)

KEY_VALUE_SEPARATOR = ":"


class CollectionKind(Enum):
    ARRAY = "array"
    LIST = "list"
    SET = "set"
    FROZENSET = "frozenset"
    MAPPING = "mapping"


_KINDS_BY_ORIGIN = {
    tuple: CollectionKind.ARRAY,
    list: CollectionKind.LIST,
    collections.abc.Sequence: CollectionKind.LIST,
    collections.abc.MutableSequence: CollectionKind.LIST,
    set: CollectionKind.SET,
    collections.abc.Set: CollectionKind.SET,
    collections.abc.MutableSet: CollectionKind.SET,
    frozenset: CollectionKind.FROZENSET,
    dict: CollectionKind.MAPPING,
    collections.abc.Mapping: CollectionKind.MAPPING,
    collections.abc.MutableMapping: CollectionKind.MAPPING,
}


@dataclass(frozen=True)
class CollectionShape:
    """The container kind of a declared type and the scalar types it holds.

    Attributes:
        kind: The container kind.
        element_types: One type for arrays, lists and sets; key and value types for mappings.
    """

    kind: CollectionKind
    element_types: tuple[type, ...]


def collection_shape(declared_type: Any) -> CollectionShape:
    """Work out the container kind and element types of ``declared_type``.

    Raises:
        IllegalTypeError: If the type is not a supported, parameterised container.
    """
    declared_type = unwrap_optional(declared_type)
    kind = _KINDS_BY_ORIGIN.get(get_origin(declared_type))
    if kind is None:
        raise IllegalTypeError(f"Illegal type of collection: {declared_type!r}")

    args = get_args(declared_type)
    if kind is CollectionKind.ARRAY:
        if len(args) != 2 or args[1] is not Ellipsis:
            raise IllegalTypeError(
                f"Illegal type of collection: {declared_type!r} "
                "(arrays are declared as tuple[T, ...])"
            )
        args = args[:1]
    expected = 2 if kind is CollectionKind.MAPPING else 1
    if len(args) != expected:
        raise IllegalTypeError(f"Illegal type parametrized: {declared_type!r}")
    return CollectionShape(kind, tuple(args))


def split_values(content: str, delimiter: str = ",") -> list[str]:
    """Split ``content`` on the literal ``delimiter``, dropping trailing empty elements.

    >>> split_values("1,2,3")
    ['1', '2', '3']
    >>> split_values("")
    []
    """
    if not delimiter:
        raise ValueError("delimiter must not be empty")
    parts = content.split(delimiter)
    while parts and parts[-1] == "":
        parts.pop()
    return parts


class CollectionParser:
    """Build collections of scalars from delimited text.

    Args:
        converter: Converts each element, key and value.
        lenient_arrays: If True, array elements that fail to convert are logged and
            left at the element type's zero value instead of raising.
    """

    def __init__(
        self,
        converter: Optional[ScalarConverter] = None,
        lenient_arrays: bool = False,
    ):
        self._converter = converter or DEFAULT_CONVERTER
        self._lenient_arrays = lenient_arrays

    def validate(self, declared_type: Any) -> CollectionShape:
        """Check that ``declared_type`` is a container of supported scalars.

        Raises:
            IllegalTypeError: If the container or one of its element types is unsupported.
        """
        shape = collection_shape(declared_type)
        unsupported = [
            element_type
            for element_type in shape.element_types
            if not self._converter.supports(element_type)
        ]
        if unsupported:
            raise IllegalTypeError(
                f"Illegal type parametrized: {declared_type!r} "
                f"(unsupported element types {unsupported!r})"
            )
        return shape

    def parse(self, content: str, declared_type: Any, delimiter: str = ",") -> Any:
        """Parse ``content`` into an instance of ``declared_type``.

        Args:
            content: The delimited text.
            declared_type: The field's container type, e.g. ``list[int]``.
            delimiter: Literal separator between elements.

        Returns:
            A tuple, list, set, frozenset or dict depending on ``declared_type``.

        Raises:
            IllegalTypeError: If ``declared_type`` is not supported.
            UnmappableStringError: If a mapping entry has no ``key:value`` form.
            ConversionError: If an element cannot be converted.
        """
        shape = self.validate(declared_type)
        return self.build(shape, split_values(content, delimiter))

    def build(self, shape: CollectionShape, tokens: list[str]) -> Any:
        if shape.kind is CollectionKind.ARRAY:
            return self._array(tokens, shape.element_types[0])
        if shape.kind is CollectionKind.LIST:
            return [self._converter.convert(t, shape.element_types[0]) for t in tokens]
        if shape.kind is CollectionKind.SET:
            return {self._converter.convert(t, shape.element_types[0]) for t in tokens}
        if shape.kind is CollectionKind.FROZENSET:
            return frozenset(
                self._converter.convert(t, shape.element_types[0]) for t in tokens
            )
        return self._mapping(tokens, *shape.element_types)

    def _array(self, tokens: list[str], element_type: type) -> tuple:
        element_type = unwrap_optional(element_type)
        if not self._lenient_arrays:
            return tuple(self._converter.convert(t, element_type) for t in tokens)

        elements = []
        for index, token in enumerate(tokens):
            try:
                elements.append(self._converter.convert(token, element_type))
            except ConversionError as e:
                logger.warning(
                    "Cannot convert element %d of %s to %s: %s",
                    index,
                    tokens,
                    element_type.__name__,
                    e,
                )
                elements.append(self._converter.zero_value(element_type))
        return tuple(elements)

    def _mapping(self, tokens: list[str], key_type: type, value_type: type) -> dict:
        mapping = {}
        for entry in tokens:
            key, separator, value = entry.partition(KEY_VALUE_SEPARATOR)
            if not separator or not value:
                raise UnmappableStringError(f"Cannot map: {entry!r} in {tokens}")
            mapping[self._converter.convert(key, key_type)] = self._converter.convert(
                value, value_type
            )
        return mapping
