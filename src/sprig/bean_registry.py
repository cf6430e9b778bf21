"""Read-only snapshot of the beans built by an application context.

Beans are registered by type and by the simple name of their type, and can be
retrieved using either.
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Iterator, Optional, Union

from sprig.errors import BeanNotFoundError, DependencyError

__all__ = ["BeanRegistry", "BeanKey", "ensure_unique_names"]

BeanKey = Union[str, type]
"""Type alias for keys used to look up beans.

Example:
    >>> registry["SomeComponent"]  # Lookup by simple name
    >>> registry[SomeComponent]    # Lookup by type
"""


class BeanRegistry(Mapping):
    """
    Immutable mapping from managed type to its single instance.

    Simple type names must be unique across the registry so that lookups by
    name are unambiguous.

    Raises:
        DependencyError: If two managed types share a simple name.
    """

    def __init__(self, beans: Mapping[type, Any]):
        self._beans = MappingProxyType(dict(beans))
        self._beans_by_name = MappingProxyType(_by_unique_name(self._beans))

    def get_bean(self, key: BeanKey) -> Optional[Any]:
        if isinstance(key, str):
            return self._beans_by_name.get(key)
        return self._beans.get(key)

    @property
    def beans(self) -> Mapping[type, Any]:
        return self._beans

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._beans_by_name)

    def __getitem__(self, key: BeanKey) -> Any:
        beans = self._beans_by_name if isinstance(key, str) else self._beans
        try:
            return beans[key]
        except KeyError:
            raise BeanNotFoundError(f"No bean found for {key!r}") from None

    def __contains__(self, key: object) -> bool:
        if isinstance(key, str):
            return key in self._beans_by_name
        return key in self._beans

    def __iter__(self) -> Iterator[type]:
        return iter(self._beans)

    def __len__(self) -> int:
        return len(self._beans)

    def __repr__(self) -> str:
        return f"BeanRegistry({sorted(self._beans_by_name)})"

def ensure_unique_names(bean_types: Iterable[type]):
    """
    Check that no two managed types share a simple name.

    Raises:
        DependencyError: If a simple name is used by more than one type.
    """
    types_by_name: dict[str, type] = {}

    for bean_type in bean_types:
        name = bean_type.__name__
        if name in types_by_name:
            other = types_by_name[name]
            raise DependencyError(
                f"Duplicate bean name '{name}' "
                f"for types {other.__module__}.{other.__qualname__} "
                f"and {bean_type.__module__}.{bean_type.__qualname__}"
            )
        types_by_name[name] = bean_type


def _by_unique_name(beans: Mapping[type, Any]) -> dict[str, Any]:
    ensure_unique_names(beans)
    return {bean_type.__name__: bean for bean_type, bean in beans.items()}
