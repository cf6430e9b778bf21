"""
The application context: the entry point building and holding all beans.

Construction runs the whole pipeline once:

    discovery -> dependency graph -> topological sort -> instantiation
    -> field population (autowired, value, multi-value)

and either yields a fully populated context or raises the first error found.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Iterator, Optional, TypeVar, Union

from sprig.bean_factory import BeanFactory
from sprig.bean_registry import BeanKey, BeanRegistry, ensure_unique_names
from sprig.collection_parser import CollectionParser
from sprig.declarations import describe
from sprig.discovery import discover
from sprig.domain import ManagedType
from sprig.graph import build_dependency_graph
from sprig.population import FieldPopulator
from sprig.values import DEFAULT_CONVERTER, ScalarConverter
from sprig.variables import EnvironmentVariableSource, VariableSource

__all__ = ["ApplicationContext", "ComponentSource"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

ComponentSource = Union[str, Iterable[type]]
"""Either the dotted name of a package to scan, or the component classes themselves."""


class ApplicationContext:
    """
    A container of singleton beans built from managed component classes.

    Each bean is created with the constructor whose parameters are most
    satisfiable from other managed types, then its ``Autowired``, ``Value``
    and ``MultiValue`` fields are populated.

    Args:
        source: A package name to scan for ``@component`` classes, or an
            iterable of component classes.
        constants: Fallback for variables missing from the environment; a
            mapping or an object exposing the constants as attributes.
        environ: Mapping used instead of ``os.environ``.
        variables: A custom variable source; overrides ``constants`` and ``environ``.
        lenient_arrays: If True, array elements that cannot be converted are
            logged and left at their zero value instead of failing.
        converter: A custom scalar conversion table.

    Raises:
        CyclicDependencyError: If the components depend on each other in a cycle.
        DependencyError: If two components share a simple name.
        UnableToCreateBeanError: If a component cannot be instantiated.
        UnableToSetValueError: If a field cannot be assigned.
        IllegalTypeError: If a tagged field has an unsupported type.
        NoSuchVariableError: If an external variable is missing.
        UnmappableStringError: If a mapping entry cannot be split.
        ConversionError: If a value cannot be converted.

    Example:
        >>> ctx = ApplicationContext("myapp.components", constants={"number": "1"})
        >>> ctx.get_bean(SomeComponent) is ctx.get_bean_by_name("SomeComponent")
        True
    """

    def __init__(
        self,
        source: ComponentSource,
        constants: Any = None,
        environ: Optional[Mapping[str, str]] = None,
        variables: Optional[VariableSource] = None,
        lenient_arrays: bool = False,
        converter: Optional[ScalarConverter] = None,
    ):
        self.namespace = source if isinstance(source, str) else None
        component_types = discover(source) if isinstance(source, str) else list(source)

        managed_types = _describe_all(component_types)
        ensure_unique_names(managed_types)
        graph = build_dependency_graph(managed_types.values())
        build_order = graph.topological_order()
        logger.debug("Build order: %s", [t.__name__ for t in build_order])

        beans = BeanFactory(managed_types).instantiate(build_order)

        converter = converter or DEFAULT_CONVERTER
        populator = FieldPopulator(
            variables or EnvironmentVariableSource(constants, environ),
            converter,
            CollectionParser(converter, lenient_arrays),
        )
        populator.populate(beans)

        self._graph = graph
        self._build_order = tuple(build_order)
        self._registry = BeanRegistry(beans)
        logger.debug("Application context ready with %d beans", len(self._registry))

    def get_bean(self, bean_type: type[T]) -> Optional[T]:
        """Return the bean of ``bean_type``, or None if the type is not managed."""
        return self._registry.get_bean(bean_type)

    def get_bean_by_name(self, name: str) -> Optional[Any]:
        """Return the bean whose type's simple name is ``name``, or None."""
        return self._registry.get_bean(name)

    def get_beans(self) -> Mapping[type, Any]:
        """Return a read-only view of all beans keyed by type."""
        return self._registry.beans

    @property
    def dependency_graph(self) -> dict[type, frozenset[type]]:
        return self._graph.as_dict()

    @property
    def build_order(self) -> tuple[type, ...]:
        """Managed types in the order their beans were created."""
        return self._build_order

    def __getitem__(self, key: BeanKey) -> Any:
        return self._registry[key]

    def __contains__(self, key: object) -> bool:
        return key in self._registry

    def __iter__(self) -> Iterator[type]:
        return iter(self._registry)

    def __len__(self) -> int:
        return len(self._registry)

    def __repr__(self) -> str:
        return f"ApplicationContext({self.namespace or '<explicit>'}, {len(self)} beans)"


def _describe_all(component_types: Iterable[type]) -> dict[type, ManagedType]:
    managed_types: dict[type, ManagedType] = {}
    for component_type in component_types:
        if component_type not in managed_types:
            managed_types[component_type] = describe(component_type)
    return managed_types
