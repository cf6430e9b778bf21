"""Instantiation of managed components.

For each component the :class:`BeanFactory` chooses the constructor with the
most parameters it can satisfy from the managed types, and invokes it with the
instances already built for those types.
"""

import inspect
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from sprig.domain import ConstructorSpec, ManagedType
from sprig.errors import UnableToCreateBeanError

__all__ = ["BeanFactory", "select_constructor", "satisfiable_parameter_count"]

logger = logging.getLogger(__name__)


def satisfiable_parameter_count(constructor: ConstructorSpec, universe: Iterable[type]) -> int:
    """Count the parameters of ``constructor`` whose declared type is a managed type."""
    universe = set(universe)
    return sum(
        1
        for parameter in constructor.parameters
        if not parameter.is_variadic and _is_in(parameter.declared_type, universe)
    )


def select_constructor(managed: ManagedType, universe: Iterable[type]) -> ConstructorSpec:
    """Pick the constructor with the most satisfiable parameters.

    Ties go to the first constructor in declaration order (``__init__`` first).

    Raises:
        UnableToCreateBeanError: If the type declares no constructor.
    """
    if not managed.constructors:
        raise UnableToCreateBeanError(f"{managed.name} declares no constructor")
    universe = set(universe)
    return max(
        managed.constructors,
        key=lambda constructor: satisfiable_parameter_count(constructor, universe),
    )


class BeanFactory:
    """Build one instance of each managed type.

    Args:
        managed_types: The complete universe of managed types, keyed by class.
    """

    def __init__(self, managed_types: Mapping[type, ManagedType]):
        self._managed_types = managed_types
        self._universe = set(managed_types)

    def instantiate(self, ordered_types: Iterable[type]) -> dict[type, Any]:
        """Create the beans in the given order.

        Args:
            ordered_types: Managed types, every type after its dependencies.

        Returns:
            A mapping from each type to its single instance, in creation order.

        Raises:
            UnableToCreateBeanError: If a constructor cannot be satisfied or fails.
        """
        beans: dict[type, Any] = {}
        for bean_type in ordered_types:
            if bean_type in beans:
                continue
            beans[bean_type] = self.create(self._managed_types[bean_type], beans)
        return beans

    def create(self, managed: ManagedType, beans: Mapping[type, Any]) -> Any:
        """Invoke the selected constructor of ``managed`` with beans built so far."""
        constructor = select_constructor(managed, self._universe)
        args, kwargs = self._arguments(managed, constructor, beans)
        logger.debug(
            "Creating %s with %s(%s)",
            managed.name,
            constructor.name,
            ", ".join([*map(_type_name, args), *kwargs]),
        )
        try:
            return constructor.factory(*args, **kwargs)
        except Exception as e:
            raise UnableToCreateBeanError(
                f"Unable to create bean {managed.name} with {constructor.name}: {e}"
            ) from e

    def _arguments(
        self,
        managed: ManagedType,
        constructor: ConstructorSpec,
        beans: Mapping[type, Any],
    ) -> tuple[list[Any], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for parameter in constructor.parameters:
            if parameter.is_variadic:
                continue
            if _is_in(parameter.declared_type, self._universe):
                if parameter.declared_type not in beans:
                    raise UnableToCreateBeanError(
                        f"Dependency {parameter.declared_type.__name__} of {managed.name} "
                        "has not been created yet"
                    )
                value = beans[parameter.declared_type]
            elif parameter.has_default:
                if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
                    value = _default_of(constructor, parameter.name)
                else:
                    continue
            else:
                raise UnableToCreateBeanError(
                    f"Parameter '{parameter.name}' of {managed.name}.{constructor.name} "
                    "is not a managed component and has no default"
                )

            if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[parameter.name] = value

        return args, kwargs


def _default_of(constructor: ConstructorSpec, name: str) -> Any:
    factory = constructor.factory
    target = factory.__init__ if inspect.isclass(factory) else factory
    return inspect.signature(target).parameters[name].default


def _type_name(value: Any) -> str:
    return type(value).__name__


def _is_in(declared_type: Any, universe: set[type]) -> bool:
    try:
        return declared_type in universe
    except TypeError:
        return False
