"""Domain models describing the declarations of managed components."""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sprig.markers import FieldTag


@dataclass(frozen=True)
class ParameterSpec:
    """A parameter of a component constructor.

    Attributes:
        name: The parameter name in the constructor's signature.
        declared_type: The annotated type, with ``Annotated`` and ``Optional`` unwrapped,
            or None if the parameter is not annotated.
        kind: The ``inspect.Parameter`` kind.
        has_default: Whether the parameter may be omitted.
    """

    name: str
    declared_type: Optional[Any]
    kind: Any = inspect.Parameter.POSITIONAL_OR_KEYWORD
    has_default: bool = False

    @property
    def is_variadic(self) -> bool:
        return self.kind in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        )


@dataclass(frozen=True)
class ConstructorSpec:
    """A way of creating a component.

    Attributes:
        name: ``__init__`` for the class itself, or the name of a constructor classmethod.
        factory: The callable invoked to create the instance.
        parameters: The constructor's parameters, excluding ``self``/``cls``.
    """

    name: str
    factory: Callable[..., Any]
    parameters: tuple[ParameterSpec, ...]


@dataclass(frozen=True)
class FieldSpec:
    """A class-level annotated field.

    Attributes:
        name: The attribute name.
        declared_type: The annotated type, stripped of its ``Annotated`` wrapper.
        tag: The container tag found in the ``Annotated`` metadata, if any.
    """

    name: str
    declared_type: Any
    tag: Optional[FieldTag] = None


@dataclass(frozen=True)
class ManagedType:
    """The declarations of a class eligible for container management.

    Attributes:
        type_: The class itself.
        constructors: ``__init__`` first, then tagged constructor classmethods in declaration order.
        fields: Annotated fields across the class hierarchy, base classes first.
    """

    type_: type
    constructors: tuple[ConstructorSpec, ...]
    fields: tuple[FieldSpec, ...]

    @property
    def name(self) -> str:
        return self.type_.__name__

    def fields_tagged(self, tag_type: type) -> list[FieldSpec]:
        return [f for f in self.fields if isinstance(f.tag, tag_type)]
