"""Introspection of component classes into :class:`~sprig.domain.ManagedType` declarations.

Constructor parameters are read from signatures and type hints, fields from
class-level annotations. Container tags live in ``typing.Annotated`` metadata.
"""

import inspect
import types
from typing import (
    Annotated,
    Any,
    Callable,
    ClassVar,
    Optional,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from sprig.domain import ConstructorSpec, FieldSpec, ManagedType, ParameterSpec
from sprig.errors import DependencyError
from sprig.markers import Autowired, FieldTag, MultiValue, Value, is_constructor

__all__ = ["describe", "strip_annotated", "unwrap_optional"]


def describe(cls: type) -> ManagedType:
    """Read the constructors and fields declared by ``cls``.

    Args:
        cls: The class to introspect.

    Returns:
        The :class:`ManagedType` describing ``cls``.

    Raises:
        DependencyError: If annotations of ``cls`` cannot be resolved.
    """
    return ManagedType(cls, _constructors_of(cls), _fields_of(cls))


def strip_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *metadata]`` into ``(T, metadata)``."""
    if get_origin(annotation) is Annotated:
        base_type, *metadata = get_args(annotation)
        return base_type, tuple(metadata)
    return annotation, ()


def unwrap_optional(annotation: Any) -> Any:
    """Return ``T`` for ``Optional[T]``, otherwise the annotation unchanged."""
    if get_origin(annotation) in (Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1 and len(get_args(annotation)) == 2:
            return args[0]
    return annotation


def _constructors_of(cls: type) -> tuple[ConstructorSpec, ...]:
    constructors = [_init_constructor(cls)]
    for name, attribute in vars(cls).items():
        if is_constructor(attribute):
            func = attribute.__func__
            constructors.append(
                ConstructorSpec(
                    name,
                    getattr(cls, name),
                    _parameters_of(func, skip_first=True),
                )
            )
    return tuple(constructors)


def _init_constructor(cls: type) -> ConstructorSpec:
    if cls.__init__ is object.__init__:
        return ConstructorSpec("__init__", cls, ())
    return ConstructorSpec(
        "__init__", cls, _parameters_of(cls.__init__, skip_first=True)
    )


def _parameters_of(func: Callable, skip_first: bool) -> tuple[ParameterSpec, ...]:
    parameters = list(inspect.signature(func).parameters.values())
    if skip_first:
        parameters = parameters[1:]

    hints = _type_hints(func)
    return tuple(
        ParameterSpec(
            parameter.name,
            _declared_type(hints.get(parameter.name)),
            parameter.kind,
            parameter.default is not inspect.Parameter.empty,
        )
        for parameter in parameters
    )


def _type_hints(func: Callable) -> dict[str, Any]:
    try:
        return get_type_hints(func, include_extras=True)
    except NameError as e:
        raise DependencyError(
            f"Cannot resolve type hints of {func.__qualname__}: {e}"
        ) from e


def _declared_type(annotation: Any) -> Optional[Any]:
    if annotation is None:
        return None
    base_type, _ = strip_annotated(annotation)
    return unwrap_optional(base_type)


def _fields_of(cls: type) -> tuple[FieldSpec, ...]:
    fields: list[FieldSpec] = []
    for name, annotation in _class_type_hints(cls).items():
        base_type, metadata = strip_annotated(annotation)
        if base_type is ClassVar or get_origin(base_type) is ClassVar:
            continue
        tag = _tag_from(metadata)
        if isinstance(tag, Autowired):
            base_type = unwrap_optional(base_type)
        fields.append(FieldSpec(name, base_type, tag))
    return tuple(fields)


def _class_type_hints(cls: type) -> dict[str, Any]:
    # base classes first, overridden annotations keep their original position
    try:
        return get_type_hints(cls, include_extras=True)
    except NameError as e:
        raise DependencyError(
            f"Cannot resolve field annotations of {cls.__qualname__}: {e}"
        ) from e


def _tag_from(metadata: tuple[Any, ...]) -> Optional[FieldTag]:
    for item in metadata:
        if item is Autowired:
            return Autowired()
        if isinstance(item, (Autowired, Value, MultiValue)):
            return item
    return None
