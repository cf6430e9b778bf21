"""Decorators and ``Annotated`` metadata used to declare managed components.

Classes become managed with :func:`component`. Their fields are tagged by
wrapping the field type in ``typing.Annotated``:

    >>> @component
    ... class Greeter:
    ...     home: Annotated[str, Value("HOME")]
    ...     numbers: Annotated[list[int], MultiValue("numbers")]
    ...     printer: Annotated[Printer, Autowired()]

Alternative constructors are classmethods tagged with :func:`constructor`; the
container picks the one with the most managed parameters.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from sprig.errors import IllegalTypeError

__all__ = [
    "component",
    "constructor",
    "is_component",
    "is_constructor",
    "Autowired",
    "Value",
    "MultiValue",
    "FieldTag",
]

COMPONENT_MARKER = "__sprig_component__"
CONSTRUCTOR_MARKER = "__sprig_constructor__"


@dataclass(frozen=True)
class Autowired:
    """Marks a field to receive the managed instance of its declared type."""


@dataclass(frozen=True)
class Value:
    """Marks a field to receive one external variable, converted to the field's type.

    Attributes:
        name: The name of the environment variable or constant to read.
    """

    name: str


@dataclass(frozen=True)
class MultiValue:
    """Marks a field to receive a delimited external variable as a collection.

    Attributes:
        name: The name of the environment variable or constant to read.
        delimiter: Literal separator between elements.
    """

    name: str
    delimiter: str = ","

    def __post_init__(self):
        if not self.delimiter:
            raise IllegalTypeError(
                f"MultiValue({self.name!r}) needs a non-empty delimiter"
            )


FieldTag = Union[Autowired, Value, MultiValue]


def _set_marker(target: Any, marker: str) -> Any:
    setattr(target, marker, True)
    return target


def component(cls: Optional[type] = None) -> Any:
    """Class decorator marking a class as a managed component.

    May be used bare (``@component``) or called (``@component()``).

    Raises:
        TypeError: If applied to something other than a class.
    """

    def decorator(target: type) -> type:
        if not isinstance(target, type):
            raise TypeError(f"{target!r} is not a class")
        return _set_marker(target, COMPONENT_MARKER)

    if cls is None:
        return decorator
    return decorator(cls)


def constructor(func: Union[Callable, classmethod]) -> classmethod:
    """Tag a classmethod as an alternative constructor of a component.

    A plain function is turned into a classmethod, so both of these work:

        >>> @constructor
        ... def with_printer(cls, printer: Printer): ...

        >>> @constructor
        ... @classmethod
        ... def with_printer(cls, printer: Printer): ...
    """
    if isinstance(func, classmethod):
        _set_marker(func.__func__, CONSTRUCTOR_MARKER)
        return func
    if isinstance(func, staticmethod) or not callable(func):
        raise TypeError(f"{func!r} cannot be used as a constructor")
    return classmethod(_set_marker(func, CONSTRUCTOR_MARKER))


def is_component(cls: Any) -> bool:
    """Whether ``cls`` carries its own component marker (markers are not inherited)."""
    return isinstance(cls, type) and vars(cls).get(COMPONENT_MARKER, False) is True


def is_constructor(attribute: Any) -> bool:
    return isinstance(attribute, classmethod) and bool(
        getattr(attribute.__func__, CONSTRUCTOR_MARKER, False)
    )
