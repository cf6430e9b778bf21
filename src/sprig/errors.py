"""Exceptions raised while building an application context."""

__all__ = [
    "SprigError",
    "DependencyError",
    "CyclicDependencyError",
    "UnableToCreateBeanError",
    "UnableToSetValueError",
    "IllegalTypeError",
    "NoSuchVariableError",
    "UnmappableStringError",
    "ConversionError",
    "BeanNotFoundError",
]


class SprigError(Exception):
    """Base class for every error raised by the container."""

    pass


class DependencyError(SprigError):
    """Raised when the dependency graph of the managed components is malformed."""

    pass


class CyclicDependencyError(DependencyError):
    """Raised when managed components depend on each other in a cycle."""

    def __init__(self, cycle: list[type]):
        self.cycle = cycle
        super().__init__(
            "Cyclic dependencies discovered: "
            + " -> ".join(t.__qualname__ for t in cycle)
        )


class UnableToCreateBeanError(SprigError):
    """Raised when a bean's constructor cannot be selected or invoked."""

    pass


class UnableToSetValueError(SprigError):
    """Raised when a field of a bean cannot be assigned."""

    pass


class IllegalTypeError(SprigError):
    """Raised when a tagged field has a type the container cannot populate."""

    pass


class NoSuchVariableError(SprigError):
    """Raised when a variable is found neither in the environment nor in the constants."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Cannot find variable: {name}")


class UnmappableStringError(SprigError):
    """Raised when a multi-value entry cannot be split into a key and a value."""

    pass


class ConversionError(SprigError, ValueError):
    """Raised when a token cannot be parsed as its target scalar type."""

    def __init__(self, token: str, target: type):
        self.token = token
        self.target = target
        super().__init__(
            f"Cannot convert {token!r} to {getattr(target, '__name__', target)}"
        )


class BeanNotFoundError(SprigError, KeyError):
    """Raised when a bean is looked up with ``ctx[key]`` but is not managed."""

    def __str__(self):
        return str(self.args[0]) if self.args else ""
