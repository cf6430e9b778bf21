"""Discovery of component classes within a package."""

import importlib
import logging
import pkgutil
from types import ModuleType

from sprig.markers import is_component

__all__ = ["discover", "components_in_module", "is_component"]

logger = logging.getLogger(__name__)


def discover(namespace: str) -> list[type]:
    """Find every class tagged with ``@component`` in a package and its sub-packages.

    Modules are imported as a side effect. Classes are returned in module walk
    order, then in definition order; a class is reported only by the module
    defining it.

    Args:
        namespace: Dotted name of a package or module, e.g. ``"myapp.components"``.

    Returns:
        The component classes found.

    Raises:
        ModuleNotFoundError: If ``namespace`` cannot be imported.
    """
    root = importlib.import_module(namespace)
    components = components_in_module(root)

    if hasattr(root, "__path__"):
        for module_info in pkgutil.walk_packages(root.__path__, prefix=f"{root.__name__}."):
            module = importlib.import_module(module_info.name)
            components.extend(components_in_module(module))

    logger.debug(
        "Discovered %d components in %s: %s",
        len(components),
        namespace,
        [c.__qualname__ for c in components],
    )
    return components


def components_in_module(module: ModuleType) -> list[type]:
    return [
        value
        for value in vars(module).values()
        if is_component(value) and value.__module__ == module.__name__
    ]
