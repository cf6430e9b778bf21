"""Dependency graph of managed components and its cycle-safe topological sort.

An edge ``X -> Y`` means that ``X`` requires ``Y`` to exist first, because ``Y``
is the type of one of ``X``'s constructor parameters or ``Autowired`` fields.
"""

import logging
from collections.abc import Iterable
from typing import Iterator

from sprig.domain import ManagedType
from sprig.errors import CyclicDependencyError, DependencyError
from sprig.markers import Autowired

__all__ = ["DependencyGraph", "build_dependency_graph", "sort_types"]

logger = logging.getLogger(__name__)


def _sort_key(t: type) -> str:
    return f"{t.__module__}.{t.__qualname__}"


class DependencyGraph:
    """
    Directed graph of dependencies between managed types.

    Vertices are kept in insertion order, which makes the topological order
    reproducible for a fixed discovery order.
    """

    def __init__(self):
        self._dependencies: dict[type, set[type]] = {}

    def add_vertex(self, vertex: type):
        self._dependencies.setdefault(vertex, set())

    def add_dependencies(self, dependee: type, dependencies: Iterable[type]):
        """
        Add one or more dependencies to the graph for a given dependee vertex.

        Args:
            dependee: The type whose dependencies are being registered.
            dependencies: Types the dependee depends on.
        """
        self._dependencies.setdefault(dependee, set()).update(dependencies)

    def dependencies_of(self, vertex: type) -> frozenset[type]:
        return frozenset(self._dependencies[vertex])

    def as_dict(self) -> dict[type, frozenset[type]]:
        return {vertex: frozenset(deps) for vertex, deps in self._dependencies.items()}

    def __contains__(self, vertex: type) -> bool:
        return vertex in self._dependencies

    def __iter__(self) -> Iterator[type]:
        return iter(self._dependencies)

    def __len__(self) -> int:
        return len(self._dependencies)

    def topological_order(self) -> list[type]:
        """
        Order the vertices so that every vertex follows all of its dependencies.

        Performs a depth-first traversal from each unfinished vertex and emits
        vertices in post-order.

        Returns:
            The vertices, dependencies first.

        Raises:
            CyclicDependencyError: If the graph contains a cycle.
            DependencyError: If a dependency is not itself a vertex of the graph.
        """
        finished: set[type] = set()
        order: list[type] = []

        for vertex in self._dependencies:
            if vertex not in finished:
                self._visit(vertex, finished, [], order)

        return order

    def _visit(self, vertex: type, finished: set[type], path: list[type], order: list[type]):
        if vertex in path:
            raise CyclicDependencyError(path[path.index(vertex):] + [vertex])
        try:
            neighbours = self._dependencies[vertex]
        except KeyError:
            raise DependencyError(
                f"{vertex.__qualname__} is a dependency of {path[-1].__qualname__} "
                "but not a vertex of the dependency graph"
            ) from None

        path.append(vertex)
        for neighbour in sorted(neighbours, key=_sort_key):
            if neighbour not in finished:
                self._visit(neighbour, finished, path, order)
        path.pop()

        finished.add(vertex)
        order.append(vertex)


def build_dependency_graph(managed_types: Iterable[ManagedType]) -> DependencyGraph:
    """
    Construct the graph mapping each managed type to the managed types it depends on.

    Only ``Autowired`` fields and constructors with at least one parameter
    contribute edges; types outside ``managed_types`` are ignored.

    Args:
        managed_types: The complete universe of managed types.

    Returns:
        A dependency graph with one vertex per managed type.
    """
    managed_types = list(managed_types)
    universe = {managed.type_ for managed in managed_types}
    graph = DependencyGraph()

    for managed in managed_types:
        graph.add_vertex(managed.type_)
        graph.add_dependencies(
            managed.type_,
            (
                field.declared_type
                for field in managed.fields_tagged(Autowired)
                if _is_managed(field.declared_type, universe)
            ),
        )
        for constructor in managed.constructors:
            if len(constructor.parameters) == 0:
                continue
            graph.add_dependencies(
                managed.type_,
                (
                    parameter.declared_type
                    for parameter in constructor.parameters
                    if _is_managed(parameter.declared_type, universe)
                ),
            )

    logger.debug(
        "Dependency graph: %s",
        {t.__name__: sorted(d.__name__ for d in deps) for t, deps in graph.as_dict().items()},
    )
    return graph


def sort_types(graph: DependencyGraph) -> list[type]:
    """Topologically sort ``graph``; see :meth:`DependencyGraph.topological_order`."""
    return graph.topological_order()


def _is_managed(declared_type, universe: set[type]) -> bool:
    try:
        return declared_type in universe
    except TypeError:
        return False
