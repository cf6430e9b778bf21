import random
from typing import Annotated, Optional

import pytest

from sprig.declarations import describe
from sprig.errors import CyclicDependencyError, DependencyError
from sprig.graph import DependencyGraph, build_dependency_graph, sort_types
from sprig.markers import Autowired, Value, constructor


class Database:
    pass


class Cache:
    pass


class Repository:
    database: Annotated[Database, Autowired()]
    cache: Annotated[Optional[Cache], Autowired]

    def __init__(self, database: Database):
        self.database = database


class Service:
    name: Annotated[str, Value("SERVICE_NAME")]
    unmanaged: Annotated[Exception, Autowired()]

    def __init__(self):
        pass

    @constructor
    def with_repository(cls, repository: Repository, retries: int = 3):
        return cls()

    @constructor
    def with_repository_and_cache(cls, repository: Repository, cache: Cache):
        return cls()


def _make_types(count: int) -> list[type]:
    return [type(f"Node{i}", (), {}) for i in range(count)]


def _random_dag(rng: random.Random, nodes: list[type]) -> DependencyGraph:
    graph = DependencyGraph()
    shuffled = list(nodes)
    rng.shuffle(shuffled)
    for index, node in enumerate(shuffled):
        graph.add_vertex(node)
        candidates = shuffled[:index]
        graph.add_dependencies(
            node, rng.sample(candidates, k=rng.randint(0, min(3, len(candidates))))
        )
    return graph


def _assert_dependencies_first(graph: DependencyGraph, order: list[type]):
    position = {vertex: index for index, vertex in enumerate(order)}
    assert set(order) == set(graph)
    assert len(order) == len(graph)
    for vertex in graph:
        for dependency in graph.dependencies_of(vertex):
            assert position[dependency] < position[vertex]


def test_graph_edges_from_fields_and_constructors():
    graph = build_dependency_graph(
        describe(t) for t in (Database, Cache, Repository, Service)
    )

    assert graph.as_dict() == {
        Database: frozenset(),
        Cache: frozenset(),
        Repository: frozenset({Database, Cache}),
        Service: frozenset({Repository, Cache}),
    }


def test_graph_ignores_types_outside_the_universe():
    graph = build_dependency_graph([describe(Repository), describe(Service)])

    assert graph.as_dict() == {
        Repository: frozenset(),
        Service: frozenset({Repository}),
    }


def test_sort_places_dependencies_first():
    graph = build_dependency_graph(
        describe(t) for t in (Service, Repository, Cache, Database)
    )

    order = sort_types(graph)

    _assert_dependencies_first(graph, order)
    assert order[-1] is Service


@pytest.mark.parametrize("seed", range(25))
def test_sort_random_acyclic_graphs(seed):
    rng = random.Random(seed)
    graph = _random_dag(rng, _make_types(rng.randint(1, 30)))

    _assert_dependencies_first(graph, graph.topological_order())


@pytest.mark.parametrize("seed", range(25))
def test_sort_random_cyclic_graphs(seed):
    rng = random.Random(seed)
    nodes = _make_types(rng.randint(2, 30))
    graph = _random_dag(rng, nodes)
    order = graph.topological_order()
    first, last = order[0], order[-1]
    graph.add_dependencies(first, [last])
    graph.add_dependencies(last, [first])

    with pytest.raises(CyclicDependencyError, match="Cyclic dependencies discovered"):
        graph.topological_order()


def test_sort_is_deterministic():
    nodes = _make_types(10)
    graph = _random_dag(random.Random(7), nodes)

    assert graph.topological_order() == graph.topological_order()


def test_self_dependency_is_a_cycle():
    (node,) = _make_types(1)
    graph = DependencyGraph()
    graph.add_dependencies(node, [node])

    with pytest.raises(CyclicDependencyError) as raised:
        graph.topological_order()

    assert raised.value.cycle == [node, node]


def test_cycle_is_reported():
    a, b, c = _make_types(3)
    graph = DependencyGraph()
    graph.add_dependencies(a, [b])
    graph.add_dependencies(b, [c])
    graph.add_dependencies(c, [a])

    with pytest.raises(CyclicDependencyError, match="Node0 -> Node1 -> Node2 -> Node0"):
        graph.topological_order()


def test_dependency_missing_from_graph_raises():
    a, b = _make_types(2)
    graph = DependencyGraph()
    graph.add_dependencies(a, [b])

    with pytest.raises(DependencyError, match="not a vertex of the dependency graph"):
        graph.topological_order()
