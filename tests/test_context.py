from typing import Annotated

import pytest

from sample_components.another_component import AnotherComponent
from sample_components.constants import Constants
from sample_components.some_component import SomeComponent
from sample_components.yet_one_more_component import YetOneMoreComponent
from sprig.context import ApplicationContext
from sprig.errors import (
    BeanNotFoundError,
    CyclicDependencyError,
    DependencyError,
    IllegalTypeError,
    UnableToCreateBeanError,
    UnmappableStringError,
)
from sprig.markers import Autowired, MultiValue, Value, component


@pytest.fixture
def ctx(monkeypatch):
    monkeypatch.setenv("HOME", "/home/arthur")
    monkeypatch.delenv("number", raising=False)
    monkeypatch.delenv("numbers", raising=False)
    return ApplicationContext("sample_components", constants=Constants)


def test_get_bean_returns_singleton(ctx):
    assert ctx.get_bean(SomeComponent) is ctx.get_bean(SomeComponent)
    assert isinstance(ctx.get_bean(SomeComponent), SomeComponent)


def test_cyclic_dependencies_raise():
    from cyclic_components import components

    components.constructed.clear()

    with pytest.raises(CyclicDependencyError, match="Cyclic dependencies discovered"):
        ApplicationContext("cyclic_components")

    assert components.constructed == []


def test_get_bean_by_name(ctx):
    bean = ctx.get_bean_by_name("SomeComponent")

    assert bean is not None
    assert bean is ctx.get_bean(SomeComponent)


def test_get_beans(ctx):
    beans = ctx.get_beans()

    assert len(beans) == 3
    assert set(beans) == {SomeComponent, AnotherComponent, YetOneMoreComponent}
    with pytest.raises(TypeError):
        beans[SomeComponent] = None


def test_unknown_beans(ctx):
    assert ctx.get_bean(Exception) is None
    assert ctx.get_bean_by_name("Exception") is None
    assert Exception not in ctx
    with pytest.raises(BeanNotFoundError, match="No bean found for 'Exception'"):
        ctx["Exception"]
    with pytest.raises(KeyError):
        ctx[Exception]


def test_lookup_by_item(ctx):
    assert ctx[SomeComponent] is ctx["SomeComponent"]
    assert SomeComponent in ctx
    assert "SomeComponent" in ctx
    assert len(ctx) == 3
    assert set(ctx) == {SomeComponent, AnotherComponent, YetOneMoreComponent}


def test_autowired_field(ctx):
    some_component = ctx.get_bean(YetOneMoreComponent).some_component

    assert some_component is not None
    assert some_component is ctx.get_bean(SomeComponent)


def test_autowired_constructor(ctx):
    another_component = ctx.get_bean(SomeComponent).another_component

    assert another_component is not None
    assert another_component is ctx.get_bean(AnotherComponent)


def test_value_string(ctx):
    assert ctx.get_bean(AnotherComponent).home_directory == "/home/arthur"


def test_value_integer(ctx):
    assert ctx.get_bean(AnotherComponent).number == 1


def test_multi_value(ctx):
    assert ctx.get_bean(SomeComponent).numbers == [1, 2, 3]


def test_build_order_and_graph(ctx):
    order = list(ctx.build_order)

    assert order.index(AnotherComponent) < order.index(SomeComponent)
    assert order.index(SomeComponent) < order.index(YetOneMoreComponent)
    assert ctx.dependency_graph[YetOneMoreComponent] == frozenset({SomeComponent})
    assert ctx.dependency_graph[SomeComponent] == frozenset({AnotherComponent})


def test_environment_overrides_constants(monkeypatch):
    monkeypatch.setenv("HOME", "/home/arthur")
    monkeypatch.setenv("number", "42")

    ctx = ApplicationContext("sample_components", constants=Constants)

    assert ctx.get_bean(AnotherComponent).number == 42


def test_explicit_component_classes():
    class Printer:
        pass

    class Report:
        printer: Annotated[Printer, Autowired()]
        title: Annotated[str, Value("title")]
        pages: Annotated[tuple[int, ...], MultiValue("pages", delimiter=";")]

    ctx = ApplicationContext(
        [Report, Printer], environ={"title": "Quarterly", "pages": "1;2;3"}
    )

    report = ctx.get_bean(Report)
    assert report.printer is ctx.get_bean(Printer)
    assert report.title == "Quarterly"
    assert report.pages == (1, 2, 3)


def test_duplicate_simple_names_are_rejected():
    first = component(type("Twin", (), {}))
    second = component(type("Twin", (), {}))

    with pytest.raises(DependencyError, match="Duplicate bean name 'Twin'"):
        ApplicationContext([first, second])


def test_illegal_multi_value_type_aborts_construction():
    class Broken:
        errors: Annotated[tuple[Exception, ...], MultiValue("numbers")]

    with pytest.raises(IllegalTypeError):
        ApplicationContext([Broken], environ={"numbers": "1,2,3"})


def test_unmappable_multi_value_aborts_construction():
    class Broken:
        flags: Annotated[dict[str, bool], MultiValue("flags")]

    with pytest.raises(UnmappableStringError):
        ApplicationContext([Broken], environ={"flags": "true:1,false"})


def test_unsatisfiable_constructor_aborts_construction():
    class NeedsUrl:
        def __init__(self, url: str):
            self.url = url

    with pytest.raises(UnableToCreateBeanError):
        ApplicationContext([NeedsUrl], environ={})


def test_lenient_arrays():
    class Lenient:
        numbers: Annotated[tuple[int, ...], MultiValue("numbers")]

    ctx = ApplicationContext([Lenient], environ={"numbers": "1,x,3"}, lenient_arrays=True)

    assert ctx.get_bean(Lenient).numbers == (1, 0, 3)
