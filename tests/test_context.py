"""
Tests for the application context lifecycle and lookups.
"""

import pytest

from appctx.context import (
    ApplicationContext,
    ComponentCreationError,
    ComponentNotFoundError,
    ContainerUnavailable,
    ContextState,
    ContextStateError,
    DuplicateComponentError,
    InvalidComponentError,
)

pytestmark = pytest.mark.unit


def test_component_names_in_registration_order(context):
    context.refresh()

    assert context.component_names() == ["zebra", "Apple", "banana"]
    assert context.state is ContextState.ACTIVE


def test_names_unavailable_before_refresh(context):
    with pytest.raises(ContainerUnavailable):
        context.component_names()


@pytest.mark.parametrize("name", ["", "   ", None])
def test_register_rejects_blank_names(name):
    with pytest.raises(ValueError):
        ApplicationContext().register_instance(name, object())


def test_register_rejects_non_callable_factory():
    with pytest.raises(InvalidComponentError):
        ApplicationContext().register("clock", "not a factory")


def test_register_rejects_duplicates(context):
    with pytest.raises(DuplicateComponentError) as excinfo:
        context.register_instance("zebra", object())

    assert excinfo.value.component_name == "zebra"


def test_register_after_refresh_is_rejected(context):
    context.refresh()

    with pytest.raises(ContextStateError):
        context.register_instance("late", object())


def test_refresh_twice_is_rejected(context):
    context.refresh()

    with pytest.raises(ContextStateError):
        context.refresh()


def test_decorator_registers_factory():
    ctx = ApplicationContext()

    @ctx.component("greeting", description="says hi")
    def greeting(_context):
        return "hi"

    ctx.refresh()

    assert ctx.get("greeting") == "hi"
    assert ctx.describe() == [
        {"name": "greeting", "type": "builtins.str", "description": "says hi"}
    ]


def test_factories_see_earlier_components():
    ctx = ApplicationContext()
    ctx.register_instance("base", 20)
    ctx.register("derived", lambda c: c.get("base") + 1)

    ctx.refresh()

    assert ctx.get("derived") == 21


def test_factory_cannot_see_later_components():
    ctx = ApplicationContext()
    ctx.register("early", lambda c: c.get("late"))
    ctx.register_instance("late", 1)

    with pytest.raises(ComponentCreationError) as excinfo:
        ctx.refresh()

    assert isinstance(excinfo.value.__cause__, ContextStateError)


def test_get_unknown_component(context):
    context.refresh()

    with pytest.raises(ComponentNotFoundError):
        context.get("missing")


def test_failed_refresh_tears_down_and_marks_failed():
    closed = []
    ctx = ApplicationContext()
    ctx.register("first", lambda c: "first", close=closed.append)

    def broken(_context):
        raise RuntimeError("boom")

    ctx.register("broken", broken)

    with pytest.raises(ComponentCreationError) as excinfo:
        ctx.refresh()

    assert excinfo.value.component_name == "broken"
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert closed == ["first"]
    assert ctx.state is ContextState.FAILED
    with pytest.raises(ContainerUnavailable) as unavailable:
        ctx.component_names()
    assert unavailable.value.state == "failed"


def test_interrupted_refresh_tears_down_and_marks_failed():
    closed = []
    ctx = ApplicationContext()
    ctx.register("first", lambda c: "first", close=closed.append)

    def interrupted(_context):
        raise KeyboardInterrupt

    ctx.register("interrupted", interrupted)

    with pytest.raises(KeyboardInterrupt):
        ctx.refresh()

    assert closed == ["first"]
    assert ctx.state is ContextState.FAILED


def test_close_runs_hooks_in_reverse_order():
    closed = []
    ctx = ApplicationContext()
    for name in ("a", "b", "c"):
        ctx.register(name, lambda c, n=name: n, close=closed.append)

    ctx.refresh()
    ctx.close()
    ctx.close()

    assert closed == ["c", "b", "a"]
    assert ctx.state is ContextState.CLOSED


def test_close_continues_after_failing_hook():
    closed = []

    def failing(_instance):
        raise RuntimeError("cannot close")

    ctx = ApplicationContext()
    ctx.register("a", lambda c: "a", close=closed.append)
    ctx.register("b", lambda c: "b", close=failing)

    ctx.refresh()
    ctx.close()

    assert closed == ["a"]
    assert ctx.state is ContextState.CLOSED


def test_context_manager_refreshes_and_closes(context):
    with context as ctx:
        assert ctx.is_active
        assert sorted(ctx.component_names()) == ["Apple", "banana", "zebra"]

    assert context.state is ContextState.CLOSED


def test_contains(context):
    assert "zebra" in context
    assert "Zebra" not in context
    assert 42 not in context
