"""
Tests for the registry reporter.
"""

import io
from collections import Counter

import pytest

from appctx.context import ApplicationContext, ContainerUnavailable
from appctx.reporter import DEFAULT_HEADER, RegistryReporter, format_listing

pytestmark = pytest.mark.unit


class StaticNames:
    """Name source returning a fixed list, duplicates included."""

    def __init__(self, names):
        self.names = list(names)

    def component_names(self):
        return list(self.names)


NAME_SETS = [
    [],
    ["only"],
    ["zebra", "Apple", "banana"],
    ["b", "a", "B", "A", "_", "1", "a"],
    ["webApplication", "applicationConfig", "spring.http-HttpProperties", "Ω", "é", "e"],
]


def _report(names, header=DEFAULT_HEADER):
    stream = io.StringIO()
    RegistryReporter(StaticNames(names), stream=stream, header=header).report()
    return stream.getvalue()


@pytest.mark.parametrize("names", NAME_SETS)
def test_listing_preserves_every_name_and_count(names):
    lines = _report(names).splitlines()

    assert lines[0] == DEFAULT_HEADER
    assert Counter(lines[1:]) == Counter(names)


@pytest.mark.parametrize("names", NAME_SETS)
def test_listing_is_non_decreasing(names):
    printed = _report(names).splitlines()[1:]

    assert all(a <= b for a, b in zip(printed, printed[1:]))


def test_report_is_idempotent():
    names = ["zebra", "Apple", "banana", "apple"]

    assert _report(names) == _report(names)


def test_empty_input_prints_header_only():
    assert _report([]) == DEFAULT_HEADER + "\n"


def test_sorts_uppercase_before_lowercase():
    lines = _report(["zebra", "Apple", "banana"]).splitlines()

    assert lines[1:] == ["Apple", "banana", "zebra"]


def test_duplicates_are_not_removed():
    lines = _report(["b", "a", "b"]).splitlines()

    assert lines[1:] == ["a", "b", "b"]


def test_unavailable_container_writes_nothing():
    context = ApplicationContext("not-started")
    context.register_instance("one", 1)
    stream = io.StringIO()

    with pytest.raises(ContainerUnavailable) as excinfo:
        RegistryReporter(context, stream=stream).report()

    assert stream.getvalue() == ""
    assert excinfo.value.state == "created"
    assert excinfo.value.context_name == "not-started"


def test_closed_container_is_unavailable(context):
    context.refresh()
    context.close()
    stream = io.StringIO()

    with pytest.raises(ContainerUnavailable):
        RegistryReporter(context, stream=stream).report()

    assert stream.getvalue() == ""


def test_report_reads_from_refreshed_context(context):
    context.refresh()
    stream = io.StringIO()

    lines = RegistryReporter(context, stream=stream, header="Components:").report()

    assert lines == ["Components:", "Apple", "banana", "zebra"]
    assert stream.getvalue() == "Components:\nApple\nbanana\nzebra\n"


def test_header_count_placeholder():
    lines = format_listing(["b", "a"], header="Listing {count} registered components:")

    assert lines == ["Listing 2 registered components:", "a", "b"]


def test_header_with_other_braces_is_left_alone():
    assert format_listing([], header="{not a placeholder}") == ["{not a placeholder}"]


def test_defaults_to_stdout(capsys):
    reporter = RegistryReporter(StaticNames(["b", "a"]), header="Names:")

    reporter.run([])

    assert capsys.readouterr().out == "Names:\na\nb\n"
