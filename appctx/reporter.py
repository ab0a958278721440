"""
Registry reporter.

Prints the names of every component in an application context, sorted,
under a single header line. Runs once at startup as a command-line
runner.
"""

from __future__ import annotations

import sys
from typing import IO, Iterable, List, Optional, Protocol, Sequence

from appctx.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_HEADER = "Let's inspect the components provided by the application context:"


class ComponentNameSource(Protocol):
    """Anything that can list the names of its registered components."""

    def component_names(self) -> Sequence[str]:
        ...


def format_listing(names: Iterable[str], header: str = DEFAULT_HEADER) -> List[str]:
    """
    Build the report lines: the header followed by the names in sorted order.

    Sorting uses plain ``str`` ordering (code points, case-sensitive), so
    ``"Apple"`` sorts before ``"banana"``. Duplicates are kept.

    Example:
        >>> format_listing(["zebra", "Apple", "banana"], header="Components:")
        ['Components:', 'Apple', 'banana', 'zebra']
    """
    ordered = sorted(names)
    return [header.replace("{count}", str(len(ordered)))] + ordered


class RegistryReporter:
    """
    Writes the sorted component listing of a context to a text stream.

    Args:
        context: Source of component names, usually an ApplicationContext
        stream: Output sink; ``sys.stdout`` at report time when omitted
        header: First line of the report. ``{count}`` is replaced by the
            number of names.
    """

    def __init__(
        self,
        context: ComponentNameSource,
        stream: Optional[IO[str]] = None,
        header: str = DEFAULT_HEADER,
    ):
        self.context = context
        self.stream = stream
        self.header = header

    def report(self) -> List[str]:
        """
        Print the listing and return the lines written.

        Raises:
            ContainerUnavailable: If the context cannot list its components.
                Nothing is written in that case.
        """
        # fetch before writing so a failure never leaves a partial listing
        names = list(self.context.component_names())
        lines = format_listing(names, self.header)

        stream = self.stream if self.stream is not None else sys.stdout
        for line in lines:
            stream.write(line + "\n")
        stream.flush()

        logger.info("component_report_written", components=len(names))
        return lines

    def run(self, args: Sequence[str] = ()) -> None:
        """Command-line runner entry point."""
        self.report()


__all__ = ["DEFAULT_HEADER", "RegistryReporter", "format_listing"]
