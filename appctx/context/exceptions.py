"""
Application context - Custom Exceptions

Exception hierarchy raised by :class:`appctx.context.ApplicationContext`.
Every error derives from :class:`ContextError` so callers at the process
entry point can catch the whole family when they only need to abort
startup with a diagnostic.
"""

from __future__ import annotations

from typing import Optional


class ContextError(RuntimeError):
    """
    Base exception for all application context errors.

    Use this for unexpected/unclassified errors that don't fit
    the more specific exception types below.
    """

    pass


class ContainerUnavailable(ContextError):
    """
    Raised when the container cannot supply its components.

    The context is either not refreshed yet, failed during refresh,
    or has already been closed. Nothing is retried; the caller is
    expected to abort.

    Attributes:
        context_name: Name of the context that was queried
        state: Lifecycle state of the context at the time of the call

    Example:
        >>> raise ContainerUnavailable(
        ...     "Application context 'application' is not active (state=created)",
        ...     context_name="application",
        ...     state="created",
        ... )
    """

    def __init__(
        self,
        message: str,
        context_name: Optional[str] = None,
        state: Optional[str] = None,
    ):
        super().__init__(message)
        self.context_name = context_name
        self.state = state


class ContextStateError(ContextError):
    """Raised on a lifecycle operation the current state does not allow."""


class DuplicateComponentError(ContextError, ValueError):
    """Raised when a component name is registered twice."""

    def __init__(self, component_name: str):
        super().__init__(f"Component already registered: {component_name}")
        self.component_name = component_name


class InvalidComponentError(ContextError, ValueError, TypeError):
    """Raised when a component definition has a blank name or a non-callable factory."""


class ComponentNotFoundError(ContextError, KeyError):
    """Raised when looking up a component name that was never registered."""

    def __init__(self, component_name: str):
        super().__init__(component_name)
        self.component_name = component_name

    def __str__(self) -> str:
        return f"No component named {self.component_name!r}"


class ComponentCreationError(ContextError):
    """
    Raised when a component factory fails during refresh.

    The original exception is chained as ``__cause__``.

    Attributes:
        component_name: Name of the component whose factory failed
    """

    def __init__(self, message: str, component_name: str):
        super().__init__(message)
        self.component_name = component_name


__all__ = [
    "ContextError",
    "ContainerUnavailable",
    "ContextStateError",
    "DuplicateComponentError",
    "InvalidComponentError",
    "ComponentNotFoundError",
    "ComponentCreationError",
]
