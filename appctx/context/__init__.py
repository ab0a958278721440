"""
Application context: the container of named components.

Components are registered on an :class:`ApplicationContext`, created
together by ``refresh()`` and released by ``close()``.
"""

from appctx.context.container import (
    ApplicationContext,
    ComponentDefinition,
    ContextState,
)
from appctx.context.exceptions import (
    ComponentCreationError,
    ComponentNotFoundError,
    ContainerUnavailable,
    ContextError,
    ContextStateError,
    DuplicateComponentError,
    InvalidComponentError,
)

__all__ = [
    "ApplicationContext",
    "ComponentDefinition",
    "ContextState",
    "ContextError",
    "ContainerUnavailable",
    "ContextStateError",
    "DuplicateComponentError",
    "InvalidComponentError",
    "ComponentNotFoundError",
    "ComponentCreationError",
]
