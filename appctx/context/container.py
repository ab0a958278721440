"""
Application Context

Explicit container of named components. Definitions are registered up
front, instantiated together by :meth:`ApplicationContext.refresh` and
torn down by :meth:`ApplicationContext.close`. There is no global
instance; the context is created and passed around by whoever owns the
application lifecycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from appctx.context.exceptions import (
    ComponentCreationError,
    ComponentNotFoundError,
    ContainerUnavailable,
    ContextStateError,
    DuplicateComponentError,
    InvalidComponentError,
)
from appctx.observability.logging import get_logger
from appctx.observability.metrics import (
    increment_counter,
    set_gauge,
    track_duration,
)

logger = get_logger(__name__)

ComponentFactory = Callable[["ApplicationContext"], Any]


def validate_definition(name: str, factory: ComponentFactory) -> None:
    """
    Check a component name and factory before they are registered.

    Raises:
        InvalidComponentError: If the name is blank or the factory is not callable
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidComponentError("Component name must be a non-empty string")
    if not callable(factory):
        raise InvalidComponentError(f"factory for {name!r} must be callable")


class ContextState(str, Enum):
    """Lifecycle states of an application context."""

    CREATED = "created"
    REFRESHING = "refreshing"
    ACTIVE = "active"
    FAILED = "failed"
    CLOSED = "closed"


@dataclass
class ComponentDefinition:
    """
    Recipe for one named component.

    Attributes:
        name: Unique component name within the context
        factory: Callable receiving the context and returning the instance
        description: Free text shown by the components endpoint
        close: Optional teardown hook called with the instance on close
    """

    name: str
    factory: ComponentFactory
    description: str = ""
    close: Optional[Callable[[Any], None]] = None


class ApplicationContext:
    """
    Container of named components with an explicit lifecycle.

    CREATED -> (refresh) -> ACTIVE -> (close) -> CLOSED
    A factory failure during refresh moves the context to FAILED.

    Thread-safe: This implementation is not thread-safe. The context is
    built and refreshed from a single thread at startup.

    Example:
        >>> context = ApplicationContext("demo")
        >>> context.register_instance("greeting", "hello")
        >>> context.refresh()
        >>> context.component_names()
        ['greeting']
        >>> context.close()
    """

    def __init__(self, name: str = "application"):
        self.name = name
        self._definitions: Dict[str, ComponentDefinition] = {}
        self._instances: Dict[str, Any] = {}
        self._state = ContextState.CREATED

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        name: str,
        factory: ComponentFactory,
        description: str = "",
        close: Optional[Callable[[Any], None]] = None,
    ) -> ComponentDefinition:
        """
        Register a component definition.

        Args:
            name: Component name (e.g., 'helloController')
            factory: Callable building the component from the context
            description: Optional human readable description
            close: Optional teardown hook

        Returns:
            The stored definition

        Raises:
            InvalidComponentError: If the name is empty or the factory is
                not callable (a ValueError and a TypeError)
            DuplicateComponentError: If the name is already registered
            ContextStateError: If the context was already refreshed
        """
        validate_definition(name, factory)
        if self._state is not ContextState.CREATED:
            raise ContextStateError(
                f"Cannot register {name!r}: context '{self.name}' is {self._state.value}"
            )
        if name in self._definitions:
            raise DuplicateComponentError(name)

        definition = ComponentDefinition(
            name=name, factory=factory, description=description, close=close
        )
        self._definitions[name] = definition
        logger.debug("component_registered", context=self.name, component=name)
        return definition

    def register_instance(
        self, name: str, instance: Any, description: str = ""
    ) -> ComponentDefinition:
        """Register an already constructed object under ``name``."""
        return self.register(name, lambda _context: instance, description)

    def component(
        self, name: str, description: str = ""
    ) -> Callable[[ComponentFactory], ComponentFactory]:
        """
        Decorator form of :meth:`register`.

        Example:
            >>> @context.component("clock")
            ... def clock(context):
            ...     return SystemClock()
        """

        def decorator(factory: ComponentFactory) -> ComponentFactory:
            self.register(name, factory, description)
            return factory

        return decorator

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> ContextState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is ContextState.ACTIVE

    def refresh(self) -> None:
        """
        Instantiate every definition in registration order.

        Raises:
            ContextStateError: If the context was refreshed or closed before
            ComponentCreationError: If a factory raises; components created
                so far are torn down and the context ends up FAILED
        """
        if self._state is not ContextState.CREATED:
            raise ContextStateError(
                f"Context '{self.name}' cannot be refreshed from state {self._state.value}"
            )

        self._state = ContextState.REFRESHING
        with track_duration("context_refresh_seconds"):
            for definition in self._definitions.values():
                try:
                    instance = definition.factory(self)
                except Exception as exc:
                    logger.error(
                        "component_creation_failed",
                        context=self.name,
                        component=definition.name,
                        error=str(exc),
                    )
                    self._destroy_instances()
                    self._state = ContextState.FAILED
                    increment_counter("context_events_total", labels={"event": "failed"})
                    raise ComponentCreationError(
                        f"Error creating component {definition.name!r}: {exc}",
                        component_name=definition.name,
                    ) from exc
                except BaseException:
                    # interrupted: release what exists, then let it propagate
                    self._destroy_instances()
                    self._state = ContextState.FAILED
                    raise
                self._instances[definition.name] = instance
                logger.debug(
                    "component_created",
                    context=self.name,
                    component=definition.name,
                    type=type(instance).__name__,
                )

        self._state = ContextState.ACTIVE
        set_gauge("components_registered", len(self._instances))
        increment_counter("context_events_total", labels={"event": "refreshed"})
        logger.info(
            "context_refreshed", context=self.name, components=len(self._instances)
        )

    def close(self) -> None:
        """
        Tear down created components in reverse creation order.

        Errors raised by teardown hooks are logged and do not stop the
        remaining hooks. Closing twice is a no-op.
        """
        if self._state is ContextState.CLOSED:
            return
        self._destroy_instances()
        self._state = ContextState.CLOSED
        set_gauge("components_registered", 0)
        increment_counter("context_events_total", labels={"event": "closed"})
        logger.info("context_closed", context=self.name)

    def _destroy_instances(self) -> None:
        for name in reversed(list(self._instances)):
            instance = self._instances.pop(name)
            hook = self._definitions[name].close
            if hook is None:
                continue
            try:
                hook(instance)
            except Exception as exc:
                logger.warning(
                    "component_close_failed",
                    context=self.name,
                    component=name,
                    error=str(exc),
                )

    def __enter__(self) -> "ApplicationContext":
        if self._state is ContextState.CREATED:
            self.refresh()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _require_available(self) -> None:
        if self._state is not ContextState.ACTIVE:
            raise ContainerUnavailable(
                f"Application context '{self.name}' is not active "
                f"(state={self._state.value})",
                context_name=self.name,
                state=self._state.value,
            )

    def get(self, name: str) -> Any:
        """
        Return the instance registered under ``name``.

        Factories running inside :meth:`refresh` may look up components
        created before them.

        Raises:
            ContainerUnavailable: If the context is not active
            ComponentNotFoundError: If no such component exists
        """
        if self._state is ContextState.REFRESHING:
            if name in self._instances:
                return self._instances[name]
            if name in self._definitions:
                raise ContextStateError(
                    f"Component {name!r} is requested before it has been created"
                )
            raise ComponentNotFoundError(name)

        self._require_available()
        try:
            return self._instances[name]
        except KeyError:
            raise ComponentNotFoundError(name) from None

    def contains(self, name: str) -> bool:
        """Check whether a definition with ``name`` is registered."""
        return name in self._definitions

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def component_names(self) -> List[str]:
        """
        List the names of all registered components.

        Returned in registration order; callers needing a stable order
        must sort it themselves.

        Raises:
            ContainerUnavailable: If the context is not active
        """
        self._require_available()
        return list(self._instances)

    def describe(self) -> List[Dict[str, str]]:
        """
        Describe every component as ``{"name", "type", "description"}``.

        Raises:
            ContainerUnavailable: If the context is not active
        """
        self._require_available()
        return [
            {
                "name": name,
                "type": f"{type(instance).__module__}.{type(instance).__qualname__}",
                "description": self._definitions[name].description,
            }
            for name, instance in self._instances.items()
        ]

    def __repr__(self) -> str:
        return (
            f"ApplicationContext(name={self.name!r}, state={self._state.value}, "
            f"components={len(self._definitions)})"
        )
