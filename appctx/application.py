"""
Application bootstrap.

:class:`BootApplication` collects an application's component definitions,
builds and refreshes an :class:`ApplicationContext` with the framework
components added, runs the command-line runners once, then serves the
web application until the embedded server stops.

Usage:
    application = BootApplication("demo")

    @application.component("greeter")
    def greeter(context):
        return Greeter()

    @application.runner("commandLineRunner")
    def report(context):
        return RegistryReporter(context)

    application.run()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from appctx.api.server import EmbeddedServer, create_api
from appctx.config import AppConfig, load_config
from appctx.context import ApplicationContext, ContextError
from appctx.context.container import validate_definition
from appctx.observability.logging import (
    configure_logging,
    get_logger,
    set_correlation_id,
)
from appctx.observability.metrics import get_metrics_registry

logger = get_logger(__name__)

APPLICATION_CONFIG = "applicationConfig"
COMPONENT_METRICS = "componentMetrics"
WEB_APPLICATION = "webApplication"
EMBEDDED_SERVER = "embeddedServer"

ComponentFactory = Callable[[ApplicationContext], Any]


def _embedded_server(context: ApplicationContext) -> EmbeddedServer:
    config: AppConfig = context.get(APPLICATION_CONFIG)
    server = EmbeddedServer(
        context.get(WEB_APPLICATION),
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level,
    )
    # the port is claimed while the context refreshes, before any runner
    server.bind()
    return server


class RunnerError(RuntimeError):
    """Raised when a command-line runner fails with a non-context error."""

    def __init__(self, message: str, runner_name: str):
        super().__init__(message)
        self.runner_name = runner_name


@dataclass
class _PendingComponent:
    name: str
    factory: ComponentFactory
    description: str = ""
    close: Optional[Callable[[Any], None]] = None


class BootApplication:
    """
    Builds, runs and tears down an application context.

    Args:
        name: Application name; overrides ``config.name`` when given
        config: Resolved configuration. Loaded with ``load_config()``
            on first use when omitted.
    """

    def __init__(self, name: Optional[str] = None, config: Optional[AppConfig] = None):
        self._name = name
        self._config = config
        self._components: List[_PendingComponent] = []
        self._runner_names: List[str] = []
        self.context: Optional[ApplicationContext] = None

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = load_config()
        if self._name and self._config.name != self._name:
            self._config = self._config.model_copy(update={"name": self._name})
        return self._config

    @property
    def name(self) -> str:
        return self._name or self.config.name

    @property
    def runner_names(self) -> List[str]:
        return sorted(self._runner_names)

    def register(
        self,
        name: str,
        factory: ComponentFactory,
        description: str = "",
        close: Optional[Callable[[Any], None]] = None,
    ) -> None:
        """
        Queue a component definition for the next context build.

        Raises:
            InvalidComponentError: If the name is blank or the factory
                is not callable
        """
        validate_definition(name, factory)
        self._components.append(_PendingComponent(name, factory, description, close))

    def component(
        self, name: str, description: str = ""
    ) -> Callable[[ComponentFactory], ComponentFactory]:
        """Decorator form of :meth:`register`."""

        def decorator(factory: ComponentFactory) -> ComponentFactory:
            self.register(name, factory, description)
            return factory

        return decorator

    def runner(
        self, name: str, description: str = ""
    ) -> Callable[[ComponentFactory], ComponentFactory]:
        """
        Register a command-line runner component.

        The factory must return an object with a ``run(args)`` method.
        Runners are called once, in name order, after the context has
        been refreshed.
        """

        def decorator(factory: ComponentFactory) -> ComponentFactory:
            self.register(name, factory, description or "Command-line runner")
            self._runner_names.append(name)
            return factory

        return decorator

    def build_context(self) -> ApplicationContext:
        """
        Create and refresh a context holding framework and user components.

        Raises:
            DuplicateComponentError: If a user component reuses a name
            ComponentCreationError: If any factory fails, including an
                embedded server that cannot bind its port
        """
        config = self.config
        context = ApplicationContext(config.name)
        self.context = context

        context.register_instance(
            APPLICATION_CONFIG, config, "Resolved application configuration"
        )
        context.register_instance(
            COMPONENT_METRICS, get_metrics_registry(), "Prometheus collector registry"
        )
        context.register(
            WEB_APPLICATION,
            lambda ctx: create_api(ctx, ctx.get(APPLICATION_CONFIG)),
            "FastAPI application",
        )
        if config.server.enabled:
            context.register(
                EMBEDDED_SERVER,
                _embedded_server,
                "uvicorn server for the web application",
                close=lambda server: server.close(),
            )

        for pending in self._components:
            context.register(
                pending.name, pending.factory, pending.description, pending.close
            )

        context.refresh()
        return context

    def call_runners(self, context: ApplicationContext, args: Sequence[str] = ()) -> None:
        """
        Invoke every registered runner once.

        Raises:
            ContextError: Propagated unchanged, e.g. ContainerUnavailable
            RunnerError: If a runner fails with any other exception
        """
        for name in self.runner_names:
            runner = context.get(name)
            logger.debug("runner_started", runner=name)
            try:
                runner.run(list(args))
            except ContextError:
                raise
            except Exception as exc:
                raise RunnerError(f"Runner {name!r} failed: {exc}", name) from exc

    def run(self, args: Sequence[str] = ()) -> ApplicationContext:
        """
        Start the application and block while the web server runs.

        The context is always closed before this method returns or
        raises; the closed context is returned for inspection.
        """
        config = self.config
        configure_logging(
            level=config.logging.level,
            format=config.logging.format,
            log_file=config.logging.file,
        )
        set_correlation_id()
        logger.info(
            "application_starting",
            application=config.name,
            server_enabled=config.server.enabled,
        )

        try:
            context = self.build_context()
        except BaseException as exc:
            if isinstance(exc, ContextError):
                logger.error(
                    "application_startup_failed", application=config.name, error=str(exc)
                )
            if self.context is not None:
                self.context.close()
            raise

        try:
            self.call_runners(context, args)
            logger.info("application_started", application=config.name)
            if config.server.enabled:
                context.get(EMBEDDED_SERVER).serve()
        except (ContextError, RunnerError) as exc:
            logger.error("application_startup_failed", application=config.name, error=str(exc))
            raise
        finally:
            context.close()
        return context


__all__ = [
    "APPLICATION_CONFIG",
    "COMPONENT_METRICS",
    "EMBEDDED_SERVER",
    "WEB_APPLICATION",
    "BootApplication",
    "RunnerError",
]
