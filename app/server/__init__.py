"""
The hello application.

Wires the application's own components into a
:class:`appctx.BootApplication`:

* ``helloController`` - answers ``GET /`` on the embedded web server.
* ``commandLineRunner`` - prints the sorted names of every component in
  the application context once the context has been refreshed.
"""

from __future__ import annotations

from typing import Optional

from app.server.api import HelloController
from appctx import BootApplication, RegistryReporter
from appctx.application import APPLICATION_CONFIG
from appctx.config import AppConfig
from appctx.context import ApplicationContext


def _command_line_runner(context: ApplicationContext) -> RegistryReporter:
    config: AppConfig = context.get(APPLICATION_CONFIG)
    return RegistryReporter(context, header=config.report_header)


def create_app(
    name: Optional[str] = None, config: Optional[AppConfig] = None
) -> BootApplication:
    """
    Factory that returns the hello application, ready to ``run()``.

    Args:
        name: Optional application name overriding the configured one
        config: Optional pre-resolved configuration (loaded from
            environment and ``appctx.toml`` otherwise)
    """

    application = BootApplication(name=name, config=config)
    application.register(
        "helloController",
        lambda _context: HelloController(),
        description="Greeting served at GET /",
    )
    application.runner(
        "commandLineRunner", description="Prints the sorted component names"
    )(_command_line_runner)
    return application


__all__ = ["create_app"]
