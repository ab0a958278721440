"""
appctx: a small application context with a startup component report.

Register named components, refresh the context, and let the
:class:`RegistryReporter` print what ended up inside it.
"""

from appctx.application import BootApplication, RunnerError
from appctx.context import (
    ApplicationContext,
    ContainerUnavailable,
    ContextError,
)
from appctx.reporter import DEFAULT_HEADER, RegistryReporter, format_listing

__version__ = "0.1.0"

__all__ = [
    "ApplicationContext",
    "BootApplication",
    "ContainerUnavailable",
    "ContextError",
    "DEFAULT_HEADER",
    "RegistryReporter",
    "RunnerError",
    "format_listing",
    "__version__",
]
