"""HTTP API served by the application context's embedded web server."""

from appctx.api.server import EmbeddedServer, WebServerStartupError, create_api

__all__ = ["EmbeddedServer", "WebServerStartupError", "create_api"]
