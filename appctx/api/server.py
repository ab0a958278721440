"""FastAPI application and embedded server for appctx.

This module provides HTTP endpoints for:
- The greeting of the application's ``helloController`` (/)
- Health check (/health)
- Component listing, the same data the startup report prints (/components)
- Prometheus metrics (/metrics)

The FastAPI app is itself a component of the application context it
serves; :class:`EmbeddedServer` runs it with uvicorn inside the current
process.

Example Components Response:
    {
        "context": "application",
        "components": [
            {
                "name": "applicationConfig",
                "type": "appctx.config.AppConfig",
                "description": "Resolved application configuration"
            }
        ]
    }
"""

import socket
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from appctx.config import AppConfig
from appctx.context import ApplicationContext, ContainerUnavailable, ContextError
from appctx.observability.logging import get_logger
from appctx.observability.metrics import (
    get_metrics_content_type,
    get_metrics_output,
)

logger = get_logger(__name__)

HELLO_CONTROLLER = "helloController"


def create_api(
    context: ApplicationContext, config: Optional[AppConfig] = None
) -> FastAPI:
    """
    Build the FastAPI app serving ``context``.

    Routes resolve components lazily, so the app can be created by a
    component factory while the context is still refreshing.
    """
    config = config or AppConfig()
    started_at = datetime.now(timezone.utc)

    api = FastAPI(
        title=config.name,
        description="Embedded web server of the application context",
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
    )

    @api.get("/")
    async def root() -> Response:
        """Greeting from the hello controller, or service metadata."""
        if context.is_active and HELLO_CONTROLLER in context:
            controller = context.get(HELLO_CONTROLLER)
            return PlainTextResponse(controller.index())
        return JSONResponse(
            {
                "service": config.name,
                "status": "running" if context.is_active else context.state.value,
                "endpoints": {
                    "health": "/health",
                    "components": "/components",
                    "metrics": "/metrics",
                },
            }
        )

    @api.get("/health")
    async def health() -> JSONResponse:
        """
        Context health.

        Response Codes:
            200: Context is active
            503: Context is not refreshed, failed or closed
        """
        uptime = (datetime.now(timezone.utc) - started_at).total_seconds()
        if not context.is_active:
            return JSONResponse(
                content={
                    "status": "DOWN",
                    "state": context.state.value,
                    "uptime_seconds": uptime,
                },
                status_code=503,
            )
        return JSONResponse(
            content={
                "status": "UP",
                "state": context.state.value,
                "components": len(context.component_names()),
                "uptime_seconds": uptime,
            }
        )

    @api.get("/components")
    async def components() -> JSONResponse:
        """Sorted description of every component in the context."""
        try:
            described = context.describe()
        except ContainerUnavailable as exc:
            logger.warning("components_endpoint_unavailable", error=str(exc))
            return JSONResponse(
                content={"error": str(exc), "state": exc.state}, status_code=503
            )
        body: Dict[str, Any] = {
            "context": context.name,
            "components": sorted(described, key=lambda item: item["name"]),
        }
        return JSONResponse(content=body)

    @api.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics."""
        return Response(
            content=get_metrics_output(), media_type=get_metrics_content_type()
        )

    return api


class WebServerStartupError(ContextError):
    """Raised when the embedded server cannot bind its port or start serving."""

    def __init__(self, message: str, host: str, port: int):
        super().__init__(message)
        self.host = host
        self.port = port


class EmbeddedServer:
    """
    uvicorn server running a FastAPI app in the current process.

    ``bind()`` claims the listening socket; the application context calls
    it while creating the component, so a taken port fails startup before
    any runner has printed anything. ``serve()`` blocks until the server
    exits; ``stop()`` asks it to exit and may be called from another
    thread or a signal handler.
    """

    def __init__(
        self,
        app: FastAPI,
        host: str = "127.0.0.1",
        port: int = 8080,
        log_level: str = "info",
    ):
        self.app = app
        self.host = host
        self.port = port
        self._socket: Optional[socket.socket] = None
        self._stop_requested = False
        self._server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=host,
                port=port,
                log_level=log_level.lower(),
                # uvicorn must not replace our structlog handlers
                log_config=None,
            )
        )

    @property
    def started(self) -> bool:
        return self._server.started

    @property
    def bound(self) -> bool:
        return self._socket is not None

    def bind(self) -> None:
        """
        Bind the listening socket.

        Raises:
            WebServerStartupError: If the address cannot be bound
        """
        if self._socket is not None:
            return
        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
        except OSError as exc:
            sock.close()
            logger.error(
                "embedded_server_bind_failed",
                host=self.host,
                port=self.port,
                error=str(exc),
            )
            raise WebServerStartupError(
                f"Embedded server cannot bind {self.host}:{self.port}: {exc}",
                host=self.host,
                port=self.port,
            ) from exc
        sock.set_inheritable(True)
        self._socket = sock
        self.port = sock.getsockname()[1]
        logger.info("embedded_server_bound", host=self.host, port=self.port)

    def serve(self) -> None:
        """
        Run the server until it is stopped or interrupted.

        Raises:
            WebServerStartupError: If uvicorn gives up before serving
        """
        self.bind()
        logger.info("embedded_server_starting", host=self.host, port=self.port)
        try:
            self._server.run(sockets=[self._socket])
        except SystemExit as exc:
            # uvicorn exits the process on startup failures
            raise WebServerStartupError(
                f"Embedded server on {self.host}:{self.port} failed to start "
                f"(exit status {exc.code})",
                host=self.host,
                port=self.port,
            ) from exc
        if not self._server.started and not self._stop_requested:
            raise WebServerStartupError(
                f"Embedded server on {self.host}:{self.port} did not start",
                host=self.host,
                port=self.port,
            )
        logger.info("embedded_server_stopped", host=self.host, port=self.port)

    def stop(self) -> None:
        self._stop_requested = True
        self._server.should_exit = True

    def close(self) -> None:
        """Stop the server and release the listening socket."""
        self.stop()
        if self._socket is not None:
            self._socket.close()
            self._socket = None


__all__ = ["EmbeddedServer", "HELLO_CONTROLLER", "WebServerStartupError", "create_api"]
