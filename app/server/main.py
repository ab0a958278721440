"""
Entrypoint for the hello application.

Loads ``.env``, builds the application and runs it: the component report
is printed to stdout, then the embedded web server keeps the process
alive until interrupted (or the process exits right away when the server
is disabled with ``APPCTX_SERVER_ENABLED=false``).
"""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from dotenv import load_dotenv

from app.server import create_app
from appctx import BootApplication, ContextError, RunnerError
from appctx.config import ConfigError


def bootstrap() -> BootApplication:
    """
    Return the configured hello application.

    Scripts and tests can call this function to obtain the application
    without starting it.
    """

    return create_app()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the application; return the process exit status."""

    load_dotenv()
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        bootstrap().run(args)
    except (ConfigError, ContextError, RunnerError) as exc:
        print(f"Application startup failed: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
