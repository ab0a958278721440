"""Hello application built on the appctx application context."""

__version__ = "0.1.0"
