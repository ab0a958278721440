"""
Controllers of the hello application.

Controllers are plain objects registered as components; the embedded
web API looks them up by name.
"""

from __future__ import annotations

GREETING = "Greetings from the application context!"


class HelloController:
    """Answers the root path of the embedded web server."""

    def __init__(self, greeting: str = GREETING):
        self.greeting = greeting

    def index(self) -> str:
        return self.greeting


__all__ = ["GREETING", "HelloController"]
