"""Handler layer for HTTP endpoints.

Handlers depend on services, not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .process_handler import ProcessHandler

__all__ = [
    "ProcessHandler",
]
