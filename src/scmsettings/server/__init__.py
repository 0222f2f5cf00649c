"""SCM hosting settings HTTP server.

FastAPI-based read-only diagnostics for the effective hosting settings.
"""

from .app import create_app, run_server

__all__ = ["create_app", "run_server"]
