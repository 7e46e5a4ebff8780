"""Authentication and session lifecycle service.

Run with ``flask --app authsvc run`` or ``gunicorn 'authsvc:create_app()'``.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
