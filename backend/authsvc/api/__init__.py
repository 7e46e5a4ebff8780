"""HTTP API: mounts each versioned blueprint registry under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def mount(app: Flask, prefix: str, registry: Iterable[tuple[Blueprint, str]]) -> None:
    """Register ``(blueprint, relative_prefix)`` pairs below ``prefix``.

    An empty relative prefix mounts the blueprint at ``prefix`` itself.
    """
    root = "/" + prefix.strip("/")
    for bp, rel in registry:
        rel = rel.strip("/")
        app.register_blueprint(bp, url_prefix=f"{root}/{rel}" if rel else root)


def init_app(app: Flask) -> None:
    from authsvc.api import v1

    base = app.config.get("API_BASE_PREFIX", "/api").rstrip("/")
    mount(app, f"{base}/{v1.API_VERSION}", v1.REGISTRY)


__all__ = ["init_app", "mount"]
