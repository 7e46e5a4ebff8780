"""Service layer public API.

This package exposes the building blocks of the service layer so callers can
import from :mod:`authsvc.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``authsvc.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Auth service (from ``authsvc.services.auth``)
    * :class:`AuthService`
"""

from __future__ import annotations

from authsvc.services._shared.base import BaseService, ServiceContext
from authsvc.services.auth.service import AuthService

__all__ = ["AuthService", "BaseService", "ServiceContext"]
