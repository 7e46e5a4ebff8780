"""Factory for :class:`authsvc.models.user.User`."""

from __future__ import annotations

from functools import lru_cache

import factory

from authsvc.core.security import hash_password
from authsvc.models.user import User
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"


@lru_cache(maxsize=32)
def _hashed(password: str) -> str:
    # scrypt is slow; most tests share one password.
    return hash_password(password)


class UserFactory(BaseFactory):
    """Active user whose password is ``DEFAULT_PASSWORD`` unless overridden."""

    class Meta:
        model = User

    class Params:
        password = DEFAULT_PASSWORD

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    name = factory.Faker("name")
    is_active = True
    password_hash = factory.LazyAttribute(lambda o: _hashed(o.password))
