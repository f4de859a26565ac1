"""API key resolvers for the remote data source."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

from runecache.core.contracts.exceptions import AuthenticationError

ENV_API_KEY = "SUPABASE_ANON_KEY"


class KeyResolver(ABC):
    @abstractmethod
    async def resolve(self) -> str:
        """Resolve and return the remote API key."""


class EnvKeyResolver(KeyResolver):
    def __init__(self, variable: str = ENV_API_KEY) -> None:
        self._variable = variable

    async def resolve(self) -> str:
        key = (os.getenv(self._variable) or "").strip()
        if not key:
            raise AuthenticationError(f"{self._variable} is not set or empty")
        return key


class StaticKeyResolver(KeyResolver):
    def __init__(self, *, key: str) -> None:
        self._key = key

    async def resolve(self) -> str:
        key = self._key.strip()
        if not key:
            raise AuthenticationError("Static API key is empty")
        return key
