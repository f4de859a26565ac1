"""Remote credential resolution."""

from __future__ import annotations

from runecache.core.auth.resolvers import ENV_API_KEY, EnvKeyResolver, KeyResolver, StaticKeyResolver
from runecache.core.contracts.config import RemoteConfig
from runecache.core.contracts.exceptions import ConfigError

RESOLVERS: dict[str, type[KeyResolver]] = {
    "env": EnvKeyResolver,
    "key": StaticKeyResolver,
}


def create_key_resolver(config: RemoteConfig) -> KeyResolver:
    if config.auth not in RESOLVERS:
        raise ConfigError(f"Unknown auth mode: {config.auth}")
    if config.auth == "env":
        return EnvKeyResolver()
    return StaticKeyResolver(key=config.api_key or "")


__all__ = [
    "ENV_API_KEY",
    "RESOLVERS",
    "EnvKeyResolver",
    "KeyResolver",
    "StaticKeyResolver",
    "create_key_resolver",
]
