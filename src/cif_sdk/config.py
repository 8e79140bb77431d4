"""Client configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Optional

from . import API_VERSION, __version__
from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "https://localhost"
DEFAULT_TIMEOUT = 300
DEFAULT_USER_AGENT = f"cif-sdk-python/{__version__}"

_FALSE_VALUES = ("0", "false", "no", "off")


def default_headers() -> dict[str, str]:
    return {"Accept": f"vnd.cif.v{API_VERSION}+json"}


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for a :class:`~cif_sdk.client.Client`.

    Args:
        token: API token sent as the ``token`` query parameter (required)
        remote: Base URL of the CIF instance
        timeout: Request timeout in seconds
        proxy: Proxy URL for both http and https (None = direct connection)
        verify_ssl: Whether to verify TLS certificates
        headers: Headers sent with every request (stored read-only)
        user_agent: User-Agent header value
    """

    token: Optional[str] = None
    remote: str = DEFAULT_REMOTE
    timeout: float = DEFAULT_TIMEOUT
    proxy: Optional[str] = None
    verify_ssl: bool = True
    headers: Mapping[str, str] = field(default_factory=default_headers)
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if not self.token or not str(self.token).strip():
            raise ConfigError("token is required")
        if not self.remote.startswith(("http://", "https://")):
            raise ConfigError(f"remote must start with http:// or https://: {self.remote}")
        if self.timeout is None or self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "remote", self.remote.rstrip("/"))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def proxies(self) -> dict[str, str]:
        """Get proxies dict for requests library."""
        if not self.proxy:
            return {}
        return {"http": self.proxy, "https": self.proxy}

    def with_options(self, **changes: Any) -> "ClientConfig":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """Create a config from ``CIF_*`` environment variables.

        Explicit keyword arguments win over the environment. Arguments
        passed as None are ignored. When no token is given and
        ``CIF_TOKEN`` is unset, the system keychain is consulted.
        """
        from .keymanager import get_token

        values: dict[str, Any] = {}

        remote = os.environ.get("CIF_REMOTE")
        if remote:
            values["remote"] = remote

        timeout = os.environ.get("CIF_TIMEOUT")
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError:
                raise ConfigError(f"CIF_TIMEOUT is not a number: {timeout!r}")

        proxy = os.environ.get("CIF_PROXY")
        if proxy:
            values["proxy"] = proxy

        verify = os.environ.get("CIF_VERIFY_SSL")
        if verify:
            values["verify_ssl"] = verify.strip().lower() not in _FALSE_VALUES

        values.update({k: v for k, v in overrides.items() if v is not None})

        if not values.get("token"):
            values["token"] = get_token()
        if not values.get("token"):
            raise ConfigError("no token configured (set CIF_TOKEN or run 'cif token set')")

        logger.debug("config loaded for remote %s", values.get("remote", DEFAULT_REMOTE))
        return cls(**values)
