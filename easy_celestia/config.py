"""
Client configuration: network profile, backend endpoints, API keys, retry/timeouts.

- Network selector ("mainnet" | "mocha") picks the default explorer endpoint.
- Explicit endpoint/key overrides always win over the network defaults.
- Supports loading from environment variables (CELESTIA_* / CELENIUM_*).
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Literal, Optional

from .errors import InvalidInput

Network = Literal["mainnet", "mocha"]

DEFAULT_NETWORK: Network = "mocha"

DEFAULT_CELENIUM_ENDPOINT: Dict[str, str] = {
    "mainnet": "https://api-mainnet.celenium.io/v1",
    "mocha": "https://api-mocha.celenium.io/v1",
}

DEFAULT_GAS_PRICE = 0.002
DEFAULT_MAX_ATTEMPTS = 20
DEFAULT_RETRY_DELAY = 1.1


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v not in (None, "") else default


def _ensure_scheme(url: Optional[str]) -> Optional[str]:
    if not url:
        return url
    lower = url.lower()
    if not lower.startswith(("http://", "https://")):
        raise InvalidInput("endpoint must start with http:// or https://", url)
    return url


def _check_network(network: str) -> Network:
    if network not in DEFAULT_CELENIUM_ENDPOINT:
        raise InvalidInput(
            f"unknown network, expected one of {sorted(DEFAULT_CELENIUM_ENDPOINT)}", network
        )
    return network  # type: ignore[return-value]


@dataclass(slots=True)
class EasyCelestiaOptions:
    # Node (JSON-RPC)
    node_endpoint: str = ""
    node_api_key: Optional[str] = None
    # Network profile
    network: Network = DEFAULT_NETWORK
    # Explorer (Celenium REST)
    celenium_endpoint: Optional[str] = None
    celenium_api_key: Optional[str] = None
    # HTTP behaviour
    request_timeout: float = 30.0
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_delay: float = DEFAULT_RETRY_DELAY
    max_concurrency: int = 4

    def __post_init__(self) -> None:
        _check_network(self.network)
        _ensure_scheme(self.node_endpoint)
        _ensure_scheme(self.celenium_endpoint)
        if self.max_attempts < 1:
            raise InvalidInput("max_attempts must be >= 1", self.max_attempts)
        if self.retry_delay < 0:
            raise InvalidInput("retry_delay must be >= 0", self.retry_delay)
        if self.max_concurrency < 1:
            raise InvalidInput("max_concurrency must be >= 1", self.max_concurrency)

    @classmethod
    def from_env(cls, prefix: str = "CELESTIA_") -> "EasyCelestiaOptions":
        """
        Create options from environment variables:

        CELESTIA_NODE_ENDPOINT     (http/https)
        CELESTIA_NODE_API_KEY      (bearer token)
        CELESTIA_NETWORK           (mainnet | mocha)
        CELENIUM_ENDPOINT          (http/https) optional
        CELENIUM_API_KEY           (str) optional
        CELESTIA_TIMEOUT           (float seconds)
        CELESTIA_MAX_ATTEMPTS      (int)
        CELESTIA_RETRY_DELAY       (float seconds)
        CELESTIA_MAX_CONCURRENCY   (int)
        """
        return cls(
            node_endpoint=_env(f"{prefix}NODE_ENDPOINT", "") or "",
            node_api_key=_env(f"{prefix}NODE_API_KEY"),
            network=_env(f"{prefix}NETWORK", DEFAULT_NETWORK),  # type: ignore[arg-type]
            celenium_endpoint=_env("CELENIUM_ENDPOINT"),
            celenium_api_key=_env("CELENIUM_API_KEY"),
            request_timeout=float(_env(f"{prefix}TIMEOUT", "30.0")),
            max_attempts=int(_env(f"{prefix}MAX_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS))),
            retry_delay=float(_env(f"{prefix}RETRY_DELAY", str(DEFAULT_RETRY_DELAY))),
            max_concurrency=int(_env(f"{prefix}MAX_CONCURRENCY", "4")),
        )

    @classmethod
    def with_overrides(
        cls, base: Optional["EasyCelestiaOptions"] = None, **overrides: Any
    ) -> "EasyCelestiaOptions":
        """
        Build from existing options plus keyword overrides.
        Unknown keys are ignored; None values leave the base value in place.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data and v is not None})
        return cls(**data)

    def resolved_celenium_endpoint(self) -> str:
        return self.celenium_endpoint or DEFAULT_CELENIUM_ENDPOINT[self.network]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "Network",
    "DEFAULT_NETWORK",
    "DEFAULT_CELENIUM_ENDPOINT",
    "DEFAULT_GAS_PRICE",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_RETRY_DELAY",
    "EasyCelestiaOptions",
]
