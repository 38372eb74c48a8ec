from __future__ import annotations

"""
Configuration loader for the basenames client.

- Reads environment variables (optionally from `.env.local`) via pydantic-settings.
- Validates RPC URL scheme and contract addresses.
- Exposes a cached `get_settings()` accessor for the CLI. Library code never
  reads settings implicitly; callers hand `ContractAddresses`, the parent node
  and RPC parameters to the objects they construct.

Environment variables (all prefixed with BASENAMES_):
    RPC_URL                (str, default https://sepolia.base.org)
    CHAIN_ID               (int or 0x-hex, default 84532, Base Sepolia; the CLI
                            refuses a node serving another chain)
    PARENT_DOMAIN          (str, default "basetest.eth")
    REGISTRY               (address)
    RESOLVER               (address)
    REVERSE_REGISTRAR      (address)
    REGISTRAR_CONTROLLER   (address)
    REQUEST_TIMEOUT        (float seconds, default 10)
    MAX_RETRIES            (int, default 0; transport retries per request)
    BACKOFF_BASE           (float seconds, default 0.25)
    CONFIRMATIONS          (int, default 2; see `Registrar.from_settings`)
    RECEIPT_TIMEOUT        (float seconds, default 120)
    LOG_LEVEL              (str, default "INFO")
    LOG_FORMAT             ("console" | "json", default "console")
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .names import namehash, normalize_name

BASE_SEPOLIA_CHAIN_ID = 84532
BASE_SEPOLIA_RPC = "https://sepolia.base.org"

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_HEX_RE = re.compile(r"^0x[0-9a-fA-F]+$")


def _ensure_scheme(url: str, allowed: tuple[str, ...]) -> str:
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ValueError(f"URL must start with {allowed}, got: {url!r}")
    return url


@dataclass(frozen=True)
class ContractAddresses:
    """Deployed contract addresses the client talks to."""

    registry: str
    resolver: str
    reverse_registrar: str
    registrar_controller: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "registry": self.registry,
            "resolver": self.resolver,
            "reverse_registrar": self.reverse_registrar,
            "registrar_controller": self.registrar_controller,
        }


class Settings(BaseSettings):
    # Network
    rpc_url: str = Field(BASE_SEPOLIA_RPC, description="Node JSON-RPC endpoint")
    chain_id: int = Field(BASE_SEPOLIA_CHAIN_ID, description="Expected chain id")
    parent_domain: str = Field("basetest.eth", description="Parent domain for subnames")

    # Contracts (Base Sepolia deployments)
    registry: str = "0x1493b2567056c2181630115660963E13A8E32735"
    resolver: str = "0x85C87e548091f204C2d0350b39ce1874f02197c6"
    reverse_registrar: str = "0x876eF94ce0773052a2f81921E70FF25a5e76841f"
    registrar_controller: str = "0x49ae3cc2e3aa768b1e5654f5d3c6002144a59581"

    # Transport
    request_timeout: float = Field(10.0, gt=0)
    max_retries: int = Field(0, ge=0)
    backoff_base: float = Field(0.25, ge=0)

    # Transactions
    confirmations: int = Field(2, ge=0)
    receipt_timeout: float = Field(120.0, gt=0)

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    model_config = SettingsConfigDict(
        env_prefix="BASENAMES_", env_file=".env.local", case_sensitive=False, extra="ignore"
    )

    @field_validator("rpc_url")
    @classmethod
    def _check_rpc_url(cls, v: str) -> str:
        return _ensure_scheme(v, ("http", "https"))

    @field_validator("chain_id", mode="before")
    @classmethod
    def _parse_chain_id(cls, v: Any) -> Any:
        if isinstance(v, str) and _HEX_RE.match(v.strip()):
            return int(v.strip(), 16)
        return v

    @field_validator("registry", "resolver", "reverse_registrar", "registrar_controller")
    @classmethod
    def _check_address(cls, v: str) -> str:
        if not _ADDRESS_RE.match(v):
            raise ValueError(f"not a 0x-prefixed 20-byte address: {v!r}")
        return v

    @field_validator("parent_domain")
    @classmethod
    def _normalize_parent(cls, v: str) -> str:
        return normalize_name(v)

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("console", "json"):
            raise ValueError("log_format must be 'console' or 'json'")
        return v

    def contracts(self) -> ContractAddresses:
        return ContractAddresses(
            registry=self.registry,
            resolver=self.resolver,
            reverse_registrar=self.reverse_registrar,
            registrar_controller=self.registrar_controller,
        )

    def parent_node(self) -> bytes:
        return namehash(self.parent_domain)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


__all__ = [
    "BASE_SEPOLIA_CHAIN_ID",
    "BASE_SEPOLIA_RPC",
    "ContractAddresses",
    "Settings",
    "get_settings",
]
