"""
Async JSON-RPC client for an EVM node (Base Sepolia by default).

Provides:
- a retrying JSON-RPC transport over HTTP(S) built on httpx
- typed methods for the handful of endpoints the client needs:
  * eth_chainId / eth_blockNumber
  * eth_call
  * eth_getTransactionReceipt
- a helper that polls for a receipt and waits for confirmations

Notes
-----
* Retries apply to transport failures and 502/503/504 only, and default to
  zero. JSON-RPC error objects (including reverts) are never retried.
* All hex data is sent as lowercase 0x-prefixed strings.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ..errors import ChainMismatchError, RpcTransportError, TxError, from_jsonrpc_error
from ..logging import get_logger
from ..utils.bytes import BytesLike, from_hex, hex_to_int, to_hex

log = get_logger(__name__)

HexStr = str

_RETRY_STATUSES = (502, 503, 504)


def _build_headers(extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    hdrs = {
        "content-type": "application/json",
        "accept": "application/json",
    }
    if extra:
        hdrs.update(extra)
    return hdrs


def _hex_data(x: BytesLike | str) -> HexStr:
    if isinstance(x, str):
        return to_hex(from_hex(x))
    return to_hex(x)


@dataclass
class RpcConfig:
    url: str
    timeout_s: float = 10.0
    max_retries: int = 0
    backoff_base_s: float = 0.25  # exponential backoff starting delay
    headers: Optional[Dict[str, str]] = None


class RpcClient:
    """
    Minimal async JSON-RPC client.

    Use as an async context manager, or call `start()`/`close()` yourself. An
    existing `httpx.AsyncClient` may be injected; it is then not closed here.
    """

    def __init__(self, config: RpcConfig, *, client: Optional[httpx.AsyncClient] = None):
        self._cfg = config
        self._id = 0
        self._client = client
        self._owns_client = client is None

    @property
    def url(self) -> str:
        return self._cfg.url

    # ---------- lifecycle ----------

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._cfg.timeout_s,
                headers=_build_headers(self._cfg.headers),
            )
            self._owns_client = True

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RpcClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ---------- core transport ----------

    async def _post_once(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        assert self._client is not None
        try:
            resp = await self._client.post(self._cfg.url, json=payload)
        except httpx.TimeoutException as exc:
            raise RpcTransportError(f"timeout calling {payload['method']}: {exc}") from exc
        except httpx.TransportError as exc:
            raise RpcTransportError(f"transport error calling {payload['method']}: {exc}") from exc

        if resp.status_code != 200:
            raise RpcTransportError(
                f"HTTP {resp.status_code}: {resp.text[:256]!r}", http_status=resp.status_code
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise RpcTransportError(f"invalid JSON from node: {exc}", http_status=200) from exc
        if not isinstance(data, dict):
            raise RpcTransportError("unexpected JSON-RPC response shape", http_status=200)
        return data

    async def call(self, method: str, params: Any | None = None) -> Any:
        """
        Perform a single JSON-RPC call, retrying transient transport failures
        up to `max_retries` times.
        """
        if self._client is None:
            await self.start()

        self._id += 1
        payload = {"jsonrpc": "2.0", "id": self._id, "method": method, "params": params or []}

        attempt = 0
        while True:
            attempt += 1
            try:
                data = await self._post_once(payload)
            except RpcTransportError as exc:
                retriable = exc.http_status is None or exc.http_status in _RETRY_STATUSES
                if not retriable or attempt > self._cfg.max_retries:
                    raise
                delay = self._cfg.backoff_base_s * (2 ** (attempt - 1))
                log.debug("rpc_retry", method=method, attempt=attempt, delay=delay, error=str(exc))
                await asyncio.sleep(delay)
                continue

            err = data.get("error")
            if err is not None:
                raise from_jsonrpc_error(err, method=method)
            return data.get("result")

    # ---------- typed methods ----------

    async def chain_id(self) -> int:
        return hex_to_int(await self.call("eth_chainId"))

    async def ensure_chain_id(self, expected: int) -> int:
        """Raise `ChainMismatchError` unless the node serves chain `expected`."""
        actual = await self.chain_id()
        if actual != expected:
            raise ChainMismatchError(expected, actual)
        return actual

    async def block_number(self) -> int:
        return hex_to_int(await self.call("eth_blockNumber"))

    async def eth_call(
        self,
        to: str,
        data: BytesLike | str,
        *,
        from_: Optional[str] = None,
        value: int = 0,
        block: str = "latest",
    ) -> bytes:
        """
        Execute a read-only call and return the raw return data.
        Reverts surface as `RpcResponseError` with `is_revert` set.
        """
        tx: Dict[str, Any] = {"to": to, "data": _hex_data(data)}
        if from_:
            tx["from"] = from_
        if value:
            tx["value"] = hex(value)
        result = await self.call("eth_call", [tx, block])
        return from_hex(result or "0x")

    async def get_transaction_receipt(self, tx_hash: HexStr) -> Optional[Dict[str, Any]]:
        return await self.call("eth_getTransactionReceipt", [tx_hash])

    # ---------- convenience ----------

    async def poll_for_receipt(
        self,
        tx_hash: HexStr,
        *,
        confirmations: int = 1,
        timeout_s: float = 120.0,
        poll_interval_s: float = 1.0,
    ) -> Dict[str, Any]:
        """
        Poll until the receipt exists and has `confirmations` blocks on top of
        (and including) its own block. Raises TxError on timeout.
        """
        deadline = time.monotonic() + timeout_s
        while True:
            rcpt = await self.get_transaction_receipt(tx_hash)
            if rcpt is not None:
                if confirmations <= 1:
                    return rcpt
                mined_in = hex_to_int(rcpt["blockNumber"])
                head = await self.block_number()
                if head - mined_in + 1 >= confirmations:
                    return rcpt
            if time.monotonic() >= deadline:
                raise TxError(f"receipt not confirmed within {timeout_s}s", tx_hash=tx_hash, receipt=rcpt)
            await asyncio.sleep(poll_interval_s)


__all__ = ["RpcClient", "RpcConfig"]
