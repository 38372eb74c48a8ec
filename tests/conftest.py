from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest
import structlog

from basenames.abi import FunctionLike, function_for
from basenames.config import ContractAddresses, get_settings
from basenames.errors import RpcResponseError
from basenames.names import namehash
from basenames.records import RecordKey

OWNER = "0x1111111111111111111111111111111111111111"
RESOLVER = "0x2222222222222222222222222222222222222222"
ADDR = "0x3333333333333333333333333333333333333333"
ZERO = "0x0000000000000000000000000000000000000000"

CONTRACTS = ContractAddresses(
    registry="0x4444444444444444444444444444444444444444",
    resolver=RESOLVER,
    reverse_registrar="0x5555555555555555555555555555555555555555",
    registrar_controller="0x6666666666666666666666666666666666666666",
)


def revert(message: str = "execution reverted") -> RpcResponseError:
    return RpcResponseError(3, message, method="eth_call")


class FakeLookups:
    """In-memory registry + resolver for verification tests."""

    def __init__(
        self,
        *,
        owner: Any = OWNER,
        resolver: Any = RESOLVER,
        addr: Any = ADDR,
        texts: Optional[Dict[str, Any]] = None,
    ):
        self._owner = owner
        self._resolver = resolver
        self._addr = addr
        self._texts = texts or {}
        self.nodes: List[bytes] = []
        self.text_keys: List[str] = []

    @staticmethod
    def _answer(value: Any) -> Any:
        if isinstance(value, Exception):
            raise value
        return value

    async def owner(self, node):
        self.nodes.append(bytes(node))
        return self._answer(self._owner)

    async def resolver(self, node):
        return self._answer(self._resolver)

    async def read_address(self, resolver, node):
        return self._answer(self._addr)

    async def read_record(self, resolver, node, key):
        k = key.value if isinstance(key, RecordKey) else key
        self.text_keys.append(k)
        return self._answer(self._texts.get(k, ""))


class FakeContractReader:
    """
    ContractReader keyed by function signature. A handler is either a value or
    a callable taking (address, *args); missing handlers revert.
    """

    def __init__(self, handlers: Optional[Dict[str, Any]] = None):
        self.handlers: Dict[str, Any] = dict(handlers or {})
        self.calls: List[Tuple[str, str, Tuple[Any, ...]]] = []

    async def call(self, address: str, fn: FunctionLike, args: Sequence[Any]) -> Any:
        spec = function_for(fn)
        self.calls.append((address, spec.signature, tuple(args)))
        handler = self.handlers.get(spec.signature)
        if handler is None:
            raise revert()
        value = handler(address, *args) if callable(handler) else handler
        if isinstance(value, Exception):
            raise value
        return value

    def signatures(self) -> List[str]:
        return [sig for _, sig, _ in self.calls]


@pytest.fixture
def parent_node() -> bytes:
    return namehash("basetest.eth")


@pytest.fixture
def contracts() -> ContractAddresses:
    return CONTRACTS


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    # keep a developer's .env.local and BASENAMES_* env out of the tests
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("BASENAMES_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _drop_cli_log_handlers():
    # handlers installed by setup_logging hold a per-test stderr
    yield
    root = logging.getLogger()
    for h in list(root.handlers):
        if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(h)
