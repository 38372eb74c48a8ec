"""
Availability, pricing and registration through the RegistrarController.

Transactions are built here and handed to an injected `TransactionSender`,
which owns the account, nonce management and signing. This module never sees a
private key.

Registration sequence (`Registrar.register`):

1. normalize the label and validate any records (nothing is sent on failure);
2. check availability, fetch the price;
3. simulate ``register(request)`` as the sender with ``value=price``;
4. send it and wait for the receipt (status must be 0x1);
5. set resolver records (``multicall`` of ``setAddr`` + ``setText``);
6. set the reverse record for the address, if requested.

Steps 5 and 6 are best effort: a failure is logged and its hash left as None.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol

from . import abi
from .config import Settings
from .contracts.basenames import BasenamesReader
from .errors import InvalidRecordsError, NameUnavailableError, RpcError, TxError
from .logging import get_logger
from .names import full_name, label_to_node
from .records import RecordKey, validate_record, validate_records
from .utils.bytes import BytesLike, to_hex

log = get_logger(__name__)

# 1 year in seconds
MIN_DURATION = 365 * 24 * 60 * 60


class TransactionSender(Protocol):
    """External signer: submits a transaction from `address` and returns its hash."""

    @property
    def address(self) -> str: ...

    async def send_transaction(self, to: str, data: bytes, value: int = 0) -> str: ...


class ChainClient(Protocol):
    """The subset of `RpcClient` used for simulation and confirmation."""

    async def eth_call(
        self, to: str, data: Any, *, from_: Optional[str] = None, value: int = 0, block: str = "latest"
    ) -> bytes: ...

    async def poll_for_receipt(
        self, tx_hash: str, *, confirmations: int = 1, timeout_s: float = 120.0, poll_interval_s: float = 1.0
    ) -> Dict[str, Any]: ...


@dataclass
class RegisterRequest:
    name: str
    owner: str
    duration: int
    resolver: str
    data: List[bytes] = field(default_factory=list)
    reverse_record: bool = False

    def as_tuple(self) -> tuple:
        return (self.name, self.owner, int(self.duration), self.resolver, list(self.data), self.reverse_record)


@dataclass
class RegistrationResult:
    tx_hash: str
    node: bytes
    full_name: str
    price: int
    resolver_tx_hash: Optional[str] = None
    reverse_tx_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tx_hash": self.tx_hash,
            "node": to_hex(self.node),
            "full_name": self.full_name,
            "price": self.price,
            "resolver_tx_hash": self.resolver_tx_hash,
            "reverse_tx_hash": self.reverse_tx_hash,
        }


def build_resolver_data(
    node: BytesLike, address: Optional[str] = None, text_records: Optional[Mapping[str, str]] = None
) -> List[bytes]:
    """Encoded ``setAddr``/``setText`` calls for a resolver ``multicall``."""
    node_b = bytes(node)
    data: List[bytes] = []
    if address:
        data.append(abi.RESOLVER_SET_ADDR.encode_call([node_b, address]))
    for key, value in (text_records or {}).items():
        k = key.value if isinstance(key, RecordKey) else str(key)
        data.append(abi.RESOLVER_SET_TEXT.encode_call([node_b, k, value]))
    return data


def _check_records(address: Optional[str], text_records: Optional[Mapping[str, str]]) -> None:
    result = validate_records(text_records or {})
    errors = dict(result.errors)
    if address:
        addr_check = validate_record(RecordKey.ADDR, address)
        if not addr_check.valid and addr_check.error:
            errors[RecordKey.ADDR.value] = addr_check.error
    if errors:
        raise InvalidRecordsError(errors)


def _receipt_ok(receipt: Mapping[str, Any]) -> bool:
    status = receipt.get("status")
    if isinstance(status, str):
        return int(status, 16) == 1
    return status == 1


class Registrar:
    def __init__(
        self,
        reader: BasenamesReader,
        sender: TransactionSender,
        chain: ChainClient,
        *,
        parent_domain: str,
        parent_node: BytesLike,
        confirmations: int = 2,
        receipt_timeout: float = 120.0,
        poll_interval: float = 1.0,
    ):
        self.reader = reader
        self.sender = sender
        self.chain = chain
        self.parent_domain = parent_domain
        self.parent_node = bytes(parent_node)
        self.confirmations = confirmations
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        reader: BasenamesReader,
        sender: TransactionSender,
        chain: ChainClient,
        *,
        poll_interval: float = 1.0,
    ) -> "Registrar":
        """Build a registrar for the configured parent domain and confirmation policy."""
        return cls(
            reader,
            sender,
            chain,
            parent_domain=settings.parent_domain,
            parent_node=settings.parent_node(),
            confirmations=settings.confirmations,
            receipt_timeout=settings.receipt_timeout,
            poll_interval=poll_interval,
        )

    @property
    def contracts(self):
        return self.reader.contracts

    async def _send_and_wait(self, to: str, data: bytes, value: int = 0) -> str:
        tx_hash = await self.sender.send_transaction(to, data, value)
        log.info("tx_sent", tx_hash=tx_hash, to=to, value=value)
        receipt = await self.chain.poll_for_receipt(
            tx_hash,
            confirmations=self.confirmations,
            timeout_s=self.receipt_timeout,
            poll_interval_s=self.poll_interval,
        )
        if not _receipt_ok(receipt):
            raise TxError(
                f"transaction reverted (block {receipt.get('blockNumber')})", tx_hash=tx_hash, receipt=receipt
            )
        log.info("tx_confirmed", tx_hash=tx_hash, block=receipt.get("blockNumber"))
        return tx_hash

    # ---- reads ----

    async def check_available(self, name: str) -> bool:
        label = label_to_node(name, self.parent_node).label
        return await self.reader.available(label)

    async def get_price(self, name: str, duration: int = MIN_DURATION) -> int:
        label = label_to_node(name, self.parent_node).label
        return await self.reader.register_price(label, duration)

    # ---- writes ----

    async def set_resolver_records(
        self, node: BytesLike, address: Optional[str] = None, text_records: Optional[Mapping[str, str]] = None
    ) -> str:
        """Write address and text records in one resolver ``multicall``."""
        _check_records(address, text_records)
        calls = build_resolver_data(node, address, text_records)
        data = abi.RESOLVER_MULTICALL.encode_call([calls])
        return await self._send_and_wait(self.contracts.resolver, data)

    async def set_reverse_record(self, name: str, address: str) -> str:
        """Make *name* the primary name of *address*. The sender must be authorized for it."""
        data = abi.REVERSE_SET_NAME_FOR_ADDR.encode_call(
            [address, self.sender.address, self.contracts.resolver, name]
        )
        return await self._send_and_wait(self.contracts.reverse_registrar, data)

    async def register(
        self,
        name: str,
        owner: str,
        *,
        address_to_set: Optional[str] = None,
        text_records: Optional[Mapping[str, str]] = None,
        duration: int = MIN_DURATION,
        reverse_record: bool = False,
    ) -> RegistrationResult:
        if duration < MIN_DURATION:
            raise ValueError(f"duration must be at least {MIN_DURATION} seconds")
        _check_records(address_to_set, text_records)

        resolved = label_to_node(name, self.parent_node)
        label = resolved.label
        fqdn = full_name(label, self.parent_domain)

        if not await self.reader.available(label):
            raise NameUnavailableError(fqdn)

        price = await self.reader.register_price(label, duration)
        log.info("register_price", name=fqdn, price=price, duration=duration)

        request = RegisterRequest(
            name=label,
            owner=owner,
            duration=duration,
            resolver=self.contracts.resolver,
            data=[],
            reverse_record=reverse_record,
        )
        calldata = abi.CONTROLLER_REGISTER.encode_call([request.as_tuple()])
        controller = self.contracts.registrar_controller

        # Reverts surface here as RpcResponseError before anything is broadcast.
        await self.chain.eth_call(controller, calldata, from_=self.sender.address, value=price)

        tx_hash = await self._send_and_wait(controller, calldata, value=price)
        result = RegistrationResult(tx_hash=tx_hash, node=resolved.node, full_name=fqdn, price=price)

        if address_to_set or text_records:
            try:
                result.resolver_tx_hash = await self.set_resolver_records(
                    resolved.node, address_to_set, text_records
                )
            except (RpcError, TxError) as e:
                log.warning("set_resolver_records_failed", name=fqdn, error=str(e))

        if reverse_record and address_to_set:
            try:
                result.reverse_tx_hash = await self.set_reverse_record(fqdn, address_to_set)
            except (RpcError, TxError) as e:
                log.warning("set_reverse_record_failed", name=fqdn, address=address_to_set, error=str(e))

        return result


__all__ = [
    "MIN_DURATION",
    "TransactionSender",
    "ChainClient",
    "RegisterRequest",
    "RegistrationResult",
    "Registrar",
    "build_resolver_data",
]
