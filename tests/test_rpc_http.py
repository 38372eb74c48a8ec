from __future__ import annotations

import json

import httpx
import pytest
import respx
from eth_abi import encode

from basenames import abi
from basenames.contracts.reader import EthCallReader
from basenames.errors import ChainMismatchError, RpcResponseError, RpcTransportError, TxError
from basenames.rpc.http import RpcClient, RpcConfig

RPC_URL = "http://localhost:8545/rpc"


def _ok(result):
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})


def _client(**kw) -> RpcClient:
    return RpcClient(RpcConfig(url=RPC_URL, backoff_base_s=0.0, **kw))


@pytest.mark.asyncio
@respx.mock
async def test_chain_id_and_block_number():
    respx.post(RPC_URL).mock(side_effect=[_ok("0x14a34"), _ok("0x10")])
    async with _client() as rpc:
        assert await rpc.chain_id() == 84532
        assert await rpc.block_number() == 16


@pytest.mark.asyncio
@respx.mock
async def test_ensure_chain_id():
    respx.post(RPC_URL).mock(side_effect=[_ok("0x14a34"), _ok("0x1")])
    async with _client() as rpc:
        assert await rpc.ensure_chain_id(84532) == 84532
        with pytest.raises(ChainMismatchError) as ei:
            await rpc.ensure_chain_id(84532)
    assert (ei.value.expected, ei.value.actual) == (84532, 1)


@pytest.mark.asyncio
@respx.mock
async def test_eth_call_sends_hex_payload():
    route = respx.post(RPC_URL).mock(return_value=_ok("0x" + "00" * 31 + "01"))
    async with _client() as rpc:
        out = await rpc.eth_call("0x4444444444444444444444444444444444444444", b"\x12\x34")
    assert out == b"\x00" * 31 + b"\x01"

    body = json.loads(route.calls.last.request.content)
    assert body["method"] == "eth_call"
    assert body["params"] == [{"to": "0x4444444444444444444444444444444444444444", "data": "0x1234"}, "latest"]


@pytest.mark.asyncio
@respx.mock
async def test_jsonrpc_error_object_maps_to_response_error():
    respx.post(RPC_URL).mock(
        return_value=httpx.Response(
            200,
            json={"jsonrpc": "2.0", "id": 1, "error": {"code": 3, "message": "execution reverted", "data": "0x"}},
        )
    )
    async with _client(max_retries=3) as rpc:
        with pytest.raises(RpcResponseError) as ei:
            await rpc.eth_call("0x4444444444444444444444444444444444444444", b"")
    assert ei.value.code == 3
    assert ei.value.is_revert
    assert ei.value.method == "eth_call"
    assert respx.calls.call_count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"<html>oops</html>", b"\x80\x81 not json"])
async def test_undecodable_body_is_transport_error(body):
    with respx.mock:
        route = respx.post(RPC_URL).mock(return_value=httpx.Response(200, content=body))
        async with _client(max_retries=3) as rpc:
            with pytest.raises(RpcTransportError) as ei:
                await rpc.call("eth_chainId")
    assert ei.value.http_status == 200
    assert route.call_count == 1


@pytest.mark.asyncio
@respx.mock
async def test_http_5xx_is_transport_error_without_retries_by_default():
    route = respx.post(RPC_URL).mock(return_value=httpx.Response(503, text="unavailable"))
    async with _client() as rpc:
        with pytest.raises(RpcTransportError) as ei:
            await rpc.block_number()
    assert ei.value.http_status == 503
    assert route.call_count == 1


@pytest.mark.asyncio
@respx.mock
async def test_transient_failures_are_retried_when_enabled():
    route = respx.post(RPC_URL).mock(
        side_effect=[httpx.Response(502), httpx.ConnectError("refused"), _ok("0x2a")]
    )
    async with _client(max_retries=2) as rpc:
        assert await rpc.block_number() == 42
    assert route.call_count == 3


@pytest.mark.asyncio
@respx.mock
async def test_client_errors_are_not_retried():
    route = respx.post(RPC_URL).mock(return_value=httpx.Response(400, text="bad request"))
    async with _client(max_retries=5) as rpc:
        with pytest.raises(RpcTransportError):
            await rpc.block_number()
    assert route.call_count == 1


@pytest.mark.asyncio
@respx.mock
async def test_poll_for_receipt_waits_for_confirmations():
    receipt = {"status": "0x1", "blockNumber": "0x10", "transactionHash": "0xabc"}
    respx.post(RPC_URL).mock(side_effect=[_ok(None), _ok(receipt), _ok("0x10"), _ok(receipt), _ok("0x11")])
    async with _client() as rpc:
        got = await rpc.poll_for_receipt("0xabc", confirmations=2, timeout_s=5, poll_interval_s=0)
    assert got == receipt
    assert respx.calls.call_count == 5


@pytest.mark.asyncio
@respx.mock
async def test_poll_for_receipt_times_out():
    respx.post(RPC_URL).mock(return_value=_ok(None))
    async with _client() as rpc:
        with pytest.raises(TxError) as ei:
            await rpc.poll_for_receipt("0xabc", timeout_s=0, poll_interval_s=0)
    assert ei.value.tx_hash == "0xabc"


@pytest.mark.asyncio
@respx.mock
async def test_eth_call_reader_encodes_and_decodes():
    owner = "0x1111111111111111111111111111111111111111"
    route = respx.post(RPC_URL).mock(return_value=_ok("0x" + encode(["address"], [owner]).hex()))
    node = b"\x07" * 32
    async with _client() as rpc:
        reader = EthCallReader(rpc)
        got = await reader.call("0x4444444444444444444444444444444444444444", "owner(bytes32)", [node])
    assert got == owner

    sent = json.loads(route.calls.last.request.content)["params"][0]["data"]
    assert sent == "0x" + (abi.REGISTRY_OWNER.selector + node).hex()


@pytest.mark.asyncio
@respx.mock
async def test_eth_call_reader_simulate_passes_sender_and_value():
    route = respx.post(RPC_URL).mock(return_value=_ok("0x"))
    async with _client() as rpc:
        reader = EthCallReader(rpc)
        await reader.simulate(
            "0x6666666666666666666666666666666666666666",
            abi.RESOLVER_SET_ADDR,
            [b"\x00" * 32, "0x1111111111111111111111111111111111111111"],
            sender="0x1111111111111111111111111111111111111111",
            value=10,
        )
    tx = json.loads(route.calls.last.request.content)["params"][0]
    assert tx["from"] == "0x1111111111111111111111111111111111111111"
    assert tx["value"] == "0xa"
