from __future__ import annotations

import logging

import pytest
import structlog

from basenames.logging import _redact_secrets, bind_context, clear_context, get_logger, setup_logging
from basenames.utils import ensure_bytes, from_hex, hex_to_int, keccak256_hex, to_bytes32, to_hex


def test_hex_helpers():
    assert to_hex(b"\x01\xff") == "0x01ff"
    assert to_hex(b"\x01", prefix=False) == "01"
    assert from_hex("0x01FF") == b"\x01\xff"
    assert ensure_bytes("abcd") == b"\xab\xcd"
    assert ensure_bytes(bytearray(b"x")) == b"x"
    with pytest.raises(ValueError):
        from_hex("0x123")
    with pytest.raises(TypeError):
        ensure_bytes(12)


def test_to_bytes32_and_quantities():
    assert to_bytes32("0x" + "00" * 32) == b"\x00" * 32
    with pytest.raises(ValueError):
        to_bytes32(b"\x00" * 20)
    assert hex_to_int("0x") == 0
    assert hex_to_int("0x2a") == 42
    with pytest.raises(ValueError):
        hex_to_int("42")


def test_keccak256_hex():
    assert keccak256_hex(b"") == "0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"


def test_redaction():
    ev = _redact_secrets(logging.getLogger("t"), "info", {"private_key": "0xdead", "node": "0x01"})
    assert ev == {"private_key": "***", "node": "0x01"}


def test_setup_logging_json_and_context(capsys):
    setup_logging(level="INFO", log_format="json")
    bind_context(basename="alice.basetest.eth")
    try:
        get_logger("basenames.test").info("verify_started", api_key="secret")
    finally:
        clear_context()
    line = capsys.readouterr().err.strip().splitlines()[-1]
    assert '"event": "verify_started"' in line
    assert '"basename": "alice.basetest.eth"' in line
    assert '"api_key": "***"' in line
    assert '"service": "basenames"' in line
    assert structlog.contextvars.get_contextvars() == {}
