from __future__ import annotations

import json
import os
import re
from decimal import Decimal, getcontext
from pathlib import Path
from typing import Any, Optional

from Crypto.Hash import keccak

getcontext().prec = 80


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def write_json_atomic(path: Path, data: Any) -> None:
    ensure_dir(path.parent)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    os.replace(tmp, path)


def env(name: str, default: str) -> str:
    val = os.getenv(name)
    return val if val else default


def keccak256(data: bytes) -> bytes:
    h = keccak.new(digest_bits=256)
    h.update(data)
    return h.digest()


def keccak_selector(signature: str) -> str:
    return keccak256(signature.encode("utf-8")).hex()[:8]


def pad32(hex_str: str) -> str:
    return hex_str.rjust(64, "0")


def abi_encode_address(address: str) -> str:
    return pad32(address.lower().replace("0x", ""))


def decode_words(data_hex: str) -> list[int]:
    if not str(data_hex).startswith("0x"):
        raise ValueError("data must be 0x-prefixed")
    hex_str = str(data_hex)[2:]
    if len(hex_str) % 64 != 0:
        raise ValueError(f"data is not word aligned: {len(hex_str)} hex chars")
    return [int(hex_str[i : i + 64], 16) for i in range(0, len(hex_str), 64)]


def decode_uint256(data_hex: str) -> int:
    words = decode_words(data_hex)
    if not words:
        raise ValueError("empty uint256 result")
    return words[0]


def decode_address_word(data_hex: str) -> Optional[str]:
    # Empty returndata means the call hit an account without code.
    words = decode_words(data_hex)
    if not words or words[0] >> 160:
        return None
    return "0x" + format(words[0], "040x")


def decode_string(data_hex: str) -> str:
    # ABI `string` return: offset word, length word, then the utf-8 bytes.
    raw = bytes.fromhex(str(data_hex)[2:])
    if len(raw) < 64:
        raise ValueError(f"string result too short: {len(raw)} bytes")
    offset = int.from_bytes(raw[0:32], "big")
    length = int.from_bytes(raw[offset : offset + 32], "big")
    start = offset + 32
    if start + length > len(raw):
        raise ValueError("string result length out of range")
    return raw[start : start + length].decode("utf-8")


def to_units(raw: int, decimals: int) -> float:
    return float(Decimal(int(raw)) / (Decimal(10) ** int(decimals)))


def lower_case(value: Optional[str]) -> Optional[str]:
    return value.lower() if value else value


def is_address(value: Any) -> bool:
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))


def is_valid_address(value: Any) -> bool:
    return is_address(value) and value.lower() != ZERO_ADDRESS


def to_checksum_address(address: str) -> str:
    # EIP-55: uppercase each hex letter whose keccak nibble is >= 8.
    if not is_address(address):
        raise ValueError(f"invalid address: {address}")
    a = address.lower()[2:]
    digest = keccak256(a.encode("ascii")).hex()
    return "0x" + "".join(c.upper() if int(digest[i], 16) >= 8 else c for i, c in enumerate(a))


def namehash(name: str) -> str:
    node = b"\x00" * 32
    if name:
        for label in reversed(name.split(".")):
            node = keccak256(node + keccak256(label.encode("utf-8")))
    return node.hex()
