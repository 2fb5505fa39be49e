from __future__ import annotations

import logging
from typing import Dict, Sequence

from .errors import RpcError
from .models import Snapshot
from .rpc import RpcClient, block_tag, eth_call_batch
from .utils import abi_encode_address, decode_address_word, decode_uint256, is_valid_address, keccak_selector, to_units

logger = logging.getLogger(__name__)


# cast sig "delegates(address)" => 0x587cde1e
DELEGATES_SELECTOR = keccak_selector("delegates(address)")
# cast sig "balanceOf(address)" => 0x70a08231
BALANCE_OF_SELECTOR = keccak_selector("balanceOf(address)")


def _call_data(selector: str, address: str) -> str:
    return "0x" + selector + abi_encode_address(address)


def get_delegates(
    rpc: RpcClient,
    addresses: Sequence[str],
    *,
    token_address: str,
    snapshot: Snapshot,
    batch_size: int = 500,
) -> Dict[str, str]:
    """Return address -> on-chain delegate, omitting addresses without a valid one."""
    outputs = eth_call_batch(
        rpc,
        to=token_address,
        datas=[_call_data(DELEGATES_SELECTOR, a) for a in addresses],
        tag=block_tag(snapshot),
        batch_size=batch_size,
    )
    delegates: Dict[str, str] = {}
    for address, out in zip(addresses, outputs):
        try:
            delegate = decode_address_word(out)
        except ValueError:
            delegate = None
        if delegate and is_valid_address(delegate):
            delegates[address.lower()] = delegate.lower()
    logger.debug("delegates %s", delegates)
    return delegates


def get_balances(
    rpc: RpcClient,
    addresses: Sequence[str],
    *,
    token_address: str,
    decimals: int,
    snapshot: Snapshot,
    batch_size: int = 500,
) -> Dict[str, float]:
    outputs = eth_call_batch(
        rpc,
        to=token_address,
        datas=[_call_data(BALANCE_OF_SELECTOR, a) for a in addresses],
        tag=block_tag(snapshot),
        batch_size=batch_size,
    )
    balances: Dict[str, float] = {}
    for address, out in zip(addresses, outputs):
        try:
            raw = decode_uint256(out)
        except ValueError as e:
            raise RpcError(f"unexpected balanceOf output for {address}: {out!r}") from e
        balances[address.lower()] = to_units(raw, decimals)
    logger.debug("balances %s", balances)
    return balances
