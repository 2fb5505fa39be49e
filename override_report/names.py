"""
ENS primary names.

The reverse record of an address is only trusted when the name it points to
resolves forward to the same address.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional

import requests

from .config import ENS_REGISTRY
from .errors import RpcError
from .models import Override
from .rpc import RpcClient, eth_call
from .utils import decode_address_word, decode_string, is_valid_address, keccak_selector, namehash

logger = logging.getLogger(__name__)


RESOLVER_SELECTOR = keccak_selector("resolver(bytes32)")
NAME_SELECTOR = keccak_selector("name(bytes32)")
ADDR_SELECTOR = keccak_selector("addr(bytes32)")

RESOLVED = "resolved"
UNRESOLVED = "unresolved"
ERROR = "error"


@dataclass(frozen=True)
class NameLookup:
    address: str
    status: str
    name: Optional[str] = None
    detail: Optional[str] = None


class EnsResolver:
    def __init__(self, rpc: RpcClient, *, registry: str = ENS_REGISTRY) -> None:
        self.rpc = rpc
        self.registry = registry

    def _resolver(self, node: str) -> Optional[str]:
        out = eth_call(self.rpc, to=self.registry, data="0x" + RESOLVER_SELECTOR + node)
        resolver = decode_address_word(out)
        return resolver if resolver and is_valid_address(resolver) else None

    def reverse_name(self, address: str) -> Optional[str]:
        node = namehash(address.lower()[2:] + ".addr.reverse")
        resolver = self._resolver(node)
        if resolver is None:
            return None
        out = eth_call(self.rpc, to=resolver, data="0x" + NAME_SELECTOR + node)
        if out == "0x":
            return None
        return decode_string(out) or None

    def resolve_address(self, name: str) -> Optional[str]:
        node = namehash(name.lower())
        resolver = self._resolver(node)
        if resolver is None:
            return None
        address = decode_address_word(eth_call(self.rpc, to=resolver, data="0x" + ADDR_SELECTOR + node))
        return address if address and is_valid_address(address) else None


class PrimaryNames:
    """Memoized primary-name lookups for one report."""

    def __init__(self, resolver: EnsResolver) -> None:
        self.resolver = resolver
        self._lookups: Dict[str, NameLookup] = {}

    def lookup(self, address: str) -> NameLookup:
        key = address.lower()
        if key not in self._lookups:
            self._lookups[key] = self._lookup(address)
            logger.debug("%s: %s", address, self._lookups[key])
        return self._lookups[key]

    def _lookup(self, address: str) -> NameLookup:
        try:
            name = self.resolver.reverse_name(address)
            if name is None:
                return NameLookup(address, UNRESOLVED)
            forward = self.resolver.resolve_address(name)
        except (RpcError, ValueError, requests.RequestException) as e:
            logger.warning("primary name lookup failed for %s: %s", address, e)
            return NameLookup(address, ERROR, detail=str(e))
        if forward is None or forward.lower() != address.lower():
            return NameLookup(address, UNRESOLVED, detail=f"{name} resolves to {forward}")
        return NameLookup(address, RESOLVED, name=name)

    def name(self, address: str) -> Optional[str]:
        return self.lookup(address).name


def override_addresses(overrides: Mapping[str, Override]) -> Iterable[str]:
    for delegator, override in overrides.items():
        yield delegator
        if override.delegate:
            yield override.delegate


def get_primary_names(overrides: Mapping[str, Override], names: PrimaryNames) -> Dict[str, str]:
    logger.info("Retrieving ENS primary names...")
    primary_names: Dict[str, str] = {}
    for address in override_addresses(overrides):
        name = names.name(address)
        if name:
            primary_names[address] = name
    logger.debug("primaryNames %s", primary_names)
    return primary_names
