"""
Off-chain (Snapshot) delegations, read from the per-network delegation subgraph.

The result is the reverse mapping: for every address of interest, the
delegators whose effective off-chain delegate is that address. A delegation
scoped to the proposal's space wins over a global one for the same delegator.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from .config import PAGE_SIZE
from .models import LATEST, Snapshot
from .subgraph import SubgraphClient
from .utils import is_address, to_checksum_address

logger = logging.getLogger(__name__)


GLOBAL_SPACE = ""
ENS_SUFFIX = ".eth"


def delegations_query(snapshot: Snapshot) -> str:
    block_var = ", $block: Int!" if snapshot != LATEST else ""
    block_arg = ", block: {number: $block}" if snapshot != LATEST else ""
    return (
        f"query Delegations($spaces: [String!]!, $first: Int!, $skip: Int!{block_var}) {{\n"
        f"  delegations(where: {{space_in: $spaces}}, first: $first, skip: $skip{block_arg}) {{\n"
        "    delegator\n"
        "    space\n"
        "    delegate\n"
        "  }\n"
        "}\n"
    )


def space_scopes(space: str) -> List[str]:
    scopes = [GLOBAL_SPACE, space]
    if space.endswith(ENS_SUFFIX) and len(space) > len(ENS_SUFFIX):
        scopes.append(space[: -len(ENS_SUFFIX)])
    return scopes


def resolve_delegators(
    delegations: Sequence[Dict[str, Any]],
    addresses: Sequence[str],
) -> Dict[str, List[str]]:
    addresses_lc = {a.lower() for a in addresses}
    relevant = [
        d
        for d in delegations
        if is_address(d.get("delegator"))
        and is_address(d.get("delegate"))
        and d["delegate"].lower() in addresses_lc
        and d["delegator"].lower() not in addresses_lc
    ]

    delegate_of: Dict[str, str] = {}
    for d in relevant:
        if (d.get("space") or GLOBAL_SPACE) == GLOBAL_SPACE:
            delegate_of[d["delegator"].lower()] = d["delegate"].lower()
    for d in relevant:
        if (d.get("space") or GLOBAL_SPACE) != GLOBAL_SPACE:
            delegate_of[d["delegator"].lower()] = d["delegate"].lower()

    reverse: Dict[str, List[str]] = {}
    for address in addresses:
        reverse[address] = [
            to_checksum_address(delegator)
            for delegator, delegate in delegate_of.items()
            if delegate == address.lower()
        ]
    return reverse


def get_offchain_delegators(
    subgraph: SubgraphClient,
    space: str,
    addresses: Sequence[str],
    snapshot: Snapshot,
    *,
    page_size: int = PAGE_SIZE,
    max_pages: Optional[int] = None,
) -> Dict[str, List[str]]:
    variables: Dict[str, Any] = {"spaces": space_scopes(space)}
    if snapshot != LATEST:
        variables["block"] = int(snapshot)

    delegations = subgraph.query_all(
        delegations_query(snapshot),
        "delegations",
        variables,
        page_size=page_size,
        max_pages=max_pages,
    )
    logger.info("fetched %d off-chain delegations for %s", len(delegations), space)
    return resolve_delegators(delegations, addresses)
