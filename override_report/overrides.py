"""
Override detection.

A voter is "overridden" when the token contract reports an on-chain delegate
other than the voter itself. The delegate's own choice is looked up one hop
further when the delegate did not vote but delegated on-chain in turn.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .delegation import get_offchain_delegators
from .models import Choice, Override, Proposal
from .onchain import get_balances, get_delegates
from .proposals import get_votes
from .sources import DataSources
from .utils import lower_case

logger = logging.getLogger(__name__)


def collect_voters(votes: Iterable[Mapping[str, Any]]) -> Dict[str, Choice]:
    voters: Dict[str, Choice] = {}
    for vote in votes:
        voter = lower_case(vote.get("voter"))
        if voter:
            voters[voter] = vote.get("choice")
    return voters


def add_offchain_delegators(voters: Dict[str, Choice], delegators_by_delegate: Mapping[str, Sequence[str]]) -> List[str]:
    """Give every off-chain delegator its delegate's choice; return the added addresses."""
    added: List[str] = []
    for delegate, delegators in delegators_by_delegate.items():
        for delegator in delegators:
            delegator_lc = delegator.lower()
            if delegator_lc in voters:
                continue
            voters[delegator_lc] = voters.get(delegate.lower())
            added.append(delegator_lc)
    return added


def delegate_for_choice(delegates: Mapping[str, str], voter_addresses: Iterable[str], voter: str) -> Optional[str]:
    delegate = delegates.get(voter)
    if delegate and delegate not in voter_addresses and delegates.get(delegate):
        return delegates[delegate]
    return delegate


def detect_overrides(
    voters: Mapping[str, Choice],
    voter_addresses: Sequence[str],
    delegates: Mapping[str, str],
    balances: Mapping[str, float],
) -> Dict[str, Override]:
    """Pure override detection over already fetched data.

    `voters` may include off-chain delegators with inherited choices, but only
    `voter_addresses` (the direct voters) can be overridden.
    """
    direct = set(voter_addresses)
    overrides: Dict[str, Override] = {}
    for voter in voter_addresses:
        delegate = delegates.get(voter)
        if not delegate or delegate == voter:
            continue
        source = delegate_for_choice(delegates, direct, voter)
        overrides[voter] = Override(
            choice=voters.get(voter),
            balance=balances.get(voter, 0.0),
            delegate=delegate,
            delegate_choice=voters.get(source) if source else None,
        )
    return overrides


def get_overrides(proposal: Proposal, sources: DataSources) -> Dict[str, Override]:
    settings = sources.settings
    strategy = proposal.override_strategy(settings.strategy_name)

    votes = get_votes(sources.hub, proposal.id, page_size=settings.page_size, max_pages=settings.max_pages)
    voters = collect_voters(votes)
    voter_addresses = list(voters)
    total_addresses = list(voter_addresses)

    if strategy.include_offchain_delegations:
        # Scoped by space id, not display name: the ".eth" scope rule only applies to ids.
        offchain = get_offchain_delegators(
            sources.delegation_subgraph(proposal.network),
            proposal.space,
            voter_addresses,
            proposal.snapshot,
            page_size=settings.page_size,
            max_pages=settings.max_pages,
        )
        logger.debug("snapshotDelegations %s", offchain)
        total_addresses.extend(add_offchain_delegators(voters, offchain))

    logger.debug("voters %s", voters)

    rpc = sources.rpc(proposal.network)
    delegates = get_delegates(
        rpc,
        total_addresses,
        token_address=strategy.token_address,
        snapshot=proposal.snapshot,
        batch_size=settings.rpc_batch_size,
    )
    # One extra hop: delegates that did not vote may have delegated on-chain themselves.
    known = set(total_addresses)
    next_hop = sorted({d for d in delegates.values() if d not in known})
    if next_hop:
        delegates.update(
            get_delegates(
                rpc,
                next_hop,
                token_address=strategy.token_address,
                snapshot=proposal.snapshot,
                batch_size=settings.rpc_batch_size,
            )
        )
    balances = get_balances(
        rpc,
        total_addresses,
        token_address=strategy.token_address,
        decimals=strategy.decimals,
        snapshot=proposal.snapshot,
        batch_size=settings.rpc_batch_size,
    )

    overrides = detect_overrides(voters, voter_addresses, delegates, balances)
    logger.debug("overrides %s", overrides)
    logger.info("%d of %d voters have an on-chain override", len(overrides), len(voter_addresses))
    return overrides
