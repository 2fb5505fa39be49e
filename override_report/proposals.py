from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .config import PAGE_SIZE, STRATEGY_NAME
from .errors import BlankProposalIdError, ProposalNotFoundError
from .models import Proposal
from .subgraph import SubgraphClient

logger = logging.getLogger(__name__)


PROPOSAL_QUERY = """
query Proposal($id: String!) {
  proposal(id: $id) {
    id
    title
    choices
    network
    snapshot
    space { id }
    strategies { name params }
  }
}
"""

VOTES_QUERY = """
query Votes($proposal: String!, $first: Int!, $skip: Int!) {
  votes(where: {proposal: $proposal}, first: $first, skip: $skip) {
    voter
    choice
  }
}
"""


def get_proposal(hub: SubgraphClient, proposal_id: str, *, strategy_name: str = STRATEGY_NAME) -> Proposal:
    logger.debug("proposalId %s", proposal_id)
    if not proposal_id or not proposal_id.strip():
        raise BlankProposalIdError()
    proposal_id = proposal_id.strip()

    data = hub.query(PROPOSAL_QUERY, {"id": proposal_id})
    raw = data.get("proposal")
    if not raw:
        raise ProposalNotFoundError(proposal_id)
    logger.debug("proposal %s", raw)
    return Proposal.from_dict(raw, override_name=strategy_name)


def get_votes(
    hub: SubgraphClient,
    proposal_id: str,
    *,
    page_size: int = PAGE_SIZE,
    max_pages: Optional[int] = None,
) -> List[Dict[str, Any]]:
    votes = hub.query_all(
        VOTES_QUERY,
        "votes",
        {"proposal": proposal_id},
        page_size=page_size,
        max_pages=max_pages,
    )
    logger.debug("votes %s", votes)
    logger.info("fetched %d votes for proposal %s", len(votes), proposal_id)
    return votes
