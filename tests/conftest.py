from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from override_report.config import Settings
from override_report.onchain import BALANCE_OF_SELECTOR, DELEGATES_SELECTOR
from override_report.sources import DataSources
from override_report.utils import pad32

TOKEN = "0x1111111111111111111111111111111111111111"

A = "0x" + "a" * 40
B = "0x" + "b" * 40
C = "0x" + "c" * 40
D = "0x" + "d" * 40
E = "0x" + "e" * 40


def word(value: int) -> str:
    return "0x" + pad32(format(value, "x"))


def address_word(address: str) -> str:
    return "0x" + pad32(address.lower()[2:])


class FakeSubgraph:
    def __init__(self, rows: Optional[Dict[str, List[Dict[str, Any]]]] = None, proposal: Optional[dict] = None):
        self.rows = rows or {}
        self.proposal = proposal
        self.queries: List[Dict[str, Any]] = []

    def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.queries.append({"query": query, "variables": variables})
        return {"proposal": self.proposal}

    def query_all(self, query, field, variables=None, *, page_size=1000, max_pages=None):
        self.queries.append({"query": query, "field": field, "variables": variables})
        return list(self.rows.get(field, []))


class FakeTokenRpc:
    """Answers delegates()/balanceOf() eth_calls for one token from plain dicts."""

    def __init__(self, delegates: Dict[str, str], balances: Dict[str, int], token: str = TOKEN):
        self.delegates = {k.lower(): v for k, v in delegates.items()}
        self.balances = {k.lower(): v for k, v in balances.items()}
        self.token = token
        self.batches: List[List[Any]] = []

    def _eth_call(self, call: Dict[str, str], tag: str) -> str:
        assert call["to"] == self.token
        selector, arg = call["data"][2:10], call["data"][10:]
        address = "0x" + arg[-40:]
        if selector == DELEGATES_SELECTOR:
            delegate = self.delegates.get(address)
            return address_word(delegate) if delegate else word(0)
        if selector == BALANCE_OF_SELECTOR:
            return word(self.balances.get(address, 0))
        raise AssertionError(f"unexpected selector {selector}")

    def call_batch(self, calls):
        self.batches.append(list(calls))
        return [self._eth_call(*params) for _method, params in calls]


class FakeSources(DataSources):
    def __init__(self, hub=None, delegation=None, rpc=None, settings: Optional[Settings] = None):
        super().__init__(settings or Settings())
        self._fake_hub = hub or FakeSubgraph()
        self._fake_delegation = delegation or FakeSubgraph()
        self._fake_rpc = rpc

    @property
    def hub(self):
        return self._fake_hub

    def delegation_subgraph(self, network: str):
        return self._fake_delegation

    def rpc(self, network: str):
        return self._fake_rpc


def proposal_dict(
    *,
    choices=("Yes", "No"),
    include_offchain: bool = False,
    snapshot: str = "17000000",
    strategies: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    params: Dict[str, Any] = {"address": TOKEN, "decimals": 18, "symbol": "TKN"}
    if include_offchain:
        params["includeSnapshotDelegations"] = True
    return {
        "id": "0xproposal",
        "title": "Fund the grants program",
        "choices": list(choices),
        "network": "1",
        "snapshot": snapshot,
        "space": {"id": "example.eth", "name": "Example DAO"},
        "strategies": strategies
        if strategies is not None
        else [
            {"name": "ticket", "params": {}},
            {"name": "erc20-votes-with-override", "params": params},
        ],
    }


@pytest.fixture
def settings() -> Settings:
    return Settings()
