import json

import pytest

from conftest import A, B, C, FakeSources, FakeSubgraph, FakeTokenRpc, proposal_dict
from override_report.errors import BlankProposalIdError, ProposalNotFoundError, UnsupportedStrategyError
from override_report.models import Delta, Override, Proposal
from override_report.names import PrimaryNames
from override_report.report import (
    OverrideReport,
    build_report,
    format_report_text,
    get_override_report,
    report_to_json,
)

UNIT = 10**18


class StaticResolver:
    def __init__(self, names):
        self.names = names

    def reverse_name(self, address):
        return self.names.get(address)

    def resolve_address(self, name):
        return next((a for a, n in self.names.items() if n == name), None)


def _sources(votes, delegates, balances, proposal=None):
    hub = FakeSubgraph(rows={"votes": votes}, proposal=proposal or proposal_dict())
    return FakeSources(hub=hub, rpc=FakeTokenRpc(delegates, balances))


def test_end_to_end_scenario():
    sources = _sources(
        [{"voter": A, "choice": 1}, {"voter": B, "choice": 2}],
        {A: B},
        {A: 100 * UNIT},
    )
    names = PrimaryNames(StaticResolver({B: "bob.eth"}))

    report = build_report(Proposal.from_dict(proposal_dict()), sources, names=names)

    assert report.to_dict() == {
        "overrides": {A: {"choice": 1, "balance": 100.0, "delegate": B, "delegateChoice": 2}},
        "deltas": {
            "1": {"name": "Yes", "delta": 100.0, "delegates": [], "delegators": [A]},
            "2": {"name": "No", "delta": -100.0, "delegates": [B], "delegators": []},
        },
        "primaryNames": {B: "bob.eth"},
    }


def test_matching_choice_scenario_has_override_but_no_deltas():
    sources = _sources([{"voter": A, "choice": 1}, {"voter": B, "choice": 1}], {A: B}, {A: 100 * UNIT})

    report = build_report(Proposal.from_dict(proposal_dict()), sources, primary_names=False)

    assert list(report.overrides) == [A]
    assert report.deltas == {}
    assert report.primary_names == {}


def test_transitive_scenario():
    # A -> B -> C, only A and C voted.
    sources = _sources([{"voter": A, "choice": 1}, {"voter": C, "choice": 2}], {A: B, B: C}, {A: 3 * UNIT})

    report = build_report(Proposal.from_dict(proposal_dict()), sources, primary_names=False)

    assert report.overrides[A].delegate == B
    assert report.overrides[A].delegate_choice == 2
    assert report.deltas[2].delta == -3.0


def test_get_override_report_fetches_proposal():
    sources = _sources([{"voter": A, "choice": 1}], {}, {})

    report = get_override_report("0xproposal", sources, primary_names=False)

    assert report.proposal.title == "Fund the grants program"
    assert sources.hub.queries[0]["variables"] == {"id": "0xproposal"}


@pytest.mark.parametrize("proposal_id", ["", "   "])
def test_blank_proposal_id(proposal_id):
    with pytest.raises(BlankProposalIdError):
        get_override_report(proposal_id, FakeSources())


def test_proposal_not_found():
    with pytest.raises(ProposalNotFoundError):
        get_override_report("0xmissing", FakeSources(hub=FakeSubgraph(proposal=None)))


def test_unsupported_strategy_produces_no_report():
    proposal = proposal_dict(strategies=[{"name": "erc20-balance-of", "params": {}}])
    sources = _sources([], {}, {}, proposal=proposal)

    with pytest.raises(UnsupportedStrategyError):
        get_override_report("0xproposal", sources)
    assert [q.get("field") for q in sources.hub.queries] == [None]


def _report():
    return OverrideReport(
        proposal=Proposal.from_dict(proposal_dict()),
        overrides={A: Override(choice=1, balance=100.0, delegate=B, delegate_choice=2)},
        deltas={
            1: Delta(name="Yes", delta=100.0, delegators=[A]),
            7: Delta(name=None, delta=-100.0, delegates=[B]),
        },
        primary_names={A: "alice.eth"},
    )


def test_format_report_text():
    text = format_report_text(_report())

    assert text.splitlines() == [
        "",
        "Proposal Fund the grants program",
        "=" * len("Proposal Fund the grants program"),
        "",
        "Overriding Delegators",
        "=====================",
        f"{A} (alice.eth)",
        "",
        "Overridden Vote Deltas",
        "======================",
        "",
        'Choice "Yes" (1): 100.0',
        "Overriding Delegators:",
        f"    {A} (alice.eth)",
        "",
        "Choice 7: -100.0",
    ]


def test_format_empty_report():
    report = OverrideReport(proposal=Proposal.from_dict(proposal_dict()), overrides={}, deltas={})

    assert format_report_text(report).count("None") == 2


def test_report_to_json():
    data = json.loads(report_to_json(_report()))

    assert set(data) == {"overrides", "deltas", "primaryNames"}
    assert data["deltas"]["7"]["name"] is None
