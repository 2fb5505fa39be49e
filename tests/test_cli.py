import json

import pytest

from conftest import A, B, FakeSources, FakeSubgraph, FakeTokenRpc, proposal_dict
from override_report.cli import build_parser, main

UNIT = 10**18


def _sources():
    hub = FakeSubgraph(
        rows={"votes": [{"voter": A, "choice": 1}, {"voter": B, "choice": 2}]},
        proposal=proposal_dict(),
    )
    return FakeSources(hub=hub, rpc=FakeTokenRpc({A: B}, {A: 100 * UNIT}))


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.proposal_id == ""
    assert not args.json
    assert not args.skip_primary_names
    assert not args.debug


def test_json_output(capsys):
    assert main(["0xproposal", "--json", "--skip-primary-names"], sources=_sources()) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["overrides"][A]["delegateChoice"] == 2
    assert data["deltas"]["1"]["delta"] == 100.0


def test_text_output_with_proposal_flag(capsys):
    main(["--proposal", "0xproposal", "--skip-primary-names"], sources=_sources())

    out = capsys.readouterr().out
    assert "Proposal Fund the grants program" in out
    assert 'Choice "No" (2): -100.0' in out


def test_prompts_for_missing_proposal(monkeypatch, capsys):
    sources = _sources()
    monkeypatch.setattr("builtins.input", lambda prompt: "0xproposal")

    main(["--skip-primary-names"], sources=sources)

    assert sources.hub.queries[0]["variables"] == {"id": "0xproposal"}


def test_out_json_file(tmp_path, capsys):
    out = tmp_path / "reports" / "overrides.json"

    main(["0xproposal", "--skip-primary-names", "--out-json", str(out)], sources=_sources())

    assert json.loads(out.read_text())["primaryNames"] == {}


def test_input_error_exits_with_message():
    sources = FakeSources(hub=FakeSubgraph(proposal=None))

    with pytest.raises(SystemExit, match="Proposal not found"):
        main(["0xmissing"], sources=sources)


def test_malformed_snapshot_exits_with_message():
    sources = FakeSources(hub=FakeSubgraph(proposal=proposal_dict(snapshot="soon")))

    with pytest.raises(SystemExit, match="invalid proposal snapshot"):
        main(["0xproposal"], sources=sources)
