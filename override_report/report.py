from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional

from .deltas import get_deltas
from .models import Delta, Override, Proposal
from .names import EnsResolver, PrimaryNames, get_primary_names
from .overrides import get_overrides
from .proposals import get_proposal
from .sources import DataSources

logger = logging.getLogger(__name__)


@dataclass
class OverrideReport:
    proposal: Proposal
    overrides: Dict[str, Override]
    deltas: Dict[Hashable, Delta]
    primary_names: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overrides": {voter: o.to_dict() for voter, o in self.overrides.items()},
            "deltas": {_json_key(choice): d.to_dict() for choice, d in self.deltas.items()},
            "primaryNames": dict(self.primary_names),
        }


def _json_key(choice: Hashable) -> str:
    return "null" if choice is None else str(choice)


def build_report(
    proposal: Proposal,
    sources: DataSources,
    *,
    primary_names: bool = True,
    names: Optional[PrimaryNames] = None,
) -> OverrideReport:
    overrides = get_overrides(proposal, sources)
    report = OverrideReport(
        proposal=proposal,
        overrides=overrides,
        deltas=get_deltas(proposal.choices, overrides),
    )
    if primary_names:
        if names is None:
            settings = sources.settings
            names = PrimaryNames(EnsResolver(sources.rpc(settings.ens_network), registry=settings.ens_registry))
        report.primary_names = get_primary_names(overrides, names)
    logger.debug("report %s", report)
    return report


def get_override_report(proposal_id: str, sources: DataSources, *, primary_names: bool = True) -> OverrideReport:
    proposal = get_proposal(sources.hub, proposal_id, strategy_name=sources.settings.strategy_name)
    return build_report(proposal, sources, primary_names=primary_names)


def report_to_json(report: OverrideReport) -> str:
    return json.dumps(report.to_dict(), indent=2)


def _with_name(address: str, primary_names: Dict[str, str]) -> str:
    name = primary_names.get(address)
    return f"{address} ({name})" if name else address


def _heading(title: str) -> str:
    return f"{title}\n{'=' * len(title)}"


def format_report_text(report: OverrideReport) -> str:
    lines: List[str] = ["", _heading(f"Proposal {report.proposal.title}"), "", _heading("Overriding Delegators")]

    if report.overrides:
        lines.extend(_with_name(delegator, report.primary_names) for delegator in report.overrides)
    else:
        lines.append("None")

    lines.extend(["", _heading("Overridden Vote Deltas")])

    if report.deltas:
        for choice, details in report.deltas.items():
            display = f'"{details.name}" ({choice})' if details.name else f"{choice}"
            lines.append("")
            lines.append(f"Choice {display}: {details.delta}")
            if details.delegators:
                lines.append("Overriding Delegators:")
                lines.extend(f"    {_with_name(d, report.primary_names)}" for d in details.delegators)
    else:
        lines.append("None")

    return "\n".join(lines) + "\n"
