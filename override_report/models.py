from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .config import STRATEGY_NAME
from .errors import InvalidStrategyParamsError, ProposalError, UnsupportedStrategyError
from .utils import is_address

logger = logging.getLogger(__name__)


LATEST = "latest"

Snapshot = Union[int, str]
Choice = Any


def parse_snapshot(value: Any) -> Snapshot:
    if value is None or value == LATEST:
        return LATEST
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ProposalError(f"invalid proposal snapshot {value!r}") from e


@dataclass(frozen=True)
class OverrideStrategy:
    token_address: str
    decimals: int
    include_offchain_delegations: bool = False
    name: str = STRATEGY_NAME


@dataclass(frozen=True)
class UnsupportedStrategy:
    name: str
    params: Mapping[str, Any] = field(default_factory=dict)


Strategy = Union[OverrideStrategy, UnsupportedStrategy]


def parse_strategy(raw: Mapping[str, Any], *, override_name: str = STRATEGY_NAME) -> Strategy:
    name = str(raw.get("name") or "")
    params = raw.get("params") or {}
    if name != override_name:
        return UnsupportedStrategy(name=name, params=params)

    address = params.get("address")
    if not is_address(address):
        raise InvalidStrategyParamsError(f"{name}: invalid token address {address!r}")
    try:
        decimals = int(params.get("decimals"))
    except (TypeError, ValueError) as e:
        raise InvalidStrategyParamsError(f"{name}: invalid decimals {params.get('decimals')!r}") from e
    return OverrideStrategy(
        token_address=address,
        decimals=decimals,
        include_offchain_delegations=bool(params.get("includeSnapshotDelegations")),
        name=name,
    )


@dataclass(frozen=True)
class Proposal:
    id: str
    title: str
    choices: Tuple[str, ...]
    space: str
    network: str
    snapshot: Snapshot
    strategies: Tuple[Strategy, ...]

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], *, override_name: str = STRATEGY_NAME) -> "Proposal":
        space = raw.get("space") or {}
        return cls(
            id=str(raw["id"]),
            title=str(raw.get("title") or ""),
            choices=tuple(raw.get("choices") or ()),
            space=str(space.get("id") or ""),
            network=str(raw.get("network") or "1"),
            snapshot=parse_snapshot(raw.get("snapshot")),
            strategies=tuple(parse_strategy(s, override_name=override_name) for s in raw.get("strategies") or ()),
        )

    def override_strategy(self, strategy_name: str = STRATEGY_NAME) -> OverrideStrategy:
        matches = [s for s in self.strategies if isinstance(s, OverrideStrategy)]
        if not matches:
            raise UnsupportedStrategyError(strategy_name)
        if len(matches) > 1:
            logger.warning("proposal %s lists %s %d times; using the first", self.id, matches[0].name, len(matches))
        return matches[0]


@dataclass(frozen=True)
class Override:
    choice: Choice
    balance: float
    delegate: str
    delegate_choice: Optional[Choice] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "choice": self.choice,
            "balance": self.balance,
            "delegate": self.delegate,
            "delegateChoice": self.delegate_choice,
        }


@dataclass
class Delta:
    name: Optional[str]
    delta: float = 0.0
    delegates: List[str] = field(default_factory=list)
    delegators: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "delta": self.delta,
            "delegates": list(self.delegates),
            "delegators": list(self.delegators),
        }
