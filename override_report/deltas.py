from __future__ import annotations

import logging
from typing import Any, Dict, Hashable, Mapping, Optional, Sequence

from .models import Choice, Delta, Override

logger = logging.getLogger(__name__)


def first_choice(choice: Choice) -> Optional[Hashable]:
    """Bucket key for a ballot: the first preference of ranked/approval ballots,
    the heaviest option of weighted ballots, the value itself otherwise."""
    if isinstance(choice, (list, tuple)):
        return choice[0] if choice else None
    if isinstance(choice, Mapping):
        if not choice:
            return None
        key = max(choice, key=lambda k: choice[k])
        try:
            return int(key)
        except (TypeError, ValueError):
            return key
    return choice


def choices_equal(a: Choice, b: Choice) -> bool:
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(x == y for x, y in zip(a, b))
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return {str(k): v for k, v in a.items()} == {str(k): v for k, v in b.items()}
    if isinstance(a, (list, tuple, Mapping)) or isinstance(b, (list, tuple, Mapping)):
        return False
    return a == b


def choice_name(choices: Sequence[str], choice: Any) -> Optional[str]:
    if isinstance(choice, bool):
        return None
    try:
        index = int(choice)
    except (TypeError, ValueError):
        return None
    if 1 <= index <= len(choices):
        return choices[index - 1]
    return None


def get_deltas(choices: Sequence[str], overrides: Mapping[str, Override]) -> Dict[Hashable, Delta]:
    deltas: Dict[Hashable, Delta] = {}

    def bucket(key: Hashable) -> Delta:
        if key not in deltas:
            deltas[key] = Delta(name=choice_name(choices, key))
        return deltas[key]

    for delegator, override in overrides.items():
        # No power moved when the delegate voted the same way.
        if choices_equal(override.choice, override.delegate_choice):
            continue

        own = bucket(first_choice(override.choice))
        own.delta += override.balance
        if delegator not in own.delegators:
            own.delegators.append(delegator)

        delegate_key = first_choice(override.delegate_choice)
        if delegate_key is not None:
            theirs = bucket(delegate_key)
            theirs.delta -= override.balance
            if override.delegate not in theirs.delegates:
                theirs.delegates.append(override.delegate)

    logger.debug("deltas %s", deltas)
    return deltas
