"""Selection of candidates for deletion.

Accepted input, first match wins:

- empty or ``none``: nothing
- ``all``: every candidate
- ``start-end``: inclusive range of list numbers, clamped to the list
- ``1,3,5``: list numbers; malformed or out-of-range entries are dropped
- ``4``: a single list number

Input mixing ``-`` and ``,`` is rejected.
"""

from collections.abc import Sequence
from typing import Optional

from deadwood.errors import SelectionError
from deadwood.models import BranchCandidate, Origin, SelectionPlan


def _number(token: str) -> Optional[int]:
    """Parse plain ASCII digits, or None for anything else."""
    token = token.strip()
    if not (token.isascii() and token.isdecimal()):
        return None
    return int(token)


def _index(token: str, count: int) -> Optional[int]:
    """A 1-based list number within ``[1, count]``, or None."""
    value = _number(token)
    if value is not None and 1 <= value <= count:
        return value
    return None


def parse_selection(text: str, count: int) -> list[int]:
    """Turn selection input into 1-based list numbers, in input order.

    Raises:
        SelectionError: If the input mixes range and list syntax
    """
    text = text.strip()
    if text in ("", "none") or count <= 0:
        return []
    if text == "all":
        return list(range(1, count + 1))

    if "-" in text and "," in text:
        raise SelectionError(f"Cannot mix ranges and lists: {text!r}")

    if "-" in text:
        start_text, _, end_text = text.partition("-")
        first, last = _number(start_text), _number(end_text)
        if first is None or last is None:
            return []
        start = max(first, 1)
        end = min(last, count)
        return list(range(start, end + 1))

    if "," in text:
        selected: list[int] = []
        for token in text.split(","):
            value = _index(token, count)
            if value is not None and value not in selected:
                selected.append(value)
        return selected

    value = _index(text, count)
    return [value] if value is not None else []


def build_plan(candidates: Sequence[BranchCandidate], indices: Sequence[int]) -> SelectionPlan:
    """Map list numbers back to branch names, split by origin."""
    plan = SelectionPlan()
    for index in indices:
        candidate = candidates[index - 1]
        if candidate.origin is Origin.LOCAL:
            plan.local.append(candidate.name)
        else:
            plan.remote.append(candidate.name)
    return plan


def order_candidates(candidates: Sequence[BranchCandidate]) -> list[BranchCandidate]:
    """Local candidates first, then remote, each in scan order."""
    local = [c for c in candidates if c.origin is Origin.LOCAL]
    remote = [c for c in candidates if c.origin is Origin.REMOTE]
    return local + remote


def resolve(candidates: Sequence[BranchCandidate], text: str) -> SelectionPlan:
    """Parse input against the displayed list and build the deletion plan."""
    return build_plan(candidates, parse_selection(text, len(candidates)))
