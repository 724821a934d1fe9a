# dao_governor/runtime/proposals.py
"""
Proposal registry.

Proposals are keyed by a sequential id starting at 1. Ids are allocated
by pre-incrementing the counter, so ``next_proposal_id`` always equals
the id most recently handed out (i.e. the number of proposals created).
Records are never deleted; the only mutation is ``mark_executed``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterator, List, Optional

ONE_MINUTE = 60

ProposalId = int


@dataclass
class Proposal:
    to: str
    vote_start: int
    vote_end: int
    executed: bool = False
    amount: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Proposal":
        return cls(
            to=str(raw["to"]),
            vote_start=int(raw["vote_start"]),
            vote_end=int(raw["vote_end"]),
            executed=bool(raw.get("executed", False)),
            amount=int(raw["amount"]),
        )


class ProposalStore:
    def __init__(self) -> None:
        self._proposals: Dict[ProposalId, Proposal] = {}
        self._next_id: ProposalId = 0

    @property
    def next_proposal_id(self) -> ProposalId:
        return self._next_id

    def allocate_id(self) -> ProposalId:
        self._next_id += 1
        return self._next_id

    def insert(self, proposal_id: ProposalId, proposal: Proposal) -> None:
        if proposal_id in self._proposals:
            raise KeyError(f"proposal {proposal_id} already stored")
        if proposal_id > self._next_id:
            raise KeyError(f"proposal {proposal_id} was never allocated")
        self._proposals[proposal_id] = proposal

    def contains(self, proposal_id: ProposalId) -> bool:
        return proposal_id in self._proposals

    def get(self, proposal_id: ProposalId) -> Optional[Proposal]:
        """Return a detached copy so callers can't mutate stored state."""
        p = self._proposals.get(proposal_id)
        return replace(p) if p is not None else None

    def mark_executed(self, proposal_id: ProposalId) -> None:
        p = self._proposals[proposal_id]
        if p.executed:
            raise ValueError(f"proposal {proposal_id} already executed")
        p.executed = True

    def ids(self) -> List[ProposalId]:
        return sorted(self._proposals)

    def __len__(self) -> int:
        return len(self._proposals)

    def __iter__(self) -> Iterator[ProposalId]:
        return iter(self.ids())

    # ------------------------------------------------------------------
    # Snapshot helpers
    # ------------------------------------------------------------------

    def to_state(self) -> Dict[str, Any]:
        return {
            "next_proposal_id": self._next_id,
            "proposals": {str(pid): p.to_dict() for pid, p in self._proposals.items()},
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "ProposalStore":
        store = cls()
        raw = state.get("proposals") or {}
        for pid, rec in raw.items():
            store._proposals[int(pid)] = Proposal.from_dict(rec)
        highest = max(store._proposals, default=0)
        store._next_id = max(int(state.get("next_proposal_id", 0) or 0), highest)
        return store
