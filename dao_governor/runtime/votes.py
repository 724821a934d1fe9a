# dao_governor/runtime/votes.py
"""
Vote ledger: per-proposal weighted tallies + per-(proposal, account)
receipts.

Weights are integer percentage points of total supply. Two truncation
orders exist and give different results for the same balances:

    MULTIPLY_FIRST  balance * 100 // supply   (60 of 100 -> 60, 5 of 1000 -> 0)
    DIVIDE_FIRST    balance // supply * 100   (anything below the whole
                                               supply truncates to 0)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from .proposals import ProposalId


class VoteType(str, Enum):
    AGAINST = "against"
    FOR = "for"


class WeightOrder(str, Enum):
    MULTIPLY_FIRST = "multiply_first"
    DIVIDE_FIRST = "divide_first"


def compute_weight(
    balance: int, total_supply: int, order: WeightOrder = WeightOrder.MULTIPLY_FIRST
) -> int:
    """
    Voting weight of ``balance`` against ``total_supply``.

    Raises ZeroDivisionError on an empty supply; the governor turns that
    into TxFailed.
    """
    balance = int(balance)
    total_supply = int(total_supply)
    if total_supply == 0:
        raise ZeroDivisionError("total supply is zero")
    if WeightOrder(order) is WeightOrder.DIVIDE_FIRST:
        return balance // total_supply * 100
    return balance * 100 // total_supply


@dataclass
class ProposalVote:
    for_votes: int = 0
    against_votes: int = 0

    @property
    def total(self) -> int:
        return self.for_votes + self.against_votes

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class VoteLedger:
    def __init__(self) -> None:
        self._tallies: Dict[ProposalId, ProposalVote] = {}
        self._receipts: Set[Tuple[ProposalId, str]] = set()

    # ----- tallies -----

    def open_tally(self, proposal_id: ProposalId) -> None:
        if proposal_id in self._tallies:
            raise KeyError(f"tally for {proposal_id} already exists")
        self._tallies[proposal_id] = ProposalVote()

    def tally(self, proposal_id: ProposalId) -> Optional[ProposalVote]:
        t = self._tallies.get(proposal_id)
        return replace(t) if t is not None else None

    def add_weight(self, proposal_id: ProposalId, vote: VoteType, weight: int) -> ProposalVote:
        if weight < 0:
            raise ValueError("weight must be non-negative")
        t = self._tallies[proposal_id]
        if VoteType(vote) is VoteType.FOR:
            t.for_votes += int(weight)
        else:
            t.against_votes += int(weight)
        return replace(t)

    # ----- receipts -----

    def has_voted(self, proposal_id: ProposalId, account: str) -> bool:
        return (proposal_id, account) in self._receipts

    def record_receipt(self, proposal_id: ProposalId, account: str) -> None:
        key = (proposal_id, account)
        if key in self._receipts:
            raise KeyError(f"{account} already voted on {proposal_id}")
        self._receipts.add(key)

    def voters(self, proposal_id: ProposalId) -> List[str]:
        return sorted(acct for pid, acct in self._receipts if pid == proposal_id)

    # ----- snapshot -----

    def to_state(self) -> Dict[str, Any]:
        return {
            "tallies": {str(pid): t.to_dict() for pid, t in self._tallies.items()},
            "receipts": sorted([pid, acct] for pid, acct in self._receipts),
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "VoteLedger":
        ledger = cls()
        for pid, rec in (state.get("tallies") or {}).items():
            ledger._tallies[int(pid)] = ProposalVote(
                for_votes=int(rec.get("for_votes", 0)),
                against_votes=int(rec.get("against_votes", 0)),
            )
        for pid, acct in state.get("receipts") or []:
            ledger._receipts.add((int(pid), str(acct)))
        return ledger
