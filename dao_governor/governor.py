# dao_governor/governor.py
"""
Governor: token-weighted spending proposals.

Lifecycle
---------
propose  -> stores a Proposal (executed=False) and a zeroed ProposalVote
vote     -> one receipt per (proposal, account); weight = share of supply
            in percentage points, read live from the token oracle
execute  -> quorum + strict majority, then flips ``executed`` and pays
            ``amount`` to the beneficiary through the oracle, once

Two writes are committed before a later step can fail, on purpose:

- ``vote`` records the receipt before asking the oracle for balances. If
  the oracle fails, the account has still used its vote.
- ``execute`` sets ``executed`` before the transfer. If the transfer fails
  the proposal stays executed (no retry) and its id lands in
  ``unpaid_proposals()`` for operators to settle by hand.

Every public mutator runs under one lock, so check-then-mutate sequences
never interleave when the governor sits behind a threaded server.

Voting weight uses the caller's *current* balance and supply, not a
snapshot taken at proposal creation. Balances moved between votes count
again for the receiving account.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Union

from .errors import (
    AlreadyVoted,
    AmountShouldNotBeZero,
    DurationError,
    ProposalAlreadyExecuted,
    ProposalNotAccepted,
    ProposalNotFound,
    QuorumNotReached,
    TxFailed,
    VotePeriodEnded,
)
from .runtime.clock import Clock, SystemClock
from .runtime.proposals import ONE_MINUTE, Proposal, ProposalId, ProposalStore
from .runtime.token import TokenOracle
from .runtime.votes import ProposalVote, VoteLedger, VoteType, WeightOrder, compute_weight

log = logging.getLogger(__name__)

MAX_QUORUM = 255


class Governor:
    def __init__(
        self,
        governance_token: str,
        quorum: int,
        token: TokenOracle,
        *,
        clock: Optional[Clock] = None,
        weight_order: Union[WeightOrder, str] = WeightOrder.MULTIPLY_FIRST,
    ) -> None:
        quorum = int(quorum)
        if not 0 <= quorum <= MAX_QUORUM:
            raise ValueError(f"quorum must be within 0..{MAX_QUORUM}, got {quorum}")
        if not governance_token:
            raise ValueError("governance_token is required")

        self._governance_token = str(governance_token)
        self._quorum = quorum
        self._weight_order = WeightOrder(weight_order)
        self._token = token
        self._clock = clock or SystemClock()

        self._proposals = ProposalStore()
        self._votes = VoteLedger()
        self._unpaid: set = set()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Fixed parameters
    # ------------------------------------------------------------------

    @property
    def governance_token(self) -> str:
        return self._governance_token

    @property
    def quorum(self) -> int:
        return self._quorum

    @property
    def weight_order(self) -> WeightOrder:
        return self._weight_order

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def propose(self, to: str, amount: int, duration: int) -> None:
        """
        Open a proposal paying ``amount`` to ``to``; voting lasts
        ``duration`` minutes. The new id is ``next_proposal_id()``.
        """
        if amount <= 0:
            raise AmountShouldNotBeZero()
        if duration <= 0:
            raise DurationError()

        with self._lock:
            now = self._clock.now()
            proposal = Proposal(
                to=to,
                vote_start=now,
                vote_end=now + int(duration) * ONE_MINUTE,
                executed=False,
                amount=int(amount),
            )
            pid = self._proposals.allocate_id()
            self._proposals.insert(pid, proposal)
            self._votes.open_tally(pid)

        log.info("proposal %s opened: %s to %s, voting until %s", pid, amount, to, proposal.vote_end)

    def vote(self, caller: str, proposal_id: ProposalId, vote: Union[VoteType, str]) -> int:
        """
        Cast ``caller``'s vote. Returns the weight that was added.
        """
        vote = VoteType(vote)
        with self._lock:
            p = self._proposals.get(proposal_id)
            if p is None:
                raise ProposalNotFound()
            if p.executed:
                raise ProposalAlreadyExecuted()
            if p.vote_end < self._clock.now():
                raise VotePeriodEnded()
            if self._votes.has_voted(proposal_id, caller):
                log.debug("duplicate vote by %s on %s rejected", caller, proposal_id)
                raise AlreadyVoted()

            self._votes.record_receipt(proposal_id, caller)

            weight = self._resolve_weight(caller)
            tally = self._votes.add_weight(proposal_id, vote, weight)

        log.info(
            "vote on %s by %s: %s weight=%s (for=%s against=%s)",
            proposal_id, caller, vote.value, weight, tally.for_votes, tally.against_votes,
        )
        return weight

    def execute(self, proposal_id: ProposalId) -> None:
        with self._lock:
            p = self._proposals.get(proposal_id)
            if p is None:
                raise ProposalNotFound()
            if p.executed:
                raise ProposalAlreadyExecuted()

            tally = self._votes.tally(proposal_id)
            if tally is not None:
                if tally.total < self._quorum:
                    log.debug("proposal %s below quorum: %s < %s", proposal_id, tally.total, self._quorum)
                    raise QuorumNotReached()
                if tally.for_votes <= tally.against_votes:
                    raise ProposalNotAccepted()

            self._proposals.mark_executed(proposal_id)

            try:
                self._token.transfer(p.to, p.amount)
            except Exception as exc:
                self._unpaid.add(proposal_id)
                log.error(
                    "proposal %s executed but transfer of %s to %s failed",
                    proposal_id, p.amount, p.to, exc_info=True,
                )
                raise TxFailed(f"transfer failed: {exc}") from exc

        log.info("proposal %s executed: paid %s to %s", proposal_id, p.amount, p.to)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_proposal(self, proposal_id: ProposalId) -> Optional[Proposal]:
        return self._proposals.get(proposal_id)

    def next_proposal_id(self) -> ProposalId:
        return self._proposals.next_proposal_id

    def now(self) -> int:
        return self._clock.now()

    def get_proposal_votes(self, proposal_id: ProposalId) -> Optional[ProposalVote]:
        return self._votes.tally(proposal_id)

    def has_voted(self, proposal_id: ProposalId, account: str) -> bool:
        return self._votes.has_voted(proposal_id, account)

    def list_proposals(self) -> List[Dict[str, Any]]:
        with self._lock:
            out = []
            for pid in self._proposals.ids():
                rec = self._proposals.get(pid).to_dict()
                rec["id"] = pid
                out.append(rec)
            return out

    def unpaid_proposals(self) -> List[ProposalId]:
        """Executed proposals whose payout transfer failed."""
        with self._lock:
            return sorted(self._unpaid)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_weight(self, caller: str) -> int:
        try:
            balance = int(self._token.balance_of(caller))
            supply = int(self._token.total_supply())
            if balance < 0 or supply < 0:
                raise ValueError(f"negative oracle reading: balance={balance} supply={supply}")
            return compute_weight(balance, supply, self._weight_order)
        except Exception as exc:
            log.warning("weight lookup for %s failed: %s", caller, exc)
            raise TxFailed(f"weight lookup failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def to_state(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "governance_token": self._governance_token,
                "quorum": self._quorum,
                "weight_order": self._weight_order.value,
                "proposals": self._proposals.to_state(),
                "votes": self._votes.to_state(),
                "unpaid": sorted(self._unpaid),
            }

    @classmethod
    def from_state(
        cls,
        state: Dict[str, Any],
        token: TokenOracle,
        *,
        clock: Optional[Clock] = None,
    ) -> "Governor":
        gov = cls(
            governance_token=state["governance_token"],
            quorum=int(state["quorum"]),
            token=token,
            clock=clock,
            weight_order=state.get("weight_order", WeightOrder.MULTIPLY_FIRST.value),
        )
        gov._proposals = ProposalStore.from_state(state.get("proposals") or {})
        gov._votes = VoteLedger.from_state(state.get("votes") or {})
        gov._unpaid = {int(pid) for pid in state.get("unpaid") or []}
        return gov
