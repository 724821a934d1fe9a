# dao_governor/service.py
"""
Node-side wiring: config -> token ledger -> governor -> snapshot store.

The service owns the only Governor instance of the process. It persists
the governor together with the reference token ledger after every call
that changed state, including the two fail-closed paths (a vote whose
weight lookup failed, an execution whose transfer failed).
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from . import config as cfg_mod
from .errors import TxFailed
from .governor import Governor
from .runtime.atomic_store import AtomicStateStore
from .runtime.clock import Clock, SystemClock
from .runtime.proposals import ProposalId
from .runtime.token import GovernanceToken, TokenLedger

log = logging.getLogger(__name__)


class GovernorService:
    def __init__(
        self,
        cfg: Dict[str, Any],
        *,
        state_path: Optional[str] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.cfg = cfg
        self.clock = clock or SystemClock()
        self.store = AtomicStateStore(
            Path(state_path or cfg_mod.get_state_path(cfg)),
            keep_backups=cfg_mod.get_keep_backups(cfg),
        )
        self._lock = threading.Lock()

        snapshot = self.store.load()
        if snapshot is not None:
            self.ledger = TokenLedger.from_state(snapshot.get("token") or {})
            self.treasury_account = str(
                snapshot.get("treasury_account") or cfg_mod.get_treasury_account(cfg)
            )
            self.token = GovernanceToken(self.ledger, self.treasury_account)
            self.governor = Governor.from_state(snapshot["governor"], self.token, clock=self.clock)
            self._warn_on_param_drift()
            log.info(
                "Loaded governor state from %s (%s proposals)",
                self.store.path, self.governor.next_proposal_id(),
            )
        else:
            self.ledger = TokenLedger(token_id=cfg_mod.get_token(cfg))
            self.treasury_account = cfg_mod.get_treasury_account(cfg)
            self.token = GovernanceToken(self.ledger, self.treasury_account)
            self.governor = Governor(
                governance_token=cfg_mod.get_token(cfg),
                quorum=cfg_mod.get_quorum(cfg),
                token=self.token,
                clock=self.clock,
                weight_order=cfg_mod.get_weight_order(cfg),
            )
            log.info("Started fresh governor (quorum=%s)", self.governor.quorum)

    def _warn_on_param_drift(self) -> None:
        gov = self.governor
        pinned = (
            ("quorum", cfg_mod.get_quorum(self.cfg), gov.quorum),
            ("token", cfg_mod.get_token(self.cfg), gov.governance_token),
            ("weight_order", cfg_mod.get_weight_order(self.cfg).value, gov.weight_order.value),
        )
        for name, configured, stored in pinned:
            if configured != stored:
                log.warning(
                    "Configured %s %s ignored; snapshot was created with %s %s",
                    name, configured, name, stored,
                )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        return {
            "governor": self.governor.to_state(),
            "token": self.ledger.to_state(),
            "treasury_account": self.treasury_account,
        }

    def save(self) -> None:
        self.store.save(self.snapshot())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def propose(self, to: str, amount: int, duration: int) -> ProposalId:
        with self._lock:
            self.governor.propose(to, amount, duration)
            pid = self.governor.next_proposal_id()
            self.save()
            return pid

    def vote(self, caller: str, proposal_id: ProposalId, vote: str) -> int:
        with self._lock:
            try:
                weight = self.governor.vote(caller, proposal_id, vote)
            except TxFailed:
                # receipt was already consumed
                self.save()
                raise
            self.save()
            return weight

    def execute(self, proposal_id: ProposalId) -> None:
        with self._lock:
            try:
                self.governor.execute(proposal_id)
            except TxFailed:
                # executed flag is already set
                self.save()
                raise
            self.save()

    def mint(self, account: str, amount: int) -> int:
        with self._lock:
            balance = self.ledger.mint(account, amount)
            self.save()
            return balance


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

_service: Optional[GovernorService] = None
_service_lock = threading.Lock()


def init_service(
    repo_root: Optional[str] = None,
    *,
    state_path: Optional[str] = None,
) -> GovernorService:
    global _service
    with _service_lock:
        _service = GovernorService(cfg_mod.load_config(repo_root), state_path=state_path)
        return _service


def get_service() -> GovernorService:
    """FastAPI dependency; builds the service from config on first use."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = GovernorService(cfg_mod.load_config())
    return _service
