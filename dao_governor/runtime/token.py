# dao_governor/runtime/token.py
"""
Reference fungible token + the oracle interface the governor consumes.

The governor never touches balances directly. It talks to a TokenOracle:

    balance_of(account) -> int
    total_supply()      -> int
    transfer(to, amount)          # raises on failure / rejection

TokenLedger is a small PSP22-style integer ledger used by the node and the
tests. GovernanceToken binds a TokenLedger to the DAO treasury account so
that ``transfer`` pays out of the treasury.

Invariant: ``total_supply`` always equals the sum of all balances. Only
``mint`` changes it; transfers preserve it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Protocol, runtime_checkable


class TokenError(RuntimeError):
    pass


class InsufficientBalance(TokenError):
    pass


@runtime_checkable
class TokenOracle(Protocol):
    def balance_of(self, account: str) -> int:
        ...

    def total_supply(self) -> int:
        ...

    def transfer(self, to: str, amount: int) -> None:
        ...


@dataclass
class TokenLedger:
    """
    Integer token ledger.

    Tracks:
    - balances: account_id -> int
    - supply: running total of everything minted
    """

    token_id: str = "@governance_token"
    balances: Dict[str, int] = field(default_factory=dict)
    supply: int = 0

    def _credit(self, account_id: str, amount: int) -> None:
        self.balances[account_id] = self.balances.get(account_id, 0) + int(amount)

    def _debit(self, account_id: str, amount: int) -> None:
        have = self.balances.get(account_id, 0)
        if have < amount:
            raise InsufficientBalance(
                f"{account_id} holds {have}, cannot send {amount}"
            )
        self.balances[account_id] = have - int(amount)

    def mint(self, account_id: str, amount: int) -> int:
        if not account_id:
            raise TokenError("account required")
        if int(amount) <= 0:
            raise TokenError("mint amount must be positive")
        self._credit(account_id, amount)
        self.supply += int(amount)
        return self.balances[account_id]

    def balance_of(self, account_id: str) -> int:
        return int(self.balances.get(account_id, 0))

    def total_supply(self) -> int:
        return int(self.supply)

    def transfer(self, sender: str, to: str, amount: int) -> None:
        if not to:
            raise TokenError("recipient required")
        if int(amount) <= 0:
            raise TokenError("transfer amount must be positive")
        self._debit(sender, int(amount))
        self._credit(to, int(amount))

    def to_state(self) -> Dict[str, Any]:
        return {
            "token_id": self.token_id,
            "balances": dict(self.balances),
            "supply": self.supply,
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "TokenLedger":
        balances = {str(k): int(v) for k, v in (state.get("balances") or {}).items()}
        return cls(
            token_id=str(state.get("token_id", "@governance_token")),
            balances=balances,
            supply=int(state.get("supply", sum(balances.values()))),
        )


class GovernanceToken:
    """
    TokenOracle over a TokenLedger, paying out of ``holder``.

    ``holder`` is the DAO treasury account whose balance funds executed
    proposals.
    """

    def __init__(self, ledger: TokenLedger, holder: str) -> None:
        self.ledger = ledger
        self.holder = holder

    @property
    def token_id(self) -> str:
        return self.ledger.token_id

    def balance_of(self, account: str) -> int:
        return self.ledger.balance_of(account)

    def total_supply(self) -> int:
        return self.ledger.total_supply()

    def transfer(self, to: str, amount: int) -> None:
        self.ledger.transfer(self.holder, to, amount)
