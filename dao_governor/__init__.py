# dao_governor/__init__.py
"""
Token-weighted DAO governor: proposals, weighted votes, one-shot payouts.
"""

from .errors import GovernorError, GovernorErrorKind
from .governor import Governor
from .runtime.clock import ManualClock, SystemClock
from .runtime.proposals import Proposal
from .runtime.token import GovernanceToken, TokenLedger, TokenOracle
from .runtime.votes import ProposalVote, VoteType, WeightOrder

__all__ = [
    "Governor",
    "GovernorError",
    "GovernorErrorKind",
    "GovernanceToken",
    "ManualClock",
    "Proposal",
    "ProposalVote",
    "SystemClock",
    "TokenLedger",
    "TokenOracle",
    "VoteType",
    "WeightOrder",
]
