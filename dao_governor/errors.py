# dao_governor/errors.py
"""
Closed set of governor failures.

Every engine operation either succeeds or raises exactly one of the
GovernorError subclasses below. Callers catch them like any other value;
``exc.kind`` carries the stable identifier used on the wire.
"""

from __future__ import annotations

from enum import Enum

class GovernorErrorKind(str, Enum):
    PROPOSAL_NOT_FOUND = "ProposalNotFound"
    PROPOSAL_ALREADY_EXECUTED = "ProposalAlreadyExecuted"
    QUORUM_NOT_REACHED = "QuorumNotReached"
    PROPOSAL_NOT_ACCEPTED = "ProposalNotAccepted"
    AMOUNT_SHOULD_NOT_BE_ZERO = "AmountShouldNotBeZero"
    DURATION_ERROR = "DurationError"
    VOTE_PERIOD_ENDED = "VotePeriodEnded"
    ALREADY_VOTED = "AlreadyVoted"
    TX_FAILED = "TxFailed"


class GovernorError(RuntimeError):
    kind: GovernorErrorKind

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind.value)


class ProposalNotFound(GovernorError):
    kind = GovernorErrorKind.PROPOSAL_NOT_FOUND


class ProposalAlreadyExecuted(GovernorError):
    kind = GovernorErrorKind.PROPOSAL_ALREADY_EXECUTED


class QuorumNotReached(GovernorError):
    kind = GovernorErrorKind.QUORUM_NOT_REACHED


class ProposalNotAccepted(GovernorError):
    kind = GovernorErrorKind.PROPOSAL_NOT_ACCEPTED


class AmountShouldNotBeZero(GovernorError):
    kind = GovernorErrorKind.AMOUNT_SHOULD_NOT_BE_ZERO


class DurationError(GovernorError):
    kind = GovernorErrorKind.DURATION_ERROR


class VotePeriodEnded(GovernorError):
    kind = GovernorErrorKind.VOTE_PERIOD_ENDED


class AlreadyVoted(GovernorError):
    kind = GovernorErrorKind.ALREADY_VOTED


class TxFailed(GovernorError):
    """Token oracle call failed or was rejected."""

    kind = GovernorErrorKind.TX_FAILED


class ConfigError(ValueError):
    pass
