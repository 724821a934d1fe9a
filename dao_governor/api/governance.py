from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field

from dao_governor.errors import GovernorError, GovernorErrorKind
from dao_governor.runtime.votes import VoteType
from dao_governor.service import GovernorService, get_service

router = APIRouter(prefix="/governance", tags=["governance"])

__all__ = [
    "router",
    "ProposalCreate",
    "ProposalOut",
    "VoteRequest",
    "current_account_id",
]


class ProposalCreate(BaseModel):
    to: str = Field(..., min_length=1)
    amount: int
    duration: int = Field(..., description="Voting window in minutes.")


class VoteRequest(BaseModel):
    vote: VoteType


class ProposalOut(BaseModel):
    id: int
    to: str
    amount: int
    vote_start: int
    vote_end: int
    executed: bool


class TallyOut(BaseModel):
    proposal_id: int
    for_votes: int
    against_votes: int


def current_account_id(x_account_id: Optional[str] = Header(default=None)) -> Optional[str]:
    return x_account_id


def _require_auth(account_id: Optional[str]) -> str:
    if not account_id:
        raise HTTPException(status_code=401, detail="auth_required")
    return str(account_id)


_STATUS_BY_KIND = {
    GovernorErrorKind.PROPOSAL_NOT_FOUND: 404,
    GovernorErrorKind.TX_FAILED: 502,
}


def _http_error(exc: GovernorError) -> HTTPException:
    return HTTPException(status_code=_STATUS_BY_KIND.get(exc.kind, 400), detail=exc.kind.value)


def _proposal_out(svc: GovernorService, proposal_id: int) -> ProposalOut:
    p = svc.governor.get_proposal(proposal_id)
    if p is None:
        raise HTTPException(status_code=404, detail=GovernorErrorKind.PROPOSAL_NOT_FOUND.value)
    return ProposalOut(id=proposal_id, **p.to_dict())


@router.post("/proposals")
def create_proposal(
    payload: ProposalCreate,
    account_id: Optional[str] = Depends(current_account_id),
    svc: GovernorService = Depends(get_service),
) -> Dict[str, Any]:
    _require_auth(account_id)
    try:
        pid = svc.propose(payload.to, payload.amount, payload.duration)
    except GovernorError as exc:
        raise _http_error(exc)
    return {"ok": True, "proposal_id": pid, "proposal": _proposal_out(svc, pid)}


@router.post("/proposals/{proposal_id}/vote")
def vote_proposal(
    proposal_id: int,
    payload: VoteRequest,
    account_id: Optional[str] = Depends(current_account_id),
    svc: GovernorService = Depends(get_service),
) -> Dict[str, Any]:
    voter = _require_auth(account_id)
    try:
        weight = svc.vote(voter, proposal_id, payload.vote)
    except GovernorError as exc:
        raise _http_error(exc)
    tally = svc.governor.get_proposal_votes(proposal_id)
    return {
        "ok": True,
        "weight": weight,
        "tally": TallyOut(proposal_id=proposal_id, **tally.to_dict()),
    }


@router.post("/proposals/{proposal_id}/execute")
def execute_proposal(
    proposal_id: int,
    account_id: Optional[str] = Depends(current_account_id),
    svc: GovernorService = Depends(get_service),
) -> Dict[str, Any]:
    _require_auth(account_id)
    try:
        svc.execute(proposal_id)
    except GovernorError as exc:
        raise _http_error(exc)
    return {"ok": True, "proposal": _proposal_out(svc, proposal_id)}


@router.get("/proposals")
def list_proposals(svc: GovernorService = Depends(get_service)) -> Dict[str, Any]:
    out: List[ProposalOut] = [ProposalOut(**rec) for rec in svc.governor.list_proposals()]
    return {"ok": True, "proposals": out}


@router.get("/proposals/{proposal_id}")
def get_proposal(proposal_id: int, svc: GovernorService = Depends(get_service)) -> Dict[str, Any]:
    return {"ok": True, "proposal": _proposal_out(svc, proposal_id)}


@router.get("/proposals/{proposal_id}/votes")
def get_proposal_votes(proposal_id: int, svc: GovernorService = Depends(get_service)) -> Dict[str, Any]:
    tally = svc.governor.get_proposal_votes(proposal_id)
    if tally is None:
        raise HTTPException(status_code=404, detail=GovernorErrorKind.PROPOSAL_NOT_FOUND.value)
    return {"ok": True, "tally": TallyOut(proposal_id=proposal_id, **tally.to_dict())}


@router.get("/next_proposal_id")
def next_proposal_id(svc: GovernorService = Depends(get_service)) -> Dict[str, Any]:
    return {"ok": True, "next_proposal_id": svc.governor.next_proposal_id()}


@router.get("/now")
def now(svc: GovernorService = Depends(get_service)) -> Dict[str, Any]:
    return {"ok": True, "now": svc.governor.now()}


@router.get("/unpaid")
def unpaid(svc: GovernorService = Depends(get_service)) -> Dict[str, Any]:
    return {"ok": True, "proposal_ids": svc.governor.unpaid_proposals()}


@router.get("/params")
def params(svc: GovernorService = Depends(get_service)) -> Dict[str, Any]:
    gov = svc.governor
    return {
        "ok": True,
        "governance_token": gov.governance_token,
        "quorum": gov.quorum,
        "weight_order": gov.weight_order.value,
    }
