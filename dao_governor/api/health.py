# dao_governor/api/health.py
from __future__ import annotations

"""
Health endpoints.

- GET /health/ping     heartbeat
- GET /health/summary  counts + fixed governance parameters
"""

import time
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..service import GovernorService, get_service

router = APIRouter(prefix="/health", tags=["health"])


class PingResponse(BaseModel):
    ok: bool = True
    ts: float = Field(..., description="Server timestamp.")
    msg: str = "pong"


class HealthSummaryResponse(BaseModel):
    ok: bool = True
    proposal_count: int
    unpaid: List[int]
    quorum: int
    governance_token: str
    total_supply: int
    treasury_balance: int
    state_path: str


@router.get("/ping", response_model=PingResponse)
def ping() -> PingResponse:
    return PingResponse(ts=time.time())


@router.get("/summary", response_model=HealthSummaryResponse)
def summary(svc: GovernorService = Depends(get_service)) -> HealthSummaryResponse:
    gov = svc.governor
    return HealthSummaryResponse(
        proposal_count=gov.next_proposal_id(),
        unpaid=gov.unpaid_proposals(),
        quorum=gov.quorum,
        governance_token=gov.governance_token,
        total_supply=svc.ledger.total_supply(),
        treasury_balance=svc.ledger.balance_of(svc.treasury_account),
        state_path=str(svc.store.path),
    )
