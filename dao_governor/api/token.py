from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from dao_governor.runtime.token import TokenError
from dao_governor.service import GovernorService, get_service

router = APIRouter(prefix="/token", tags=["token"])


class MintRequest(BaseModel):
    account: str = Field(..., min_length=1)
    amount: int


@router.get("/balance/{account}")
def balance(account: str, svc: GovernorService = Depends(get_service)) -> Dict[str, Any]:
    return {"ok": True, "account": account, "balance": svc.ledger.balance_of(account)}


@router.get("/total_supply")
def total_supply(svc: GovernorService = Depends(get_service)) -> Dict[str, Any]:
    return {"ok": True, "token": svc.ledger.token_id, "total_supply": svc.ledger.total_supply()}


@router.post("/mint")
def mint(payload: MintRequest, svc: GovernorService = Depends(get_service)) -> Dict[str, Any]:
    """
    Dev faucet for the reference token. Funding the treasury account
    (see /governance/params) is how proposals get paid.
    """
    try:
        new_balance = svc.mint(payload.account, payload.amount)
    except TokenError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"ok": True, "account": payload.account, "balance": new_balance}
