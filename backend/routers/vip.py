from typing import Optional

from fastapi import APIRouter, Request, Response

from schemas.vip import (TokenBalanceOut, MembershipOut, MarketplaceItemOut, TransactionOut,
                         PurchaseOut, PurchaseInput, PurchaseResponse)
from services.sessions import resolve_session
from services.vip import (get_balance, get_membership, list_marketplace, list_transactions,
                          list_purchases, purchase_item)

router = APIRouter(prefix="/api/vip", tags=["vip"])


@router.get("/tokens", response_model=TokenBalanceOut)
async def get_tokens(request: Request, response: Response):
    session = resolve_session(request, response)
    return get_balance(session)


@router.get("/membership", response_model=Optional[MembershipOut])
async def get_vip_membership(request: Request, response: Response):
    """Active membership, or null"""
    session = resolve_session(request, response)
    return get_membership(session)


@router.get("/marketplace", response_model=list[MarketplaceItemOut])
async def get_marketplace():
    return list_marketplace()


@router.get("/transactions", response_model=list[TransactionOut])
async def get_transactions(request: Request, response: Response):
    session = resolve_session(request, response)
    return list_transactions(session)


@router.get("/purchases", response_model=list[PurchaseOut])
async def get_purchases(request: Request, response: Response):
    session = resolve_session(request, response)
    return list_purchases(session)


@router.post("/purchase", response_model=PurchaseResponse)
async def purchase(input: PurchaseInput, request: Request, response: Response):
    """Spend tokens on a marketplace item"""
    session = resolve_session(request, response)
    bought, balance = purchase_item(session, input.item_id)
    return PurchaseResponse(success=True, purchase=PurchaseOut.model_validate(bought), balance=balance)
