from datetime import datetime
from typing import Optional

from schemas.common import ApiModel


class TokenBalanceOut(ApiModel):
    balance: int
    total_earned: int
    total_spent: int


class MembershipOut(ApiModel):
    id: int
    membership_type: str
    is_active: bool
    expires_at: Optional[datetime] = None
    purchased_at: Optional[datetime] = None


class MarketplaceItemOut(ApiModel):
    id: int
    title: str
    description: str
    category: str
    price: int
    features: Optional[list[str]] = None
    duration: Optional[int] = None


class TransactionOut(ApiModel):
    id: int
    type: str
    amount: int
    description: str
    related_item_id: Optional[str] = None
    payment_method: Optional[str] = None
    created_at: datetime


class PurchaseOut(ApiModel):
    id: int
    marketplace_item_id: int
    tokens_spent: int
    status: str
    expires_at: Optional[datetime] = None
    purchased_at: Optional[datetime] = None


class PurchaseInput(ApiModel):
    item_id: int


class PurchaseResponse(ApiModel):
    success: bool
    purchase: PurchaseOut
    balance: int


class CheckoutInput(ApiModel):
    pack: str
    success_url: str
    cancel_url: str
