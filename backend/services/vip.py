"""Token balances, marketplace purchases and the token ledger.

Each ledger row belongs to exactly one actor: the linked admin user when the
session has one, the anonymous session otherwise.
"""

from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from database import get_db
from models import ClientSession, UserTokens, VipMembership, MarketplaceItem, TokenTransaction, VipPurchase


def actor_fields(session: ClientSession) -> dict:
    if session.user_id is not None:
        return {"user_id": session.user_id, "session_id": None}
    return {"user_id": None, "session_id": session.id}


def _actor_filter(model, actor: dict):
    if actor["user_id"] is not None:
        return model.user_id == actor["user_id"]
    return model.session_id == actor["session_id"]


def get_balance(session: ClientSession) -> dict:
    db = get_db()
    try:
        actor = actor_fields(session)
        tokens = db.query(UserTokens).filter(_actor_filter(UserTokens, actor)).first()
        if not tokens:
            return {"balance": 0, "total_earned": 0, "total_spent": 0}
        return {"balance": tokens.balance, "total_earned": tokens.total_earned, "total_spent": tokens.total_spent}
    except SQLAlchemyError as e:
        print(f"Error getting token balance: {e}")
        raise
    finally:
        db.close()


def get_membership(session: ClientSession) -> Optional[VipMembership]:
    """Current unexpired membership, if any"""
    db = get_db()
    try:
        actor = actor_fields(session)
        now = datetime.utcnow()
        memberships = db.query(VipMembership).filter(
            _actor_filter(VipMembership, actor),
            VipMembership.is_active.is_(True)
        ).order_by(VipMembership.purchased_at.desc()).all()
        for membership in memberships:
            if membership.expires_at is None or membership.expires_at > now:
                return membership
        return None
    except SQLAlchemyError as e:
        print(f"Error getting membership: {e}")
        raise
    finally:
        db.close()


def list_marketplace() -> list[MarketplaceItem]:
    db = get_db()
    try:
        return db.query(MarketplaceItem).filter(
            MarketplaceItem.is_active.is_(True)
        ).order_by(MarketplaceItem.price.asc(), MarketplaceItem.id.asc()).all()
    except SQLAlchemyError as e:
        print(f"Error listing marketplace: {e}")
        raise
    finally:
        db.close()


def list_transactions(session: ClientSession) -> list[TokenTransaction]:
    db = get_db()
    try:
        actor = actor_fields(session)
        return db.query(TokenTransaction).filter(_actor_filter(TokenTransaction, actor)).order_by(
            TokenTransaction.created_at.desc(), TokenTransaction.id.desc()
        ).all()
    except SQLAlchemyError as e:
        print(f"Error listing transactions: {e}")
        raise
    finally:
        db.close()


def list_purchases(session: ClientSession) -> list[VipPurchase]:
    db = get_db()
    try:
        actor = actor_fields(session)
        return db.query(VipPurchase).filter(_actor_filter(VipPurchase, actor)).order_by(
            VipPurchase.purchased_at.desc(), VipPurchase.id.desc()
        ).all()
    except SQLAlchemyError as e:
        print(f"Error listing purchases: {e}")
        raise
    finally:
        db.close()


def credit_tokens(actor: dict, amount: int, description: str,
                  payment_method: str = None, payment_reference: str = None,
                  transaction_type: str = "purchase") -> bool:
    """Add tokens to an actor's balance and record it. Returns False for an already-applied payment."""
    db = get_db()
    try:
        if payment_reference:
            seen = db.query(TokenTransaction.id).filter(
                TokenTransaction.payment_reference == payment_reference
            ).first()
            if seen:
                return False

        tokens = db.query(UserTokens).filter(_actor_filter(UserTokens, actor)).first()
        if not tokens:
            tokens = UserTokens(balance=0, total_earned=0, total_spent=0, **actor)
            db.add(tokens)
            db.flush()

        db.query(UserTokens).filter(UserTokens.id == tokens.id).update({
            UserTokens.balance: UserTokens.balance + amount,
            UserTokens.total_earned: UserTokens.total_earned + amount
        }, synchronize_session=False)
        db.add(TokenTransaction(
            type=transaction_type,
            amount=amount,
            description=description,
            payment_method=payment_method,
            payment_reference=payment_reference,
            **actor
        ))
        db.commit()
        return True
    except IntegrityError:
        # Same payment delivered twice concurrently
        db.rollback()
        return False
    except SQLAlchemyError as e:
        print(f"Error crediting tokens: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def purchase_item(session: ClientSession, item_id: int) -> tuple[VipPurchase, int]:
    """Spend tokens on a marketplace item. Returns (purchase, new_balance).

    Raises 404 for an unknown or retired item and 402 when the balance is short.
    The balance check and the debit are one conditional update.
    """
    db = get_db()
    try:
        item = db.query(MarketplaceItem).filter(
            MarketplaceItem.id == item_id,
            MarketplaceItem.is_active.is_(True)
        ).first()
        if not item:
            raise HTTPException(status_code=404, detail="Marketplace item not found")

        actor = actor_fields(session)
        debited = db.query(UserTokens).filter(
            _actor_filter(UserTokens, actor),
            UserTokens.balance >= item.price
        ).update({
            UserTokens.balance: UserTokens.balance - item.price,
            UserTokens.total_spent: UserTokens.total_spent + item.price
        }, synchronize_session=False)
        if debited != 1:
            db.rollback()
            raise HTTPException(status_code=402, detail=f"You need {item.price} tokens to purchase this item")

        now = datetime.utcnow()
        expires_at = now + timedelta(days=item.duration) if item.duration else None

        purchase = VipPurchase(
            marketplace_item_id=item.id,
            tokens_spent=item.price,
            status="active",
            purchased_at=now,
            expires_at=expires_at,
            **actor
        )
        db.add(purchase)
        db.add(TokenTransaction(
            type="spend",
            amount=item.price,
            description=f"Purchased {item.title}",
            related_item_id=str(item.id),
            payment_method="tokens",
            **actor
        ))

        if item.category == "vip_features":
            membership = db.query(VipMembership).filter(
                _actor_filter(VipMembership, actor),
                VipMembership.is_active.is_(True)
            ).first()
            if membership:
                membership.membership_type = item.title
                membership.purchased_at = now
                membership.expires_at = expires_at
            else:
                db.add(VipMembership(
                    membership_type=item.title,
                    is_active=True,
                    purchased_at=now,
                    expires_at=expires_at,
                    **actor
                ))

        db.commit()
        db.refresh(purchase)
        balance = db.query(UserTokens.balance).filter(_actor_filter(UserTokens, actor)).scalar()
        return purchase, balance
    except SQLAlchemyError as e:
        print(f"Error purchasing item: {e}")
        db.rollback()
        raise
    finally:
        db.close()
