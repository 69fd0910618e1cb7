from fastapi import APIRouter, HTTPException, Request, Response
import stripe
from config import STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET, TOKEN_PACKS
from schemas.vip import CheckoutInput
from services.sessions import resolve_session
from services.vip import actor_fields, credit_tokens

router = APIRouter(prefix="/api", tags=["payments"])

if STRIPE_SECRET_KEY:
    stripe.api_key = STRIPE_SECRET_KEY


@router.post("/vip/checkout")
async def create_checkout_session(input: CheckoutInput, request: Request, response: Response):
    """Create a Stripe checkout session for a token pack"""
    if not STRIPE_SECRET_KEY:
        raise HTTPException(status_code=500, detail="Stripe not configured")

    pack = TOKEN_PACKS.get(input.pack)
    if not pack:
        raise HTTPException(status_code=400, detail=f"Unknown token pack: {input.pack}")
    tokens, price_cents = pack

    session = resolve_session(request, response)
    actor = actor_fields(session)

    try:
        checkout_session = stripe.checkout.Session.create(
            payment_method_types=["card"],
            line_items=[
                {
                    "price_data": {
                        "currency": "usd",
                        "product_data": {
                            "name": f"{tokens} Confession Tokens",
                            "description": f"{input.pack.title()} token pack"
                        },
                        "unit_amount": price_cents,
                    },
                    "quantity": 1,
                }
            ],
            mode="payment",
            success_url=input.success_url + "?session_id={CHECKOUT_SESSION_ID}",
            cancel_url=input.cancel_url,
            metadata={
                "user_id": str(actor["user_id"] or ""),
                "session_id": str(actor["session_id"] or ""),
                "pack": input.pack
            }
        )

        return {"checkoutUrl": checkout_session.url, "sessionId": checkout_session.id}

    except stripe.error.StripeError as e:
        print(f"Stripe error: {e}")
        raise HTTPException(status_code=500, detail="Failed to create checkout session")


@router.post("/stripe-webhook")
async def stripe_webhook(request: Request):
    """Handle Stripe webhook events"""
    if not STRIPE_SECRET_KEY or not STRIPE_WEBHOOK_SECRET:
        raise HTTPException(status_code=500, detail="Stripe not configured")

    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    try:
        event = stripe.Webhook.construct_event(
            payload, sig_header, STRIPE_WEBHOOK_SECRET
        )
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")
    except stripe.error.SignatureVerificationError:
        raise HTTPException(status_code=400, detail="Invalid signature")

    if event["type"] == "checkout.session.completed":
        checkout = event["data"]["object"]
        metadata = checkout.get("metadata") or {}

        pack = TOKEN_PACKS.get(metadata.get("pack"))
        user_id = metadata.get("user_id")
        session_id = metadata.get("session_id")

        if pack and (user_id or session_id):
            actor = {
                "user_id": int(user_id) if user_id else None,
                "session_id": None if user_id else int(session_id)
            }
            credited = credit_tokens(
                actor,
                pack[0],
                f"Purchased {metadata.get('pack')} token pack",
                payment_method="stripe",
                payment_reference=checkout["id"]
            )
            if credited:
                print(f"Credited {pack[0]} tokens for checkout {checkout['id']}")
            else:
                print(f"Checkout {checkout['id']} already credited")

    return {"received": True}
