"""
College Confessions API Test Suite
Drives every REST endpoint through the FastAPI TestClient against a throwaway SQLite file
"""

from conftest import SESSION_HEADER, headers_for, login
from database import get_db
from models import ClientSession

CONFESSION = {
    "content": "I still sleep with the stuffed bear my roommate thinks is decoration.",
    "category": "secrets",
    "collegeCode": "UCLA123",
}


def post_confession(client, headers, **overrides):
    return client.post("/api/confessions", json={**CONFESSION, **overrides}, headers=headers)


def approved_confession(client, headers, chief_headers, **overrides):
    res = post_confession(client, headers, **overrides)
    assert res.status_code == 200, res.text
    confession_id = res.json()["id"]
    res = client.post(f"/api/admin/confessions/{confession_id}/approve", headers=chief_headers)
    assert res.status_code == 200
    return confession_id


# ============== SESSIONS ==============

def test_session_is_issued_and_reused(client):
    res = client.get("/api/session")
    assert res.status_code == 200
    data = res.json()
    assert data["isNew"] is True
    token = data["session"]["token"]
    assert res.headers[SESSION_HEADER] == token
    assert data["session"]["dailyConfessionCount"] == 0

    res = client.get("/api/session", headers=headers_for(token))
    assert res.json()["isNew"] is False
    assert res.json()["session"]["id"] == data["session"]["id"]


def test_unknown_token_gets_a_new_session(client):
    res = client.get("/api/session", headers=headers_for("not-a-real-token"))
    data = res.json()
    assert data["isNew"] is True
    assert data["session"]["token"] != "not-a-real-token"
    assert res.headers[SESSION_HEADER] == data["session"]["token"]


def test_update_session_profile(client, new_session):
    session, headers = new_session(nickname="NightOwl")
    assert session["nickname"] == "NightOwl"
    assert session["collegeCode"] == "UCLA123"

    res = client.put("/api/session", json={"collegeCode": "NOPE999"}, headers=headers)
    assert res.status_code == 400


# ============== DAILY LIMIT ==============

def test_daily_limit_boundary(client, new_session):
    _, headers = new_session()

    for expected_remaining in (4, 3, 2, 1, 0):
        res = post_confession(client, headers)
        assert res.status_code == 200, res.text
        assert res.json()["remainingToday"] == expected_remaining
        assert res.json()["isApproved"] is False

    res = post_confession(client, headers)
    assert res.status_code == 429
    assert res.json()["detail"] == "Daily confession limit reached. Come back tomorrow."

    res = client.get("/api/daily-limit", headers=headers)
    assert res.json() == {"used": 5, "limit": 5, "remaining": 0}


def test_daily_limit_resets_on_a_new_day(client, new_session):
    session, headers = new_session()
    for _ in range(5):
        assert post_confession(client, headers).status_code == 200
    assert post_confession(client, headers).status_code == 429

    db = get_db()
    try:
        db.query(ClientSession).filter(ClientSession.id == session["id"]).update(
            {ClientSession.last_reset_date: "2000-01-01"}
        )
        db.commit()
    finally:
        db.close()

    res = client.get("/api/daily-limit", headers=headers)
    assert res.json()["used"] == 0

    res = post_confession(client, headers)
    assert res.status_code == 200
    assert res.json()["remainingToday"] == 4


def test_rejected_confession_does_not_use_quota(client, new_session):
    _, headers = new_session()

    assert post_confession(client, headers, category="gossip").status_code == 400
    assert post_confession(client, headers, content="too short").status_code == 400
    assert post_confession(client, headers, content="x" * 1001).status_code == 400
    assert post_confession(client, headers, collegeCode="NOPE999").status_code == 400

    res = client.get("/api/daily-limit", headers=headers)
    assert res.json()["used"] == 0


# ============== CONFESSIONS ==============

def test_pending_confession_is_hidden_until_approved(client, new_session, chief_headers):
    _, headers = new_session()
    confession_id = post_confession(client, headers).json()["id"]

    assert client.get("/api/confessions").json() == []
    assert client.get(f"/api/confessions/{confession_id}").status_code == 404

    pending = client.get("/api/admin/confessions/pending", headers=chief_headers).json()
    assert [c["id"] for c in pending] == [confession_id]

    res = client.post(f"/api/admin/confessions/{confession_id}/approve", headers=chief_headers)
    assert res.status_code == 200

    feed = client.get("/api/confessions", params={"collegeCode": "UCLA123"}).json()
    assert [c["id"] for c in feed] == [confession_id]
    assert client.get("/api/confessions", params={"collegeCode": "NYU456"}).json() == []
    assert client.get("/api/confessions", params={"category": "crush"}).json() == []

    # Approving twice leaves it approved
    res = client.post(f"/api/admin/confessions/{confession_id}/approve", headers=chief_headers)
    assert res.status_code == 200
    assert client.get("/api/admin/confessions/pending", headers=chief_headers).json() == []


def test_delete_confession(client, new_session, chief_headers):
    _, headers = new_session()
    confession_id = approved_confession(client, headers, chief_headers)
    client.post(f"/api/confessions/{confession_id}/like", headers=headers)

    res = client.delete(f"/api/admin/confessions/{confession_id}", headers=chief_headers)
    assert res.status_code == 200
    assert client.get(f"/api/confessions/{confession_id}").status_code == 404

    res = client.delete(f"/api/admin/confessions/{confession_id}", headers=chief_headers)
    assert res.status_code == 404


def test_like_toggles(client, new_session, chief_headers):
    _, author = new_session()
    _, reader = new_session()
    confession_id = approved_confession(client, author, chief_headers)

    res = client.post(f"/api/confessions/{confession_id}/like", headers=reader)
    assert res.json() == {"action": "liked", "likes": 1}

    res = client.post(f"/api/confessions/{confession_id}/like", headers=author)
    assert res.json() == {"action": "liked", "likes": 2}

    res = client.post(f"/api/confessions/{confession_id}/like", headers=reader)
    assert res.json() == {"action": "unliked", "likes": 1}

    assert client.get(f"/api/confessions/{confession_id}").json()["likes"] == 1


def test_like_unknown_confession(client, new_session):
    _, headers = new_session()
    assert client.post("/api/confessions/9999/like", headers=headers).status_code == 404


def test_comments_are_moderated(client, new_session, chief_headers):
    _, headers = new_session()
    confession_id = approved_confession(client, headers, chief_headers)

    res = client.post(f"/api/confessions/{confession_id}/comments",
                      json={"content": "Same here honestly", "nickname": "Bear2"}, headers=headers)
    assert res.status_code == 200
    comment_id = res.json()["id"]
    assert res.json()["isApproved"] is False

    assert client.get(f"/api/confessions/{confession_id}/comments").json() == []

    res = client.post(f"/api/admin/comments/{comment_id}/approve", headers=chief_headers)
    assert res.status_code == 200

    comments = client.get(f"/api/confessions/{confession_id}/comments").json()
    assert [c["id"] for c in comments] == [comment_id]
    assert client.get(f"/api/confessions/{confession_id}").json()["commentCount"] == 1

    res = client.delete(f"/api/admin/comments/{comment_id}", headers=chief_headers)
    assert res.status_code == 200
    assert client.get(f"/api/confessions/{confession_id}/comments").json() == []


def test_cannot_comment_on_pending_confession(client, new_session):
    _, headers = new_session()
    confession_id = post_confession(client, headers).json()["id"]
    res = client.post(f"/api/confessions/{confession_id}/comments",
                      json={"content": "first!"}, headers=headers)
    assert res.status_code == 404


# ============== DIRECT MESSAGES ==============

def test_direct_message_lifecycle(client, new_session, chief_headers):
    sender, sender_headers = new_session()
    recipient, recipient_headers = new_session()

    res = client.post("/api/direct-messages",
                      json={"toSessionId": recipient["id"], "content": "Saw your confession, me too"},
                      headers=sender_headers)
    assert res.status_code == 200
    message_id = res.json()["id"]
    assert res.json()["status"] == "pending"

    sent = client.get("/api/direct-messages", headers=sender_headers).json()
    assert [m["id"] for m in sent] == [message_id]
    assert client.get("/api/direct-messages", headers=recipient_headers).json() == []

    pending = client.get("/api/admin/direct-messages/pending", headers=chief_headers).json()
    assert [m["id"] for m in pending] == [message_id]

    res = client.post(f"/api/admin/direct-messages/{message_id}/approve",
                      json={"adminNote": "harmless"}, headers=chief_headers)
    assert res.status_code == 200
    assert res.json()["status"] == "approved"
    assert res.json()["adminNote"] == "harmless"
    assert client.get("/api/admin/direct-messages/pending", headers=chief_headers).json() == []

    received = client.get("/api/direct-messages", headers=recipient_headers).json()
    assert [m["status"] for m in received] == ["approved"]

    res = client.post(f"/api/admin/direct-messages/{message_id}/reject", headers=chief_headers)
    assert res.json()["status"] == "rejected"
    assert res.json()["adminNote"] == "harmless"
    assert client.get("/api/direct-messages", headers=recipient_headers).json() == []
    assert client.get("/api/admin/direct-messages/pending", headers=chief_headers).json() == []

    res = client.put(f"/api/admin/direct-messages/{message_id}/note",
                     json={"adminNote": "changed my mind"}, headers=chief_headers)
    assert res.json()["status"] == "rejected"
    assert res.json()["adminNote"] == "changed my mind"
    assert client.get("/api/admin/direct-messages/pending", headers=chief_headers).json() == []


def test_direct_message_validation(client, new_session):
    sender, headers = new_session()

    res = client.post("/api/direct-messages",
                      json={"toSessionId": sender["id"], "content": "hi me"}, headers=headers)
    assert res.status_code == 400

    res = client.post("/api/direct-messages",
                      json={"toSessionId": 9999, "content": "hello?"}, headers=headers)
    assert res.status_code == 404

    res = client.post("/api/direct-messages",
                      json={"toSessionId": 9999, "content": "   "}, headers=headers)
    assert res.status_code == 400


# ============== AUTHORIZATION ==============

def test_moderation_requires_admin(client, new_session):
    _, headers = new_session()
    confession_id = post_confession(client, headers).json()["id"]

    assert client.get("/api/admin/confessions/pending").status_code == 401
    assert client.post(f"/api/admin/confessions/{confession_id}/approve").status_code == 401
    assert client.post(f"/api/admin/confessions/{confession_id}/approve", headers=headers).status_code == 401
    assert client.get("/api/admins", headers=headers).status_code == 401

    # Still pending
    assert client.get(f"/api/confessions/{confession_id}").status_code == 404


def test_college_admin_is_scoped_to_its_college(client, new_session, make_admin, chief_headers):
    _, nyu_admin = make_admin("nyu-mod", "college", "NYU456")
    _, ucla_headers = new_session("UCLA123")
    _, nyu_headers = new_session("NYU456")

    ucla_id = post_confession(client, ucla_headers).json()["id"]
    nyu_id = post_confession(client, nyu_headers, collegeCode="NYU456").json()["id"]

    pending = client.get("/api/admin/confessions/pending", headers=nyu_admin).json()
    assert [c["id"] for c in pending] == [nyu_id]

    res = client.post(f"/api/admin/confessions/{ucla_id}/approve", headers=nyu_admin)
    assert res.status_code == 403
    res = client.delete(f"/api/admin/confessions/{ucla_id}", headers=nyu_admin)
    assert res.status_code == 403

    res = client.post(f"/api/admin/confessions/{nyu_id}/approve", headers=nyu_admin)
    assert res.status_code == 200

    # Chief sees the remaining UCLA confession
    pending = client.get("/api/admin/confessions/pending", headers=chief_headers).json()
    assert [c["id"] for c in pending] == [ucla_id]

    # College admins cannot manage other admins
    assert client.get("/api/admins", headers=nyu_admin).status_code == 403


def test_normal_admin_cannot_review_direct_messages(client, make_admin):
    _, normal = make_admin("ucla-normal", "normal", "UCLA123")

    assert client.get("/api/admin/direct-messages/pending", headers=normal).status_code == 403

    overview = client.get("/api/admin/overview", headers=normal).json()
    assert overview == {"confessions": 0, "comments": 0, "directMessages": None}


def test_inactive_admin_is_forbidden(client, make_admin, chief_headers):
    admin, admin_headers = make_admin("flat-mod", "admin")
    assert client.get("/api/admin/confessions/pending", headers=admin_headers).status_code == 200

    res = client.put(f"/api/admins/{admin['id']}/status", json={"status": "inactive"}, headers=chief_headers)
    assert res.status_code == 200
    assert res.json()["status"] == "inactive"

    assert client.get("/api/admin/confessions/pending", headers=admin_headers).status_code == 403
    res = client.post("/api/auth/login", json={"username": "flat-mod", "password": "moderator-pass"})
    assert res.status_code == 403


# ============== ADMIN ACCOUNTS ==============

def test_login_me_and_logout(client, chief_headers):
    res = client.get("/api/auth/me", headers=chief_headers)
    assert res.json()["authenticated"] is True
    assert res.json()["user"]["role"] == "chief"
    assert "passwordHash" not in res.json()["user"]

    res = client.post("/api/auth/login", json={"username": "admin", "password": "wrong"})
    assert res.status_code == 401

    res = client.post("/api/auth/logout", headers=chief_headers)
    assert res.status_code == 200
    assert client.get("/api/auth/me", headers=chief_headers).json() == {"authenticated": False, "user": None}
    assert client.get("/api/admin/confessions/pending", headers=chief_headers).status_code == 401


def test_admin_management(client, chief_headers, make_admin):
    admin, _ = make_admin("ucla-mod", "college", "UCLA123")
    assert admin["collegeCode"] == "UCLA123"

    # Same role for the same college is taken
    res = client.post("/api/admins", json={
        "username": "ucla-mod-2", "password": "another-pass", "role": "college", "collegeCode": "UCLA123",
    }, headers=chief_headers)
    assert res.status_code == 409

    res = client.post("/api/admins", json={
        "username": "ucla-mod", "password": "another-pass", "role": "admin",
    }, headers=chief_headers)
    assert res.status_code == 409

    res = client.post("/api/admins", json={
        "username": "no-college", "password": "another-pass", "role": "college",
    }, headers=chief_headers)
    assert res.status_code == 400

    res = client.post("/api/admins", json={
        "username": "bad-role", "password": "another-pass", "role": "overlord",
    }, headers=chief_headers)
    assert res.status_code == 422

    res = client.put(f"/api/admins/{admin['id']}", json={"collegeCode": "UW012"}, headers=chief_headers)
    assert res.status_code == 200
    assert res.json()["collegeCode"] == "UW012"
    login(client, "ucla-mod", "moderator-pass")

    usernames = [a["username"] for a in client.get("/api/admins", headers=chief_headers).json()]
    assert usernames == ["admin", "ucla-mod"]

    res = client.delete(f"/api/admins/{admin['id']}", headers=chief_headers)
    assert res.status_code == 200
    assert client.delete(f"/api/admins/{admin['id']}", headers=chief_headers).status_code == 404


def test_chief_cannot_remove_itself(client, chief_headers):
    chief = client.get("/api/auth/me", headers=chief_headers).json()["user"]
    assert client.delete(f"/api/admins/{chief['id']}", headers=chief_headers).status_code == 400
    res = client.put(f"/api/admins/{chief['id']}/status", json={"status": "inactive"}, headers=chief_headers)
    assert res.status_code == 400


def test_chief_cannot_demote_itself(client, chief_headers):
    chief = client.get("/api/auth/me", headers=chief_headers).json()["user"]
    res = client.put(f"/api/admins/{chief['id']}", json={"role": "admin"}, headers=chief_headers)
    assert res.status_code == 400
    assert client.get("/api/auth/me", headers=chief_headers).json()["user"]["role"] == "chief"

    # Keeping the chief role is fine
    res = client.put(f"/api/admins/{chief['id']}", json={"role": "chief"}, headers=chief_headers)
    assert res.status_code == 200


def test_overlong_passwords(client, chief_headers, make_admin):
    long_password = "x" * 100

    res = client.post("/api/auth/login", json={"username": "admin", "password": long_password})
    assert res.status_code == 401

    res = client.post("/api/admins", json={
        "username": "long-pass", "password": long_password, "role": "admin",
    }, headers=chief_headers)
    assert res.status_code == 400

    admin, _ = make_admin("flat-mod", "admin")
    res = client.put(f"/api/admins/{admin['id']}", json={"password": long_password}, headers=chief_headers)
    assert res.status_code == 400
    login(client, "flat-mod", "moderator-pass")


# ============== COLLEGES ==============

def test_colleges(client, chief_headers, make_admin):
    codes = {c["code"] for c in client.get("/api/colleges").json()}
    assert codes == {"UCLA123", "NYU456", "UT789", "UW012"}
    assert client.get("/api/colleges/NYU456").json()["name"] == "New York University"
    assert client.get("/api/colleges/NOPE999").status_code == 404

    res = client.post("/api/colleges", json={"name": "Stanford University", "code": "SU345"}, headers=chief_headers)
    assert res.status_code == 200
    rooms = client.get("/api/chat/rooms", params={"collegeCode": "SU345"}).json()
    assert [r["name"] for r in rooms] == ["General Chat"]

    res = client.post("/api/colleges", json={"name": "Stanford again", "code": "SU345"}, headers=chief_headers)
    assert res.status_code == 409

    _, flat = make_admin("flat-mod", "admin")
    assert client.post("/api/colleges", json={"name": "X", "code": "X1"}, headers=flat).status_code == 403

    assert client.delete("/api/colleges/SU345", headers=chief_headers).status_code == 200
    assert client.get("/api/colleges/SU345").status_code == 404


# ============== VIP ==============

def test_vip_purchase(client, new_session):
    from services.vip import credit_tokens

    session, headers = new_session()
    assert client.get("/api/vip/tokens", headers=headers).json() == {"balance": 0, "totalEarned": 0, "totalSpent": 0}

    items = client.get("/api/vip/marketplace").json()
    vip_monthly = next(i for i in items if i["title"] == "VIP Monthly")

    res = client.post("/api/vip/purchase", json={"itemId": vip_monthly["id"]}, headers=headers)
    assert res.status_code == 402
    assert client.post("/api/vip/purchase", json={"itemId": 9999}, headers=headers).status_code == 404

    assert credit_tokens({"user_id": None, "session_id": session["id"]}, 500, "Test top-up",
                         payment_method="stripe", payment_reference="cs_test_1")
    # Same payment twice is applied once
    assert not credit_tokens({"user_id": None, "session_id": session["id"]}, 500, "Test top-up",
                             payment_method="stripe", payment_reference="cs_test_1")

    res = client.post("/api/vip/purchase", json={"itemId": vip_monthly["id"]}, headers=headers)
    assert res.status_code == 200
    assert res.json()["balance"] == 200
    assert res.json()["purchase"]["tokensSpent"] == 300

    membership = client.get("/api/vip/membership", headers=headers).json()
    assert membership["membershipType"] == "VIP Monthly"

    tokens = client.get("/api/vip/tokens", headers=headers).json()
    assert tokens == {"balance": 200, "totalEarned": 500, "totalSpent": 300}

    kinds = [t["type"] for t in client.get("/api/vip/transactions", headers=headers).json()]
    assert sorted(kinds) == ["purchase", "spend"]
    assert len(client.get("/api/vip/purchases", headers=headers).json()) == 1


def test_stripe_webhook_credits_once(client, new_session, monkeypatch):
    import stripe
    import routers.payments as payments

    session, headers = new_session()
    monkeypatch.setattr(payments, "STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setattr(payments, "STRIPE_WEBHOOK_SECRET", "whsec_dummy")
    event = {
        "type": "checkout.session.completed",
        "data": {"object": {
            "id": "cs_test_webhook",
            "metadata": {"user_id": "", "session_id": str(session["id"]), "pack": "starter"},
        }},
    }
    monkeypatch.setattr(stripe.Webhook, "construct_event", lambda payload, sig, secret: event)

    for _ in range(2):
        res = client.post("/api/stripe-webhook", content=b"{}", headers={"stripe-signature": "t=1,v1=x"})
        assert res.status_code == 200

    assert client.get("/api/vip/tokens", headers=headers).json()["balance"] == 100


def test_checkout_without_stripe_configured(client, new_session):
    _, headers = new_session()
    res = client.post("/api/vip/checkout", json={
        "pack": "starter", "successUrl": "http://localhost/ok", "cancelUrl": "http://localhost/no",
    }, headers=headers)
    assert res.status_code == 500
