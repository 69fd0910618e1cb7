import secrets
from datetime import date
from typing import Optional

from fastapi import Request, Response
from sqlalchemy.exc import SQLAlchemyError

from database import get_db
from models import ClientSession

SESSION_HEADER = "X-Session-Token"
SESSION_COOKIE = "session_token"


def today() -> str:
    """Calendar date used for the daily reset. Plain string comparison, not timezone aware."""
    return date.today().isoformat()


def generate_session_token() -> str:
    """Generate a secure random session token"""
    return secrets.token_urlsafe(32)


def get_request_token(request: Request) -> Optional[str]:
    """Extract the session token from the session header, a bearer header or the cookie"""
    token = request.headers.get(SESSION_HEADER)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]

    return request.cookies.get(SESSION_COOKIE)


def get_session_by_token(token: str) -> Optional[ClientSession]:
    """Look up a session without creating or resetting it"""
    if not token:
        return None

    db = get_db()
    try:
        return db.query(ClientSession).filter(ClientSession.token == token).first()
    except SQLAlchemyError as e:
        print(f"Error getting session: {e}")
        raise
    finally:
        db.close()


def create_session(user_id: int = None) -> ClientSession:
    """Create a fresh session, optionally linked to an admin user"""
    db = get_db()
    try:
        session = ClientSession(
            token=generate_session_token(),
            user_id=user_id,
            daily_confession_count=0,
            last_reset_date=today()
        )
        db.add(session)
        db.commit()
        db.refresh(session)
        return session
    except SQLAlchemyError as e:
        print(f"Error creating session: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def resolve_or_create(token: Optional[str]) -> tuple[ClientSession, bool]:
    """Return (session, is_new).

    A missing or unknown token gets a brand new session with a new token; the
    supplied token is never adopted. An existing session whose last reset date
    is not today has its daily counter zeroed first.
    """
    session = get_session_by_token(token) if token else None
    if session is None:
        return create_session(), True

    current = today()
    if session.last_reset_date == current:
        return session, False

    db = get_db()
    try:
        # Only one concurrent request gets to perform the reset
        db.query(ClientSession).filter(
            ClientSession.id == session.id,
            ClientSession.last_reset_date != current
        ).update(
            {ClientSession.daily_confession_count: 0, ClientSession.last_reset_date: current},
            synchronize_session=False
        )
        db.commit()
        return db.query(ClientSession).filter(ClientSession.id == session.id).first(), False
    except SQLAlchemyError as e:
        print(f"Error resetting daily count: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def resolve_session(request: Request, response: Response) -> ClientSession:
    """Resolve the caller's session and echo its token back in the response header"""
    session, _ = resolve_or_create(get_request_token(request))
    response.headers[SESSION_HEADER] = session.token
    return session


def update_profile(session_id: int, nickname: str = None, college_code: str = None) -> Optional[ClientSession]:
    """Update the client-editable fields of a session. Counters are not client-writable."""
    db = get_db()
    try:
        session = db.query(ClientSession).filter(ClientSession.id == session_id).first()
        if not session:
            return None
        if nickname is not None:
            session.nickname = nickname.strip() or None
        if college_code is not None:
            session.college_code = college_code or None
        db.commit()
        db.refresh(session)
        return session
    except SQLAlchemyError as e:
        print(f"Error updating session: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def link_user(session_id: int, user_id: Optional[int]) -> bool:
    """Attach an admin user to a session, or detach with user_id=None"""
    db = get_db()
    try:
        updated = db.query(ClientSession).filter(ClientSession.id == session_id).update(
            {ClientSession.user_id: user_id}, synchronize_session=False
        )
        db.commit()
        return updated == 1
    except SQLAlchemyError as e:
        print(f"Error linking session: {e}")
        db.rollback()
        raise
    finally:
        db.close()
