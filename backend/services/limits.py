from sqlalchemy.orm import Session

from config import DAILY_CONFESSION_LIMIT
from models import ClientSession

DAILY_LIMIT_MESSAGE = "Daily confession limit reached. Come back tomorrow."


def remaining(used: int, limit: int = DAILY_CONFESSION_LIMIT) -> int:
    return max(0, limit - used)


def get_status(session: ClientSession) -> dict:
    """Read-only view of the caller's quota for today"""
    used = session.daily_confession_count
    return {
        "used": used,
        "limit": DAILY_CONFESSION_LIMIT,
        "remaining": remaining(used)
    }


def check_and_consume(db: Session, session_id: int) -> bool:
    """Take one confession from today's quota inside the caller's transaction.

    A single conditional update, so two concurrent requests cannot both pass the
    check on the last slot. Returns False when the quota is exhausted.
    """
    consumed = db.query(ClientSession).filter(
        ClientSession.id == session_id,
        ClientSession.daily_confession_count < DAILY_CONFESSION_LIMIT
    ).update(
        {ClientSession.daily_confession_count: ClientSession.daily_confession_count + 1},
        synchronize_session=False
    )
    return consumed == 1
