from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from database import get_db
from models import College, ChatRoom

DEFAULT_ROOM_NAME = "General Chat"


def list_colleges() -> list[College]:
    """Active colleges, alphabetical by name"""
    db = get_db()
    try:
        return db.query(College).filter(College.is_active.is_(True)).order_by(College.name.asc()).all()
    except SQLAlchemyError as e:
        print(f"Error listing colleges: {e}")
        raise
    finally:
        db.close()


def get_college(code: str, active_only: bool = True) -> Optional[College]:
    db = get_db()
    try:
        query = db.query(College).filter(College.code == code)
        if active_only:
            query = query.filter(College.is_active.is_(True))
        return query.first()
    except SQLAlchemyError as e:
        print(f"Error getting college: {e}")
        raise
    finally:
        db.close()


def create_college(name: str, code: str) -> College:
    """Create a college together with its default chat room"""
    db = get_db()
    try:
        college = College(name=name.strip(), code=code.strip(), is_active=True)
        db.add(college)
        db.add(ChatRoom(name=DEFAULT_ROOM_NAME, college_code=college.code, is_active=True))
        db.commit()
        db.refresh(college)
        return college
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="College code already exists")
    except SQLAlchemyError as e:
        print(f"Error creating college: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def deactivate_college(code: str) -> bool:
    """Hide a college and close its chat rooms. Existing content is kept."""
    db = get_db()
    try:
        college = db.query(College).filter(College.code == code, College.is_active.is_(True)).first()
        if not college:
            return False
        college.is_active = False
        db.query(ChatRoom).filter(ChatRoom.college_code == code).update(
            {ChatRoom.is_active: False}, synchronize_session=False
        )
        db.commit()
        return True
    except SQLAlchemyError as e:
        print(f"Error deactivating college: {e}")
        db.rollback()
        raise
    finally:
        db.close()
