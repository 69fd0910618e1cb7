from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from config import DEFAULT_PAGE_SIZE
from database import get_db
from models import ClientSession, Confession, Comment, Like
from services.limits import DAILY_LIMIT_MESSAGE, check_and_consume, remaining


def create_confession(session_id: int, content: str, category: str, college_code: str,
                      nickname: str = None) -> tuple[Confession, int]:
    """Consume one slot of today's quota and store the confession as pending.

    Both writes commit together. Returns (confession, remaining_today) and
    raises 429 when the quota is already spent.
    """
    db = get_db()
    try:
        if not check_and_consume(db, session_id):
            db.rollback()
            raise HTTPException(status_code=429, detail=DAILY_LIMIT_MESSAGE)

        confession = Confession(
            content=content,
            category=category,
            college_code=college_code,
            session_id=session_id,
            nickname=nickname,
            is_approved=False,
            likes=0,
            comment_count=0
        )
        db.add(confession)
        db.commit()
        db.refresh(confession)

        used = db.query(ClientSession.daily_confession_count).filter(ClientSession.id == session_id).scalar()
        return confession, remaining(used)
    except SQLAlchemyError as e:
        print(f"Error creating confession: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def list_confessions(college_code: str = None, category: str = None,
                     limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> list[Confession]:
    """Approved confessions, newest first"""
    db = get_db()
    try:
        query = db.query(Confession).filter(Confession.is_approved.is_(True))
        if college_code:
            query = query.filter(Confession.college_code == college_code)
        if category:
            query = query.filter(Confession.category == category)
        return query.order_by(
            Confession.created_at.desc(), Confession.id.desc()
        ).offset(offset).limit(limit).all()
    except SQLAlchemyError as e:
        print(f"Error listing confessions: {e}")
        raise
    finally:
        db.close()


def get_confession(confession_id: int, include_pending: bool = False) -> Optional[Confession]:
    db = get_db()
    try:
        query = db.query(Confession).filter(Confession.id == confession_id)
        if not include_pending:
            query = query.filter(Confession.is_approved.is_(True))
        return query.first()
    except SQLAlchemyError as e:
        print(f"Error getting confession: {e}")
        raise
    finally:
        db.close()


def list_comments(confession_id: int) -> list[Comment]:
    """Approved comments of a confession, oldest first"""
    db = get_db()
    try:
        return db.query(Comment).filter(
            Comment.confession_id == confession_id,
            Comment.is_approved.is_(True)
        ).order_by(Comment.created_at.asc(), Comment.id.asc()).all()
    except SQLAlchemyError as e:
        print(f"Error listing comments: {e}")
        raise
    finally:
        db.close()


def create_comment(confession_id: int, session_id: int, content: str, nickname: str = None) -> Optional[Comment]:
    """Store a pending comment. None when the confession is missing or not yet public."""
    db = get_db()
    try:
        exists = db.query(Confession.id).filter(
            Confession.id == confession_id,
            Confession.is_approved.is_(True)
        ).first()
        if not exists:
            return None

        comment = Comment(
            content=content,
            confession_id=confession_id,
            session_id=session_id,
            nickname=nickname,
            is_approved=False
        )
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment
    except SQLAlchemyError as e:
        print(f"Error creating comment: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def toggle_like(confession_id: int, session_id: int) -> Optional[tuple[str, int]]:
    """Like or unlike an approved confession. Returns (action, likes) or None if not found.

    The like row and the counter change commit together; the counter never
    drops below zero.
    """
    db = get_db()
    try:
        confession = db.query(Confession).filter(
            Confession.id == confession_id,
            Confession.is_approved.is_(True)
        ).with_for_update().first()
        if not confession:
            return None

        removed = db.query(Like).filter(
            Like.confession_id == confession_id,
            Like.session_id == session_id
        ).delete(synchronize_session=False)

        if removed:
            db.query(Confession).filter(
                Confession.id == confession_id,
                Confession.likes > 0
            ).update({Confession.likes: Confession.likes - 1}, synchronize_session=False)
            action = "unliked"
        else:
            db.add(Like(confession_id=confession_id, session_id=session_id))
            db.flush()
            db.query(Confession).filter(Confession.id == confession_id).update(
                {Confession.likes: Confession.likes + 1}, synchronize_session=False
            )
            action = "liked"

        db.commit()
        likes = db.query(Confession.likes).filter(Confession.id == confession_id).scalar()
        return action, likes
    except IntegrityError:
        # A concurrent request from the same session inserted the like first
        db.rollback()
        likes = db.query(Confession.likes).filter(Confession.id == confession_id).scalar()
        return "liked", likes
    except SQLAlchemyError as e:
        print(f"Error toggling like: {e}")
        db.rollback()
        raise
    finally:
        db.close()
