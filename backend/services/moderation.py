"""Pending/approved/rejected lifecycle for confessions, comments and direct messages.

Every function takes the acting admin and narrows its query to the admin's
college unless the admin holds a global role. Rows outside the scope raise 403
and are left untouched.
"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from database import get_db
from models import User, ClientSession, Confession, Comment, Like, DirectMessage
from services.permissions import Capability, college_scope, ensure_in_scope, has_capability


# ------------------------------------------------------------------
# Confessions
# ------------------------------------------------------------------

def list_pending_confessions(admin: User) -> list[Confession]:
    db = get_db()
    try:
        query = db.query(Confession).filter(Confession.is_approved.is_(False))
        scope = college_scope(admin)
        if scope is not None:
            query = query.filter(Confession.college_code == scope)
        return query.order_by(Confession.created_at.desc(), Confession.id.desc()).all()
    except SQLAlchemyError as e:
        print(f"Error listing pending confessions: {e}")
        raise
    finally:
        db.close()


def approve_confession(admin: User, confession_id: int) -> Optional[Confession]:
    """Make a confession public. Approving an approved confession is a no-op."""
    db = get_db()
    try:
        confession = db.query(Confession).filter(Confession.id == confession_id).first()
        if not confession:
            return None
        ensure_in_scope(admin, confession.college_code)
        if not confession.is_approved:
            confession.is_approved = True
            db.commit()
            db.refresh(confession)
        return confession
    except SQLAlchemyError as e:
        print(f"Error approving confession: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def delete_confession(admin: User, confession_id: int) -> bool:
    """Hard delete a confession, pending or approved, with its likes and comments"""
    db = get_db()
    try:
        confession = db.query(Confession).filter(Confession.id == confession_id).first()
        if not confession:
            return False
        ensure_in_scope(admin, confession.college_code)
        db.query(Like).filter(Like.confession_id == confession_id).delete(synchronize_session=False)
        db.query(Comment).filter(Comment.confession_id == confession_id).delete(synchronize_session=False)
        db.delete(confession)
        db.commit()
        return True
    except SQLAlchemyError as e:
        print(f"Error deleting confession: {e}")
        db.rollback()
        raise
    finally:
        db.close()


# ------------------------------------------------------------------
# Comments
# ------------------------------------------------------------------

def list_pending_comments(admin: User) -> list[Comment]:
    db = get_db()
    try:
        query = db.query(Comment).filter(Comment.is_approved.is_(False))
        scope = college_scope(admin)
        if scope is not None:
            query = query.join(Confession, Confession.id == Comment.confession_id).filter(
                Confession.college_code == scope
            )
        return query.order_by(Comment.created_at.desc(), Comment.id.desc()).all()
    except SQLAlchemyError as e:
        print(f"Error listing pending comments: {e}")
        raise
    finally:
        db.close()


def approve_comment(admin: User, comment_id: int) -> Optional[Comment]:
    """Make a comment public and count it on its confession"""
    db = get_db()
    try:
        comment = db.query(Comment).filter(Comment.id == comment_id).first()
        if not comment:
            return None
        college_code = db.query(Confession.college_code).filter(Confession.id == comment.confession_id).scalar()
        ensure_in_scope(admin, college_code)
        if not comment.is_approved:
            comment.is_approved = True
            db.query(Confession).filter(Confession.id == comment.confession_id).update(
                {Confession.comment_count: Confession.comment_count + 1}, synchronize_session=False
            )
            db.commit()
            db.refresh(comment)
        return comment
    except SQLAlchemyError as e:
        print(f"Error approving comment: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def delete_comment(admin: User, comment_id: int) -> bool:
    db = get_db()
    try:
        comment = db.query(Comment).filter(Comment.id == comment_id).first()
        if not comment:
            return False
        college_code = db.query(Confession.college_code).filter(Confession.id == comment.confession_id).scalar()
        ensure_in_scope(admin, college_code)
        if comment.is_approved:
            db.query(Confession).filter(
                Confession.id == comment.confession_id,
                Confession.comment_count > 0
            ).update({Confession.comment_count: Confession.comment_count - 1}, synchronize_session=False)
        db.delete(comment)
        db.commit()
        return True
    except SQLAlchemyError as e:
        print(f"Error deleting comment: {e}")
        db.rollback()
        raise
    finally:
        db.close()


# ------------------------------------------------------------------
# Direct messages
# ------------------------------------------------------------------

def _sender_college(db, message: DirectMessage) -> Optional[str]:
    return db.query(ClientSession.college_code).filter(ClientSession.id == message.from_session_id).scalar()


def list_pending_direct_messages(admin: User) -> list[DirectMessage]:
    db = get_db()
    try:
        query = db.query(DirectMessage).filter(DirectMessage.status == "pending")
        scope = college_scope(admin)
        if scope is not None:
            query = query.join(ClientSession, ClientSession.id == DirectMessage.from_session_id).filter(
                ClientSession.college_code == scope
            )
        return query.order_by(DirectMessage.created_at.desc(), DirectMessage.id.desc()).all()
    except SQLAlchemyError as e:
        print(f"Error listing pending direct messages: {e}")
        raise
    finally:
        db.close()


def review_direct_message(admin: User, message_id: int, status: str,
                          admin_note: str = None) -> Optional[DirectMessage]:
    """Set a direct message to approved or rejected. A decided message can be re-decided."""
    if status not in ("approved", "rejected"):
        raise ValueError(f"Invalid review status: {status}")

    db = get_db()
    try:
        message = db.query(DirectMessage).filter(DirectMessage.id == message_id).first()
        if not message:
            return None
        ensure_in_scope(admin, _sender_college(db, message))
        message.status = status
        if admin_note is not None:
            message.admin_note = admin_note
        db.commit()
        db.refresh(message)
        return message
    except SQLAlchemyError as e:
        print(f"Error reviewing direct message: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def update_direct_message_note(admin: User, message_id: int, admin_note: Optional[str]) -> Optional[DirectMessage]:
    """Overwrite the admin note without touching the status"""
    db = get_db()
    try:
        message = db.query(DirectMessage).filter(DirectMessage.id == message_id).first()
        if not message:
            return None
        ensure_in_scope(admin, _sender_college(db, message))
        message.admin_note = admin_note
        db.commit()
        db.refresh(message)
        return message
    except SQLAlchemyError as e:
        print(f"Error updating direct message note: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def pending_overview(admin: User) -> dict:
    """Pending counts per kind the admin is allowed to see"""
    overview = {
        "confessions": len(list_pending_confessions(admin)),
        "comments": len(list_pending_comments(admin)),
        "direct_messages": None
    }
    if has_capability(admin, Capability.moderate_direct_messages):
        overview["direct_messages"] = len(list_pending_direct_messages(admin))
    return overview
