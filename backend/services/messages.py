from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError

from config import DEFAULT_PAGE_SIZE
from database import get_db
from models import ClientSession, DirectMessage, ChatRoom, ChatMessage
from services.content_filter import filter_message


# ------------------------------------------------------------------
# Direct messages
# ------------------------------------------------------------------

def create_direct_message(from_session_id: int, to_session_id: int, content: str) -> Optional[DirectMessage]:
    """Queue a direct message for review. None when the recipient session does not exist."""
    db = get_db()
    try:
        recipient = db.query(ClientSession.id).filter(ClientSession.id == to_session_id).first()
        if not recipient:
            return None

        message = DirectMessage(
            content=content,
            from_session_id=from_session_id,
            to_session_id=to_session_id,
            status="pending"
        )
        db.add(message)
        db.commit()
        db.refresh(message)
        return message
    except SQLAlchemyError as e:
        print(f"Error creating direct message: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def list_direct_messages(session_id: int) -> list[DirectMessage]:
    """Everything the session sent, plus approved messages it received. Newest first."""
    db = get_db()
    try:
        return db.query(DirectMessage).filter(
            or_(
                DirectMessage.from_session_id == session_id,
                and_(DirectMessage.to_session_id == session_id, DirectMessage.status == "approved")
            )
        ).order_by(DirectMessage.created_at.desc(), DirectMessage.id.desc()).all()
    except SQLAlchemyError as e:
        print(f"Error listing direct messages: {e}")
        raise
    finally:
        db.close()


# ------------------------------------------------------------------
# Chat rooms and history
# ------------------------------------------------------------------

def list_rooms(college_code: str = None) -> list[ChatRoom]:
    db = get_db()
    try:
        query = db.query(ChatRoom).filter(ChatRoom.is_active.is_(True))
        if college_code:
            query = query.filter(ChatRoom.college_code == college_code)
        return query.order_by(ChatRoom.id.asc()).all()
    except SQLAlchemyError as e:
        print(f"Error listing chat rooms: {e}")
        raise
    finally:
        db.close()


def get_room(room_id: int) -> Optional[ChatRoom]:
    """Active room by id"""
    db = get_db()
    try:
        return db.query(ChatRoom).filter(ChatRoom.id == room_id, ChatRoom.is_active.is_(True)).first()
    except SQLAlchemyError as e:
        print(f"Error getting chat room: {e}")
        raise
    finally:
        db.close()


def list_chat_messages(room_id: int, limit: int = DEFAULT_PAGE_SIZE) -> list[ChatMessage]:
    """Most recent messages of a room, newest first"""
    db = get_db()
    try:
        return db.query(ChatMessage).filter(ChatMessage.room_id == room_id).order_by(
            ChatMessage.created_at.desc(), ChatMessage.id.desc()
        ).limit(limit).all()
    except SQLAlchemyError as e:
        print(f"Error listing chat messages: {e}")
        raise
    finally:
        db.close()


def create_chat_message(room_id: int, session_id: int, content: str,
                        nickname: str = None, is_public: bool = True) -> ChatMessage:
    """Persist a chat message. Visible immediately, so blocked words are masked here."""
    db = get_db()
    try:
        message = ChatMessage(
            content=filter_message(content),
            room_id=room_id,
            session_id=session_id,
            nickname=nickname,
            is_public=is_public
        )
        db.add(message)
        db.commit()
        db.refresh(message)
        return message
    except SQLAlchemyError as e:
        print(f"Error creating chat message: {e}")
        db.rollback()
        raise
    finally:
        db.close()
