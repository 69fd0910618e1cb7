from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("college_code", "role", name="uq_users_college_role"),)

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    username = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="normal")
    college_code = Column(String(50), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="active")

    sessions = relationship("ClientSession", back_populates="user")


class ClientSession(Base):
    """Anonymous per-client identity. Admins get one linked to their user at login."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    token = Column(String(255), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    college_code = Column(String(50), nullable=True)
    nickname = Column(String(50), nullable=True)
    daily_confession_count = Column(Integer, nullable=False, default=0)
    last_reset_date = Column(String(10), nullable=False)

    user = relationship("User", back_populates="sessions")
