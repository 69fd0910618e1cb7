from typing import Optional

import bcrypt
from fastapi import HTTPException, Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from database import get_db
from models import User, ClientSession
from services.permissions import Capability, Role, COLLEGE_ROLES, require_capability
from services.sessions import get_request_token, get_session_by_token, create_session

# bcrypt only looks at the first 72 bytes and newer releases refuse anything longer
PASSWORD_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash"""
    if len(password.encode('utf-8')) > PASSWORD_MAX_BYTES:
        return False
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


def get_user(user_id: int) -> Optional[User]:
    db = get_db()
    try:
        return db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        print(f"Error getting user: {e}")
        raise
    finally:
        db.close()


def get_user_by_username(username: str) -> Optional[User]:
    db = get_db()
    try:
        return db.query(User).filter(User.username == username.strip()).first()
    except SQLAlchemyError as e:
        print(f"Error getting user: {e}")
        raise
    finally:
        db.close()


def authenticate(username: str, password: str) -> Optional[User]:
    """Return the admin for valid credentials, None otherwise"""
    user = get_user_by_username(username)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def login(user: User) -> ClientSession:
    """Issue a new session linked to the admin"""
    return create_session(user_id=user.id)


def get_user_from_token(token: str) -> Optional[User]:
    """Get the admin linked to a session token"""
    session = get_session_by_token(token)
    if session is None or session.user_id is None:
        return None
    return get_user(session.user_id)


def get_current_admin(request: Request) -> Optional[User]:
    """Extract current admin from the session header, bearer header or cookie"""
    token = get_request_token(request)
    if not token:
        return None
    return get_user_from_token(token)


def require_admin(request: Request, capability: Capability) -> User:
    """Resolve the calling admin and check the capability. 401 without identity, 403 without rights."""
    user = get_current_admin(request)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    require_capability(user, capability)
    return user


# ------------------------------------------------------------------
# Admin management (chief only at the router level)
# ------------------------------------------------------------------

def _check_college_assignment(role: str, college_code: Optional[str]) -> None:
    if Role(role) in COLLEGE_ROLES and not college_code:
        raise HTTPException(status_code=400, detail="College admins need a college code")


def list_admins() -> list[User]:
    db = get_db()
    try:
        return db.query(User).order_by(User.created_at.asc(), User.id.asc()).all()
    except SQLAlchemyError as e:
        print(f"Error listing admins: {e}")
        raise
    finally:
        db.close()


def create_admin(username: str, password: str, role: str, college_code: str = None) -> User:
    """Create an admin account. Raises 409 on a taken username or college/role slot."""
    _check_college_assignment(role, college_code)
    if Role(role) not in COLLEGE_ROLES:
        college_code = None

    db = get_db()
    try:
        user = User(
            username=username.strip(),
            password_hash=hash_password(password),
            role=role,
            college_code=college_code,
            status="active"
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Username or college role already taken")
    except SQLAlchemyError as e:
        print(f"Error creating admin: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def update_admin(user_id: int, username: str = None, password: str = None,
                 role: str = None, college_code: str = None) -> Optional[User]:
    db = get_db()
    try:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            return None

        new_role = role or user.role
        new_college = college_code if college_code is not None else user.college_code
        _check_college_assignment(new_role, new_college)

        if username:
            user.username = username.strip()
        if password:
            user.password_hash = hash_password(password)
        user.role = new_role
        user.college_code = new_college if Role(new_role) in COLLEGE_ROLES else None
        db.commit()
        db.refresh(user)
        return user
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Username or college role already taken")
    except SQLAlchemyError as e:
        print(f"Error updating admin: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def set_admin_status(user_id: int, status: str) -> Optional[User]:
    db = get_db()
    try:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            return None
        user.status = status
        db.commit()
        db.refresh(user)
        return user
    except SQLAlchemyError as e:
        print(f"Error updating admin status: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def delete_admin(user_id: int) -> bool:
    """Delete an admin and detach it from any sessions it was logged into"""
    db = get_db()
    try:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            return False
        db.query(ClientSession).filter(ClientSession.user_id == user_id).update(
            {ClientSession.user_id: None}, synchronize_session=False
        )
        db.delete(user)
        db.commit()
        return True
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Admin has token history; deactivate it instead")
    except SQLAlchemyError as e:
        print(f"Error deleting admin: {e}")
        db.rollback()
        raise
    finally:
        db.close()
