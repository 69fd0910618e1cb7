from fastapi import APIRouter, HTTPException, Request, Response

from schemas.auth import (LoginInput, AuthResponse, MeResponse, AdminOut,
                          AdminCreateInput, AdminUpdateInput, AdminStatusInput)
from schemas.common import SessionOut, SuccessResponse
from services.auth import (PASSWORD_MAX_BYTES, authenticate, login, get_current_admin, require_admin,
                           list_admins, create_admin, update_admin, set_admin_status, delete_admin)
from services.colleges import get_college
from services.permissions import Capability
from services.sessions import (SESSION_COOKIE, SESSION_HEADER, get_request_token,
                               get_session_by_token, link_user)

router = APIRouter(prefix="/api", tags=["auth"])


def _check_college(college_code):
    if college_code and not get_college(college_code):
        raise HTTPException(status_code=400, detail="Unknown college")


def _check_password(password):
    if len(password) < 8:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters")
    if len(password.encode('utf-8')) > PASSWORD_MAX_BYTES:
        raise HTTPException(status_code=400, detail=f"Password must be at most {PASSWORD_MAX_BYTES} bytes")


@router.post("/auth/login", response_model=AuthResponse)
async def admin_login(input: LoginInput, response: Response):
    """Log an admin in. The returned session token carries the admin identity."""
    user = authenticate(input.username, input.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if user.status != "active":
        raise HTTPException(status_code=403, detail="Admin account is inactive")

    session = login(user)

    response.headers[SESSION_HEADER] = session.token
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session.token,
        httponly=True,
        max_age=30 * 24 * 60 * 60,  # 30 days
        samesite="lax"
    )

    return AuthResponse(
        success=True,
        message="Logged in successfully",
        user=AdminOut.model_validate(user),
        session_token=session.token,
        session=SessionOut.model_validate(session)
    )


@router.post("/auth/logout", response_model=SuccessResponse)
async def admin_logout(request: Request, response: Response):
    """Detach the admin from the session. The anonymous session itself lives on."""
    session = get_session_by_token(get_request_token(request))
    if session and session.user_id is not None:
        link_user(session.id, None)

    response.delete_cookie(SESSION_COOKIE)
    return SuccessResponse(success=True, message="Logged out")


@router.get("/auth/me", response_model=MeResponse)
async def get_me(request: Request):
    """Get current admin info"""
    user = get_current_admin(request)
    if not user:
        return MeResponse(authenticated=False, user=None)
    return MeResponse(authenticated=True, user=AdminOut.model_validate(user))


# ---------------------------------------------------------------------------
# Admin management (chief only)
# ---------------------------------------------------------------------------

@router.get("/admins", response_model=list[AdminOut])
async def get_admins(request: Request):
    require_admin(request, Capability.manage_admins)
    return list_admins()


@router.post("/admins", response_model=AdminOut)
async def post_admin(input: AdminCreateInput, request: Request):
    require_admin(request, Capability.manage_admins)

    if not input.username.strip():
        raise HTTPException(status_code=400, detail="Username is required")
    _check_password(input.password)
    _check_college(input.college_code)

    return create_admin(input.username, input.password, input.role, college_code=input.college_code)


@router.put("/admins/{admin_id}", response_model=AdminOut)
async def put_admin(admin_id: int, input: AdminUpdateInput, request: Request):
    chief = require_admin(request, Capability.manage_admins)
    if chief.id == admin_id and input.role is not None and input.role != "chief":
        raise HTTPException(status_code=400, detail="You cannot demote yourself")

    if input.password is not None:
        _check_password(input.password)
    _check_college(input.college_code)

    user = update_admin(
        admin_id,
        username=input.username,
        password=input.password,
        role=input.role,
        college_code=input.college_code
    )
    if not user:
        raise HTTPException(status_code=404, detail="Admin not found")
    return user


@router.put("/admins/{admin_id}/status", response_model=AdminOut)
async def put_admin_status(admin_id: int, input: AdminStatusInput, request: Request):
    chief = require_admin(request, Capability.manage_admins)
    if chief.id == admin_id and input.status != "active":
        raise HTTPException(status_code=400, detail="You cannot deactivate yourself")

    user = set_admin_status(admin_id, input.status)
    if not user:
        raise HTTPException(status_code=404, detail="Admin not found")
    return user


@router.delete("/admins/{admin_id}", response_model=SuccessResponse)
async def remove_admin(admin_id: int, request: Request):
    chief = require_admin(request, Capability.manage_admins)
    if chief.id == admin_id:
        raise HTTPException(status_code=400, detail="You cannot delete yourself")

    if not delete_admin(admin_id):
        raise HTTPException(status_code=404, detail="Admin not found")
    return SuccessResponse(success=True, message="Admin deleted")
