from fastapi import APIRouter, HTTPException, Request, Response

from config import NICKNAME_MAX_LENGTH
from schemas.common import SessionResponse, SessionOut, SessionUpdateInput, DailyLimitResponse
from services.colleges import get_college
from services.limits import get_status
from services.sessions import SESSION_HEADER, get_request_token, resolve_or_create, resolve_session, update_profile

router = APIRouter(prefix="/api", tags=["session"])


@router.get("/session", response_model=SessionResponse)
async def get_session(request: Request, response: Response):
    """Resolve the caller's session, issuing a new one if needed"""
    session, is_new = resolve_or_create(get_request_token(request))
    response.headers[SESSION_HEADER] = session.token
    return SessionResponse(session=SessionOut.model_validate(session), is_new=is_new)


@router.put("/session", response_model=SessionOut)
async def put_session(input: SessionUpdateInput, request: Request, response: Response):
    """Set the caller's nickname and/or college"""
    session = resolve_session(request, response)

    if input.nickname is not None and len(input.nickname) > NICKNAME_MAX_LENGTH:
        raise HTTPException(status_code=400, detail=f"Nickname must be at most {NICKNAME_MAX_LENGTH} characters")
    if input.college_code and not get_college(input.college_code):
        raise HTTPException(status_code=400, detail="Unknown college")

    updated = update_profile(session.id, nickname=input.nickname, college_code=input.college_code)
    if not updated:
        raise HTTPException(status_code=404, detail="Session not found")
    return updated


@router.get("/daily-limit", response_model=DailyLimitResponse)
async def daily_limit(request: Request, response: Response):
    """How many confessions the caller may still post today"""
    session = resolve_session(request, response)
    return get_status(session)
