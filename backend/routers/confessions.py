from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, Response

from config import (CONFESSION_CATEGORIES, CONFESSION_MIN_LENGTH, CONFESSION_MAX_LENGTH,
                    COMMENT_MAX_LENGTH, NICKNAME_MAX_LENGTH, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
from schemas.common import (ConfessionInput, ConfessionOut, ConfessionCreatedResponse,
                            CommentInput, CommentOut, LikeResponse)
from services.colleges import get_college
from services.confessions import (create_confession, list_confessions, get_confession,
                                  list_comments, create_comment, toggle_like)
from services.sessions import resolve_session

router = APIRouter(prefix="/api", tags=["confessions"])


def _clean_nickname(nickname: Optional[str]) -> Optional[str]:
    if nickname is None:
        return None
    nickname = nickname.strip()
    if len(nickname) > NICKNAME_MAX_LENGTH:
        raise HTTPException(status_code=400, detail=f"Nickname must be at most {NICKNAME_MAX_LENGTH} characters")
    return nickname or None


@router.get("/confessions", response_model=list[ConfessionOut])
async def get_confessions(
    college_code: Optional[str] = Query(None, alias="collegeCode"),
    category: Optional[str] = None,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
):
    """Public feed: approved confessions, newest first"""
    return list_confessions(college_code=college_code, category=category, limit=limit, offset=offset)


@router.post("/confessions", response_model=ConfessionCreatedResponse)
async def post_confession(input: ConfessionInput, request: Request, response: Response):
    """Submit a confession for review. Counts against the daily limit."""
    session = resolve_session(request, response)

    content = input.content.strip()
    if len(content) < CONFESSION_MIN_LENGTH:
        raise HTTPException(status_code=400, detail=f"Confession must be at least {CONFESSION_MIN_LENGTH} characters")
    if len(content) > CONFESSION_MAX_LENGTH:
        raise HTTPException(status_code=400, detail=f"Confession must be less than {CONFESSION_MAX_LENGTH} characters")
    if input.category not in CONFESSION_CATEGORIES:
        raise HTTPException(status_code=400, detail="Invalid category")
    if not get_college(input.college_code):
        raise HTTPException(status_code=400, detail="Unknown college")
    nickname = _clean_nickname(input.nickname)

    confession, remaining_today = create_confession(
        session_id=session.id,
        content=content,
        category=input.category,
        college_code=input.college_code,
        nickname=nickname if nickname is not None else session.nickname
    )
    return ConfessionCreatedResponse(
        **ConfessionOut.model_validate(confession).model_dump(),
        remaining_today=remaining_today
    )


@router.get("/confessions/{confession_id}", response_model=ConfessionOut)
async def get_confession_by_id(confession_id: int):
    confession = get_confession(confession_id)
    if not confession:
        raise HTTPException(status_code=404, detail="Confession not found")
    return confession


@router.get("/confessions/{confession_id}/comments", response_model=list[CommentOut])
async def get_comments(confession_id: int):
    """Approved comments, oldest first"""
    if not get_confession(confession_id):
        raise HTTPException(status_code=404, detail="Confession not found")
    return list_comments(confession_id)


@router.post("/confessions/{confession_id}/comments", response_model=CommentOut)
async def post_comment(confession_id: int, input: CommentInput, request: Request, response: Response):
    """Submit a comment for review"""
    session = resolve_session(request, response)

    content = input.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Comment cannot be empty")
    if len(content) > COMMENT_MAX_LENGTH:
        raise HTTPException(status_code=400, detail=f"Comment must be less than {COMMENT_MAX_LENGTH} characters")
    nickname = _clean_nickname(input.nickname)

    comment = create_comment(
        confession_id,
        session.id,
        content,
        nickname=nickname if nickname is not None else session.nickname
    )
    if not comment:
        raise HTTPException(status_code=404, detail="Confession not found")
    return comment


@router.post("/confessions/{confession_id}/like", response_model=LikeResponse)
async def like_confession(confession_id: int, request: Request, response: Response):
    """Toggle the caller's like. Calling twice likes then unlikes."""
    session = resolve_session(request, response)
    result = toggle_like(confession_id, session.id)
    if result is None:
        raise HTTPException(status_code=404, detail="Confession not found")
    action, likes = result
    return LikeResponse(action=action, likes=likes)
