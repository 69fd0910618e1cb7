from fastapi import APIRouter, HTTPException, Request

from schemas.common import ConfessionOut, CommentOut, SuccessResponse, PendingOverview
from schemas.messages import DirectMessageOut, DirectMessageReview
from services.auth import require_admin
from services.moderation import (
    list_pending_confessions, approve_confession, delete_confession,
    list_pending_comments, approve_comment, delete_comment,
    list_pending_direct_messages, review_direct_message, update_direct_message_note,
    pending_overview
)
from services.permissions import Capability

router = APIRouter(prefix="/api/admin", tags=["admin"])


# ---------------------------------------------------------------------------
# Confessions
# ---------------------------------------------------------------------------

@router.get("/confessions/pending", response_model=list[ConfessionOut])
async def pending_confessions(request: Request):
    admin = require_admin(request, Capability.moderate_confessions)
    return list_pending_confessions(admin)


@router.post("/confessions/{confession_id}/approve", response_model=SuccessResponse)
async def approve_confession_route(confession_id: int, request: Request):
    admin = require_admin(request, Capability.moderate_confessions)
    if not approve_confession(admin, confession_id):
        raise HTTPException(status_code=404, detail="Confession not found")
    return SuccessResponse(success=True, message="Confession approved")


@router.delete("/confessions/{confession_id}", response_model=SuccessResponse)
async def delete_confession_route(confession_id: int, request: Request):
    admin = require_admin(request, Capability.moderate_confessions)
    if not delete_confession(admin, confession_id):
        raise HTTPException(status_code=404, detail="Confession not found")
    return SuccessResponse(success=True, message="Confession deleted")


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

@router.get("/comments/pending", response_model=list[CommentOut])
async def pending_comments(request: Request):
    admin = require_admin(request, Capability.moderate_comments)
    return list_pending_comments(admin)


@router.post("/comments/{comment_id}/approve", response_model=SuccessResponse)
async def approve_comment_route(comment_id: int, request: Request):
    admin = require_admin(request, Capability.moderate_comments)
    if not approve_comment(admin, comment_id):
        raise HTTPException(status_code=404, detail="Comment not found")
    return SuccessResponse(success=True, message="Comment approved")


@router.delete("/comments/{comment_id}", response_model=SuccessResponse)
async def delete_comment_route(comment_id: int, request: Request):
    admin = require_admin(request, Capability.moderate_comments)
    if not delete_comment(admin, comment_id):
        raise HTTPException(status_code=404, detail="Comment not found")
    return SuccessResponse(success=True, message="Comment deleted")


# ---------------------------------------------------------------------------
# Direct messages
# ---------------------------------------------------------------------------

@router.get("/direct-messages/pending", response_model=list[DirectMessageOut])
async def pending_direct_messages(request: Request):
    admin = require_admin(request, Capability.moderate_direct_messages)
    return list_pending_direct_messages(admin)


@router.post("/direct-messages/{message_id}/approve", response_model=DirectMessageOut)
async def approve_direct_message(message_id: int, request: Request, input: DirectMessageReview = None):
    admin = require_admin(request, Capability.moderate_direct_messages)
    note = input.admin_note if input else None
    message = review_direct_message(admin, message_id, "approved", admin_note=note)
    if not message:
        raise HTTPException(status_code=404, detail="Direct message not found")
    return message


@router.post("/direct-messages/{message_id}/reject", response_model=DirectMessageOut)
async def reject_direct_message(message_id: int, request: Request, input: DirectMessageReview = None):
    admin = require_admin(request, Capability.moderate_direct_messages)
    note = input.admin_note if input else None
    message = review_direct_message(admin, message_id, "rejected", admin_note=note)
    if not message:
        raise HTTPException(status_code=404, detail="Direct message not found")
    return message


@router.put("/direct-messages/{message_id}/note", response_model=DirectMessageOut)
async def put_direct_message_note(message_id: int, input: DirectMessageReview, request: Request):
    admin = require_admin(request, Capability.moderate_direct_messages)
    message = update_direct_message_note(admin, message_id, input.admin_note)
    if not message:
        raise HTTPException(status_code=404, detail="Direct message not found")
    return message


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

@router.get("/overview", response_model=PendingOverview)
async def overview(request: Request):
    """Pending counts for the caller's dashboard"""
    admin = require_admin(request, Capability.moderate_confessions)
    return pending_overview(admin)
