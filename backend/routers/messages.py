from fastapi import APIRouter, HTTPException, Request, Response

from config import DIRECT_MESSAGE_MAX_LENGTH
from schemas.messages import DirectMessageInput, DirectMessageOut
from services.messages import create_direct_message, list_direct_messages
from services.sessions import resolve_session

router = APIRouter(prefix="/api", tags=["direct-messages"])


@router.get("/direct-messages", response_model=list[DirectMessageOut])
async def get_direct_messages(request: Request, response: Response):
    """Messages the caller sent (any status) and approved messages sent to it"""
    session = resolve_session(request, response)
    return list_direct_messages(session.id)


@router.post("/direct-messages", response_model=DirectMessageOut)
async def post_direct_message(input: DirectMessageInput, request: Request, response: Response):
    """Send a direct message. It is delivered once an admin approves it."""
    session = resolve_session(request, response)

    content = input.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Message cannot be empty")
    if len(content) > DIRECT_MESSAGE_MAX_LENGTH:
        raise HTTPException(status_code=400, detail=f"Message must be less than {DIRECT_MESSAGE_MAX_LENGTH} characters")
    if input.to_session_id == session.id:
        raise HTTPException(status_code=400, detail="Cannot message yourself")

    message = create_direct_message(session.id, input.to_session_id, content)
    if not message:
        raise HTTPException(status_code=404, detail="Recipient not found")
    return message
