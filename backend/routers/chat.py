import json
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, Response, WebSocket, WebSocketDisconnect

from config import CHAT_MESSAGE_MAX_LENGTH, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, NICKNAME_MAX_LENGTH
from models import ClientSession
from schemas.messages import ChatRoomOut, ChatMessageInput, ChatMessageOut
from services.chat_relay import relay
from services.messages import list_rooms, get_room, list_chat_messages, create_chat_message
from services.sessions import resolve_or_create, resolve_session

router = APIRouter(tags=["chat"])


def _room_out(room) -> ChatRoomOut:
    out = ChatRoomOut.model_validate(room)
    out.online = relay.online(str(room.id))
    return out


def _message_payload(message) -> dict:
    return ChatMessageOut.model_validate(message).model_dump(mode="json", by_alias=True)


def _validate_chat_content(content: Optional[str], nickname: Optional[str]) -> str:
    content = (content or "").strip()
    if not content:
        raise ValueError("Message cannot be empty")
    if len(content) > CHAT_MESSAGE_MAX_LENGTH:
        raise ValueError(f"Message must be less than {CHAT_MESSAGE_MAX_LENGTH} characters")
    if nickname and len(nickname) > NICKNAME_MAX_LENGTH:
        raise ValueError(f"Nickname must be at most {NICKNAME_MAX_LENGTH} characters")
    return content


# ---------------------------------------------------------------------------
# REST: rooms and history
# ---------------------------------------------------------------------------

@router.get("/api/chat/rooms", response_model=list[ChatRoomOut])
async def get_rooms(college_code: Optional[str] = Query(None, alias="collegeCode")):
    return [_room_out(room) for room in list_rooms(college_code)]


@router.get("/api/chat/rooms/{room_id}/messages", response_model=list[ChatMessageOut])
async def get_room_messages(room_id: int, limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)):
    """Room history, newest first"""
    if not get_room(room_id):
        raise HTTPException(status_code=404, detail="Chat room not found")
    return list_chat_messages(room_id, limit=limit)


@router.post("/api/chat/rooms/{room_id}/messages", response_model=ChatMessageOut)
async def post_room_message(room_id: int, input: ChatMessageInput, request: Request, response: Response):
    """Persist a chat message, then push it to everyone connected to the room"""
    session = resolve_session(request, response)
    if not get_room(room_id):
        raise HTTPException(status_code=404, detail="Chat room not found")
    try:
        content = _validate_chat_content(input.content, input.nickname)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    message = create_chat_message(
        room_id,
        session.id,
        content,
        nickname=input.nickname or session.nickname,
        is_public=input.is_public
    )
    await relay.broadcast(str(room_id), "receiveMessage", {"message": _message_payload(message)})
    return message


# ---------------------------------------------------------------------------
# WebSocket relay
#
# Frames are JSON objects {"event": ..., "data": {...}}.
#   joinRoom    {room}                      -> joined / presence
#   leaveRoom   {room}                      -> left / presence
#   sendMessage {room, content, nickname?}  -> messageSent / receiveMessage
#   typing      {room, nickname, isTyping}  -> userTyping
# ---------------------------------------------------------------------------

async def _error(websocket: WebSocket, message: str) -> None:
    await relay.send(websocket, "error", {"message": message})


def _room_key(value) -> Optional[str]:
    """Channel name for a client-supplied room id, so "01", " 1" and 1 all map to "1"."""
    try:
        return str(int(str(value).strip()))
    except ValueError:
        return None


async def _join_room(websocket: WebSocket, room: Optional[str]) -> None:
    chat_room = get_room(int(room)) if room is not None else None
    if not chat_room:
        await _error(websocket, "Chat room not found")
        return
    room = str(chat_room.id)
    if not relay.is_member(room, websocket) and relay.online(room) >= chat_room.max_participants:
        await _error(websocket, "Chat room is full")
        return

    online = relay.join(room, websocket)
    print(f"Socket joined room {room} ({online} online)")
    await relay.send(websocket, "joined", {"room": room, "online": online})
    await relay.broadcast(room, "presence", {"room": room, "online": online}, exclude=websocket)


async def _leave_room(websocket: WebSocket, room: str) -> None:
    online = relay.leave(room, websocket)
    await relay.send(websocket, "left", {"room": room})
    await relay.broadcast(room, "presence", {"room": room, "online": online})


async def _send_message(websocket: WebSocket, session: ClientSession, room: str, data: dict) -> None:
    nickname = data.get("nickname") or session.nickname
    try:
        content = _validate_chat_content(data.get("content"), nickname)
    except ValueError as e:
        await _error(websocket, str(e))
        return

    message = create_chat_message(int(room), session.id, content, nickname=nickname)
    payload = {"message": _message_payload(message)}
    await relay.send(websocket, "messageSent", payload)
    await relay.broadcast(room, "receiveMessage", payload, exclude=websocket)


async def _typing(websocket: WebSocket, room: str, data: dict) -> None:
    await relay.broadcast(room, "userTyping", {
        "nickname": data.get("nickname"),
        "isTyping": data.get("isTyping"),
    }, exclude=websocket)


async def _handle_frame(websocket: WebSocket, session: ClientSession, raw: str) -> None:
    try:
        frame = json.loads(raw)
    except json.JSONDecodeError:
        await _error(websocket, "Frames must be JSON")
        return
    if not isinstance(frame, dict) or not isinstance(frame.get("data", {}), dict):
        await _error(websocket, "Frames must look like {\"event\": ..., \"data\": {...}}")
        return

    event = frame.get("event")
    data = frame.get("data") or {}
    room = _room_key(data.get("room"))

    if event == "joinRoom":
        await _join_room(websocket, room)
        return
    if event not in ("leaveRoom", "sendMessage", "typing"):
        await _error(websocket, f"Unknown event: {event}")
        return
    if room is None or not relay.is_member(room, websocket):
        await _error(websocket, "Join the room first")
        return

    if event == "leaveRoom":
        await _leave_room(websocket, room)
    elif event == "sendMessage":
        await _send_message(websocket, session, room, data)
    else:
        await _typing(websocket, room, data)


@router.websocket("/ws/chat")
async def chat_socket(websocket: WebSocket, token: Optional[str] = None):
    await websocket.accept()
    session, _ = resolve_or_create(token)
    await relay.send(websocket, "connected", {"sessionId": session.id, "token": session.token})
    print(f"A user connected: session {session.id}")

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            if message.get("text") is None:
                await _error(websocket, "Frames must be JSON")
                continue
            await _handle_frame(websocket, session, message["text"])
    except WebSocketDisconnect:
        print(f"User disconnected: session {session.id}")
    finally:
        for room in relay.disconnect(websocket):
            await relay.broadcast(room, "presence", {"room": room, "online": relay.online(room)})
