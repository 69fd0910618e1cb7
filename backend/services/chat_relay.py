"""In-process fan-out of chat events to the sockets subscribed to a room.

Channels are named after the chat room id. Presence is only the number of
open sockets in a channel; nothing here is persisted.
"""

from collections import defaultdict
from typing import Optional

from fastapi import WebSocket


class ChatRelay:
    def __init__(self) -> None:
        self._rooms: dict[str, set[WebSocket]] = defaultdict(set)

    def online(self, room: str) -> int:
        return len(self._rooms.get(room, ()))

    def is_member(self, room: str, websocket: WebSocket) -> bool:
        return websocket in self._rooms.get(room, ())

    def join(self, room: str, websocket: WebSocket) -> int:
        self._rooms[room].add(websocket)
        return self.online(room)

    def leave(self, room: str, websocket: WebSocket) -> int:
        members = self._rooms.get(room)
        if members is not None:
            members.discard(websocket)
            if not members:
                del self._rooms[room]
        return self.online(room)

    def disconnect(self, websocket: WebSocket) -> list[str]:
        """Remove the socket everywhere. Returns the rooms it was in."""
        rooms = [room for room, members in self._rooms.items() if websocket in members]
        for room in rooms:
            self.leave(room, websocket)
        return rooms

    async def send(self, websocket: WebSocket, event: str, data: dict) -> None:
        await websocket.send_json({"event": event, "data": data})

    async def broadcast(self, room: str, event: str, data: dict,
                        exclude: Optional[WebSocket] = None) -> int:
        """Send an event to every socket in the room except `exclude`. Returns the delivery count."""
        delivered = 0
        for websocket in list(self._rooms.get(room, ())):
            if websocket is exclude:
                continue
            try:
                await self.send(websocket, event, data)
                delivered += 1
            except Exception as e:
                print(f"Error relaying {event} to room {room}, dropping socket: {e}")
                self.disconnect(websocket)
        return delivered


relay = ChatRelay()
