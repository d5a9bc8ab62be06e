"""Broadcast relay for the live chat WebSocket."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from medfinder.exceptions import TransportError
from medfinder.metrics import ws_connections, ws_malformed_total

logger = logging.getLogger(__name__)

CHAT_MESSAGE = "chat_message"


def parse_envelope(raw: str | bytes) -> dict[str, Any]:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise TransportError("Binary frame is not UTF-8") from exc
    try:
        payload = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as exc:
        raise TransportError("Malformed JSON frame") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("type"), str):
        raise TransportError("Frame must be an object with a 'type' field")
    return payload


class ConnectionManager:
    def __init__(self) -> None:
        self.active: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.active.append(websocket)
        ws_connections.inc()
        logger.info("WebSocket connected (%d active)", len(self.active))

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.active:
            self.active.remove(websocket)
            ws_connections.dec()
            logger.info("WebSocket closed (%d active)", len(self.active))

    async def broadcast(self, payload: dict[str, Any]) -> int:
        """Send to every socket; a failed send drops that socket only."""
        delivered = 0
        for websocket in list(self.active):
            try:
                await websocket.send_json(payload)
                delivered += 1
            except (WebSocketDisconnect, RuntimeError) as exc:
                logger.warning("Dropping WebSocket after failed send: %s", exc)
                self.disconnect(websocket)
        return delivered

    async def handle_frame(self, raw: str | bytes | None) -> None:
        try:
            envelope = parse_envelope(raw)
        except TransportError as exc:
            ws_malformed_total.inc()
            logger.warning("Discarding WebSocket frame: %s", exc.message)
            return
        if envelope["type"] != CHAT_MESSAGE:
            logger.debug("Ignoring WebSocket frame of type %s", envelope["type"])
            return
        await self.broadcast(
            {
                "type": CHAT_MESSAGE,
                "data": envelope.get("data"),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )


manager = ConnectionManager()


__all__ = ["CHAT_MESSAGE", "parse_envelope", "ConnectionManager", "manager"]
