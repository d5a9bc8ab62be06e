from fastapi import APIRouter, WebSocket

from medfinder.services.relay import manager

router = APIRouter()


@router.websocket("/ws")
async def chat_relay(websocket: WebSocket):
    """Relay ``chat_message`` envelopes to every connected client."""
    await manager.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            # Text and binary frames carry the same JSON envelope
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            await manager.handle_frame(raw)
    finally:
        manager.disconnect(websocket)
