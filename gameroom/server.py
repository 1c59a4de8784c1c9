from __future__ import annotations

import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Set

import websockets
from websockets.asyncio.server import ServerConnection, serve

from teenpatti.errors import DeckExhausted
from teenpatti.models import TableConfig
from .registry import OutboundBuffer, SessionRegistry, generate_room_code

LOGGER = logging.getLogger("teenpatti_rooms")

# GameServer glues the session registry to WebSocket clients.
# Every network concern lives here; rooms and engines stay pure.


class GameServer:
    def __init__(
        self,
        config: Optional[TableConfig] = None,
        code_factory: Callable[[], str] = generate_room_code,
    ) -> None:
        self.config = config or TableConfig()
        self.outbox = OutboundBuffer()
        self.registry = SessionRegistry(self.outbox, self._schedule, self.config, code_factory)
        self.sessions: Dict[str, ServerConnection] = {}
        self._flush_tasks: Set[asyncio.Task] = set()

    async def start(self, host: str = "0.0.0.0", port: int = 3001) -> None:
        # websockets.serve keeps accepting clients until the process stops.
        async with serve(self._handle_connection, host, port):
            LOGGER.info("Room server listening on %s:%s", host, port)
            await asyncio.Future()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        participant_id = uuid.uuid4().hex
        self.sessions[participant_id] = websocket
        LOGGER.info("Participant %s connected", participant_id)
        await self._send_json(websocket, "welcome", {"participant_id": participant_id})

        try:
            async for raw in websocket:
                await self._handle_message(participant_id, raw)
        except websockets.ConnectionClosed:
            pass
        finally:
            self.sessions.pop(participant_id, None)
            self.registry.dispatch(participant_id, "disconnect")
            LOGGER.info("Participant %s disconnected", participant_id)
            await self._flush()

    async def _handle_message(self, participant_id: str, raw: str) -> None:
        message = self._decode(raw)
        event = message.pop("type", None)
        if not isinstance(event, str) or event == "disconnect":
            websocket = self.sessions.get(participant_id)
            if websocket is not None:
                await self._send_error(websocket, code="BAD_JSON", msg="Expected a JSON object with a type")
            return

        try:
            self.registry.dispatch(participant_id, event, message)
        except DeckExhausted:
            LOGGER.exception("Deck exhausted while handling %s from %s", event, participant_id)
            raise
        await self._flush()

    def _schedule(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(delay, self._run_scheduled, callback)

    def _run_scheduled(self, callback: Callable[[], None]) -> None:
        callback()
        task = asyncio.get_running_loop().create_task(self._flush())
        self._flush_tasks.add(task)
        task.add_done_callback(self._flush_tasks.discard)

    async def _flush(self) -> None:
        for message in self.outbox.drain():
            targets = [self.sessions[pid] for pid in message.recipients if pid in self.sessions]
            if not targets:
                continue
            envelope = self._envelope(message.event, message.payload)
            await asyncio.gather(*(socket.send(envelope) for socket in targets), return_exceptions=True)

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def _send_error(self, websocket: ServerConnection, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    def _decode(self, raw: str) -> Dict[str, object]:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return message if isinstance(message, dict) else {}
