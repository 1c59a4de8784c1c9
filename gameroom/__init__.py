"""Room host package: wraps the Teen Patti engine with rooms and networking."""

from .registry import Outbound, OutboundBuffer, Room, SessionRegistry
from .server import GameServer

__all__ = ["GameServer", "Outbound", "OutboundBuffer", "Room", "SessionRegistry"]
