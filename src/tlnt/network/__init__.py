"""Network layer for tlnt - Telnet connections, sessions and resource tracking."""

from tlnt.network.connection import Connection
from tlnt.network.registry import ResourceRegistry
from tlnt.network.session import Session, SessionState
from tlnt.network.telnet_server import TelnetServer

__all__ = [
    "Connection",
    "ResourceRegistry",
    "Session",
    "SessionState",
    "TelnetServer",
]
