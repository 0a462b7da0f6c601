from .network import NetworkClient, parse_address
from .session import ClientSession, Direction, RawTrafficObserver, SessionState, connect

__all__ = ["NetworkClient", "parse_address", "ClientSession", "Direction", "RawTrafficObserver", "SessionState", "connect"]
