"""A minimal TCP chat relay: message wire format, relay server and terminal client."""

__version__ = "0.1.0"
__all__ = ["message", "client", "server"]