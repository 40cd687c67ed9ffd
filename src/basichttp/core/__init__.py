"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    socket_server.py   SocketServer: bind, listen, sequential accept loop
    connection.py      Connection: one client socket, one read, one write,
                       guaranteed close

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # The listener - accepts connections one at a time
    "Connection",       # Wrapper for a client socket
    "ConnectionState",  # Linear lifecycle states
]
