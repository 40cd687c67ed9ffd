"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log line per connection, written after the response has gone out.

=============================================================================
FORMATS
=============================================================================

text (Apache-style, easy to grep):

    127.0.0.1 - - [19/Oct/2026:10:15:02 +0000] "GET /style.css" 200 1337 0.41ms

json (one object per line, for log shippers):

    {"connection_id": "3f2a9c1e", "client_ip": "127.0.0.1", "method": "GET",
     "path": "style.css", "status_code": 200, "bytes_sent": 1337,
     "duration_ms": 0.41, "failure": null, "timestamp": "..."}

The path is the requested one with the index file substituted for an
empty target, and every 404 carries the reason it was a 404.

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass, asdict
from typing import Optional


# Namespaced so it can be routed separately:
#   logging.getLogger("basichttp.access").addHandler(file_handler)
logger = logging.getLogger("basichttp.access")


@dataclass
class RequestLog:
    """
    Structured log entry for one connection.

    Fields:
        connection_id: Short id shared with the connection's debug lines
        client_ip:     Peer address
        method:        Method token as sent ("" if unparseable)
        path:          Requested path, index file if empty
        status_code:   Status written on the wire
        bytes_sent:    Response bytes actually written
        duration_ms:   Accept to response written
        failure:       Why the path was a 404, None on success
        timestamp:     When the line was written
    """

    connection_id: str
    client_ip: str
    method: str
    path: str
    status_code: int
    bytes_sent: int
    duration_ms: float
    failure: Optional[str] = None
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = time.strftime("%d/%b/%Y:%H:%M:%S %z")

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        # Undecodable request bytes show up as \udcXX escapes
        path = self.path.encode("utf-8", "backslashreplace").decode("utf-8")
        line = (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method or "-"} /{path}" {self.status_code} '
            f'{self.bytes_sent} {self.duration_ms:.2f}ms'
        )
        if self.failure:
            line += f" ({self.failure})"
        return line


class AccessLogger:
    """
    Writes RequestLog entries to the "basichttp.access" logger.

    Usage:
        access = AccessLogger(log_format="json")
        access.log(RequestLog(...))
    """

    def __init__(self, log_format: str = "text", level: int = logging.INFO):
        """
        Args:
            log_format: "text" or "json".
            level: Logging level the entries are emitted at.
        """
        self.log_format = log_format
        self.level = level

    def format(self, entry: RequestLog) -> str:
        if self.log_format == "json":
            return json.dumps(entry.to_dict())
        return entry.to_text()

    def log(self, entry: RequestLog):
        logger.log(self.level, self.format(entry))
