"""
TCP connect check
"""

import ipaddress
import socket

from .base_check import BaseCheck


class TCPCheck(BaseCheck):
    """Succeeds when a TCP handshake on the port completes in time"""

    name = "tcp"

    def __init__(self, port: int = 443, timeout: float = 3):
        self.port = port
        self.timeout = timeout

    def attempt(self, address: ipaddress.IPv4Address) -> bool:
        try:
            conn = socket.create_connection((str(address), self.port), timeout=self.timeout)
        except OSError:
            return False
        conn.close()
        return True

    def describe(self) -> str:
        return f"TCP port {self.port} ({self.timeout}s timeout)"
