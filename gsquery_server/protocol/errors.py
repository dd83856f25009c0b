"""
Errors raised while handling a single query packet.

None of these are fatal: the listener logs them and drops the packet
without answering.
"""


class QueryError(Exception):
    """Base class for per-packet query failures"""


class UnknownRequestType(QueryError):
    """First byte of the request is neither handshake nor information"""

    def __init__(self, request_type: int):
        self.request_type = request_type
        super().__init__(f"unknown request type 0x{request_type:02x}")


class TruncatedPacket(QueryError):
    """Packet ended before a field could be read"""

    def __init__(self, field: str, expected: int, available: int):
        self.field = field
        self.expected = expected
        self.available = available
        super().__init__(
            f"truncated packet: {field} needs {expected} bytes, {available} available"
        )


class TokenMismatch(QueryError):
    """Information request carried a token not issued to this address"""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"token mismatch for {address}")
