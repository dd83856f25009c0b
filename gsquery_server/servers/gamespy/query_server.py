"""
GameSpy Query Server

Answers GameSpy Query Protocol v4 (UT3-style) requests so server browsers
can read the server name, player count and player list.

Protocol: UDP
Port: 19132 (default)

Communication Flow:
1. Client sends handshake (0xFE 0xFD 0x09) with a sequence number
2. Server responds with a token derived from the client address
3. Client sends information request (0xFE 0xFD 0x00) carrying the token
4. Server responds with server info and player list

Packets without a valid token are dropped without a response.
"""

import asyncio
import logging

from gsquery_server.protocol.errors import QueryError, TokenMismatch
from gsquery_server.protocol.gamespy_proto import strip_header

logger = logging.getLogger(__name__)


class GameSpyQueryServer:
    """
    GameSpy Query Server implementation.

    Owns the UDP socket and hands every query packet to a QueryHandler.
    """

    def __init__(self, config, handler):
        """
        Initialize query server.

        Args:
            config: Server configuration object
            handler: QueryHandler answering the packets
        """
        self.config = config
        self.handler = handler
        self.transport = None

        logger.info(f"Query Server initialized - {config.QUERY_HOST}:{config.QUERY_PORT}")

    # =========================================================================
    # UDP Protocol Handler
    # =========================================================================

    class QueryProtocol(asyncio.DatagramProtocol):
        """UDP Protocol handler for the query server."""

        def __init__(self, server_instance):
            self.server = server_instance
            super().__init__()

        def connection_made(self, transport):
            self.transport = transport

        def datagram_received(self, data, addr):
            """Handle incoming UDP datagram."""
            self.server.handle_message(data, addr, self.transport)

        def error_received(self, exc):
            logger.warning(f"[QUERY] Socket error: {exc}")

    # =========================================================================
    # Message Handling
    # =========================================================================

    def handle_message(self, data: bytes, addr: tuple, transport):
        """
        Handle incoming query packet.

        Args:
            data: Raw packet data
            addr: Client address tuple
            transport: UDP transport for sending responses
        """
        body = strip_header(data)
        if body is None:
            logger.debug(f"[QUERY] Ignoring non-query packet from {addr}: {data[:8].hex()}")
            return

        buffer = bytearray(body)
        try:
            self.handler.handle_packet(buffer, addr)
        except TokenMismatch as e:
            logger.warning(f"[QUERY] Dropped packet from {addr}: {e}")
            return
        except QueryError as e:
            logger.debug(f"[QUERY] Malformed packet from {addr}: {e}")
            logger.debug(f"[QUERY] Raw data (hex): {data.hex()}")
            return
        except Exception as e:
            logger.error(f"[QUERY] Error handling packet from {addr}: {e}", exc_info=True)
            return

        transport.sendto(bytes(buffer), addr)

    # =========================================================================
    # Server Lifecycle
    # =========================================================================

    async def start(self):
        """
        Start query server.

        Creates UDP endpoint and begins listening for queries.

        Returns:
            UDP transport object
        """
        loop = asyncio.get_event_loop()

        transport, protocol = await loop.create_datagram_endpoint(
            lambda: self.QueryProtocol(self),
            local_addr=(self.config.QUERY_HOST, self.config.QUERY_PORT)
        )
        self.transport = transport

        host, port = transport.get_extra_info('sockname')[:2]
        logger.info(f"Query Server started on {host}:{port} (UDP)")

        return transport

    async def stop(self):
        """Stop query server and close the socket."""
        if self.transport is not None:
            self.transport.close()
            self.transport = None
        logger.info("Query Server stopped")
