"""
Query session handler

Answers handshake and information requests against the current server
info and player list. Safe to call from several threads at once.
"""

import logging
import threading

from gsquery_server.protocol.errors import TokenMismatch
from gsquery_server.protocol.gamespy_proto import (
    QUERY_TYPE_HANDSHAKE,
    Request,
    Response,
)
from gsquery_server.query.token import TokenGenerator, format_address

logger = logging.getLogger(__name__)


class QueryHandler:
    """
    Handles query packets for one game server.

    Info and players are replaced wholesale through set_info() and
    set_players(); a snapshot taken by a request in flight is never
    modified afterwards.
    """

    def __init__(self, info: dict = None, players=(), token_generator: TokenGenerator = None):
        """
        Initialize the handler.

        Args:
            info: Initial server variables (hostname, map, ...)
            players: Initial player names
            token_generator: Optional generator, a fresh secret is made otherwise
        """
        self._info = dict(info or {})
        self._info_lock = threading.Lock()

        self._players = tuple(players)
        self._players_lock = threading.Lock()

        self.token_generator = token_generator or TokenGenerator()

    def set_info(self, info: dict):
        """Replace the server info map."""
        info = dict(info)
        with self._info_lock:
            self._info = info

    def set_players(self, players):
        """Replace the player list."""
        players = tuple(players)
        with self._players_lock:
            self._players = players

    def snapshot(self) -> tuple:
        """Return the current (info, players) pair."""
        with self._info_lock, self._players_lock:
            return self._info, self._players

    def handle_packet(self, buffer: bytearray, addr):
        """
        Handle one query packet.

        The request is read from buffer and the response is written back
        into it, replacing its contents.

        Args:
            buffer: Packet body with the 0xFE 0xFD header already stripped
            addr: Sender address tuple (host, port)

        Raises:
            QueryError: The packet was malformed or carried a bad token.
                buffer is left untouched and nothing should be sent.
        """
        request = Request.unmarshal(bytes(buffer))
        address = format_address(addr)

        if request.request_type == QUERY_TYPE_HANDSHAKE:
            response = Response(
                QUERY_TYPE_HANDSHAKE,
                request.sequence_number,
                token=self.token_generator.derive_token(address),
            )
            logger.debug(f"[QUERY] Handshake from {address}: seq={request.sequence_number}")
        else:
            if request.token != self.token_generator.derive_token(address):
                raise TokenMismatch(address)

            info, players = self.snapshot()
            response = Response(
                request.request_type,
                request.sequence_number,
                token=request.token,
                info=info,
                players=players,
            )
            logger.debug(
                f"[QUERY] Information for {address}: "
                f"{len(info)} keys, {len(players)} players"
            )

        buffer[:] = response.marshal()
