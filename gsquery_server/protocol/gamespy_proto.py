"""
GameSpy Query Protocol (version 4) utilities

Handles parsing requests and building responses for the UT3-style query
protocol.

Request:
    [type:1][sequence:4]                       handshake (0x09)
    [type:1][sequence:4][token:4][padding:4]   information (0x00)

Response:
    [type:1][sequence:4][token digits, null padded to 12]
    [type:1][sequence:4]SPLITNUM\\0 0x80 0x00 key\\0value\\0...
        \\0\\1player_\\0 name\\0...\\0

All integers are big endian.
"""

import struct

from gsquery_server.protocol.errors import TruncatedPacket, UnknownRequestType


# Magic prefix of every client packet, stripped by the listener
QUERY_HEADER = bytes([0xFE, 0xFD])

# Request/response types
QUERY_TYPE_HANDSHAKE = 0x09
QUERY_TYPE_INFORMATION = 0x00

# Conventionally written as the string 'splitnum' terminated by a null byte
SPLIT_NUM = b'SPLITNUM\x00'

# Number of packets. Responses are never split, so this is always 0x80.
SPLIT_PACKET_COUNT = 0x80

# Key under which the player list is stored
PLAYER_KEY = b'\x00\x01player_\x00'

# Width of the handshake token field
TOKEN_FIELD_SIZE = 12

_INT32 = struct.Struct('>i')


def strip_header(data: bytes):
    """
    Remove the 0xFE 0xFD query header from a client packet.

    Args:
        data: Raw datagram

    Returns:
        The packet body, or None if the datagram is not a query packet
    """
    if not data.startswith(QUERY_HEADER):
        return None
    return data[len(QUERY_HEADER):]


def _read_int32(data: bytes, offset: int, field: str) -> int:
    available = max(len(data) - offset, 0)
    if available < _INT32.size:
        raise TruncatedPacket(field, _INT32.size, available)
    return _INT32.unpack_from(data, offset)[0]


class Request:
    """
    Packet sent by the client to the server.

    A handshake request is sent first to obtain a token; the information
    request that follows must carry that token.
    """

    def __init__(self, request_type: int, sequence_number: int, token: int = 0):
        self.request_type = request_type
        # Typically a timestamp, only used to match request with response
        self.sequence_number = sequence_number
        # Only meaningful for information requests
        self.token = token

    @classmethod
    def unmarshal(cls, data: bytes) -> 'Request':
        """
        Decode a request from a packet body (header already stripped).

        Raises:
            TruncatedPacket: A field runs past the end of the packet
            UnknownRequestType: Type byte is not handshake or information
        """
        if len(data) < 1:
            raise TruncatedPacket('request type', 1, 0)

        request_type = data[0]
        if request_type not in (QUERY_TYPE_HANDSHAKE, QUERY_TYPE_INFORMATION):
            raise UnknownRequestType(request_type)

        sequence_number = _read_int32(data, 1, 'sequence number')
        if request_type == QUERY_TYPE_HANDSHAKE:
            return cls(request_type, sequence_number)

        token = _read_int32(data, 5, 'token')
        # Trailing payload is required but unused
        available = max(len(data) - 9, 0)
        if available < 4:
            raise TruncatedPacket('padding', 4, available)

        return cls(request_type, sequence_number, token)

    def marshal(self) -> bytes:
        """Encode the request, mainly useful for clients and tests."""
        packet = bytearray([self.request_type])
        packet.extend(_INT32.pack(self.sequence_number))
        if self.request_type == QUERY_TYPE_INFORMATION:
            packet.extend(_INT32.pack(self.token))
            packet.extend(b'\x00' * 4)
        return bytes(packet)

    def __repr__(self):
        return (f"<Request type=0x{self.request_type:02x} "
                f"seq={self.sequence_number} token={self.token}>")


class Response:
    """
    Packet sent by the server in answer to a request.

    Handshake responses carry the token for the next request; information
    responses carry the server info and player list.
    """

    def __init__(self, response_type: int, sequence_number: int, token: int = 0,
                 info: dict = None, players=()):
        self.response_type = response_type
        self.sequence_number = sequence_number
        self.token = token
        self.info = info if info is not None else {}
        self.players = players

    def marshal(self) -> bytes:
        """Encode the response into its exact wire layout."""
        packet = bytearray([self.response_type])
        packet.extend(_INT32.pack(self.sequence_number))

        if self.response_type == QUERY_TYPE_HANDSHAKE:
            digits = str(self.token).encode('ascii')
            # A signed 32-bit value has at most 11 characters
            assert len(digits) <= TOKEN_FIELD_SIZE, f"token {self.token} too wide"
            packet.extend(digits.ljust(TOKEN_FIELD_SIZE, b'\x00'))
            return bytes(packet)

        packet.extend(SPLIT_NUM)
        packet.append(SPLIT_PACKET_COUNT)
        packet.append(0x00)  # Unused

        values = []
        for key, value in self.info.items():
            values.append(str(key).encode('utf-8'))
            values.append(str(value).encode('utf-8'))
        values.append(PLAYER_KEY)
        for player in self.players:
            values.append(player.encode('utf-8'))
        values.append(b'\x00')

        # Join all keys and values together using a null byte
        packet.extend(b'\x00'.join(values))
        return bytes(packet)

    @staticmethod
    def parse_handshake_token(payload: bytes) -> int:
        """
        Read the token back out of an encoded handshake response.

        Args:
            payload: Encoded handshake response

        Returns:
            Token number
        """
        field = payload[5:5 + TOKEN_FIELD_SIZE]
        if len(field) < TOKEN_FIELD_SIZE:
            raise TruncatedPacket('token', TOKEN_FIELD_SIZE, len(field))
        return int(field.rstrip(b'\x00').decode('ascii'))

    def __repr__(self):
        return (f"<Response type=0x{self.response_type:02x} "
                f"seq={self.sequence_number} info={len(self.info)} "
                f"players={len(self.players)}>")
