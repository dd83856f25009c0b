"""
Query token generation

Tokens are derived from the client address and a process-lifetime secret,
so no per-client state has to be kept between the handshake and the
information request.
"""

import hashlib
import ipaddress
import logging
import secrets
import struct

logger = logging.getLogger(__name__)

SECRET_SIZE = 16

# Token is read from this slice of the SHA-512 digest
TOKEN_OFFSET = 7
TOKEN_SIZE = 4


def format_address(addr) -> str:
    """
    Format an address tuple as host:port.

    IPv6 hosts are bracketed, e.g. [::1]:19132.

    Args:
        addr: Address tuple as given by asyncio (host, port, ...)

    Returns:
        Address string
    """
    if isinstance(addr, str):
        return addr

    host, port = addr[0], addr[1]
    try:
        is_v6 = ipaddress.ip_address(host.split('%')[0]).version == 6
    except ValueError:
        is_v6 = ':' in host
    if is_v6:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def derive_token(secret: bytes, address: str) -> int:
    """
    Derive the token number for an address.

    Args:
        secret: Server secret
        address: Address string (host:port)

    Returns:
        Signed 32-bit token
    """
    digest = hashlib.sha512(address.encode('utf-8') + b':' + secret).digest()
    unsigned = struct.unpack('>I', digest[TOKEN_OFFSET:TOKEN_OFFSET + TOKEN_SIZE])[0]
    return struct.unpack('>i', struct.pack('>I', unsigned))[0]


class TokenGenerator:
    """Holds the secret used to derive query tokens"""

    def __init__(self, secret: bytes = None):
        self.secret = secret if secret is not None else self.generate_secret()

    @staticmethod
    def generate_secret() -> bytes:
        """
        Generate a new random secret.

        Raises whatever the OS random source raises; the server must not
        start without a secret.
        """
        secret = secrets.token_bytes(SECRET_SIZE)
        logger.debug("[QUERY] Generated token secret")
        return secret

    def derive_token(self, addr) -> int:
        """Token number for an address tuple or host:port string."""
        return derive_token(self.secret, format_address(addr))
