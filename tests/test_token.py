"""
Tests for query token derivation.
"""

import hashlib
import struct

import pytest

from gsquery_server.query.token import (
    SECRET_SIZE,
    TokenGenerator,
    derive_token,
    format_address,
)

SECRET = b'0123456789abcdef'


class TestDeriveToken:
    """Test token derivation from address and secret."""

    def test_matches_digest_slice(self):
        digest = hashlib.sha512(b'198.51.100.1:1234:' + SECRET).digest()
        expected = struct.unpack('>i', digest[7:11])[0]

        assert derive_token(SECRET, '198.51.100.1:1234') == expected

    def test_deterministic(self):
        first = derive_token(SECRET, '198.51.100.1:1234')
        for _ in range(10):
            assert derive_token(SECRET, '198.51.100.1:1234') == first

    def test_signed_32_bit_range(self):
        for port in range(1000, 1200):
            token = derive_token(SECRET, f"10.0.0.1:{port}")
            assert -2 ** 31 <= token < 2 ** 31

    def test_produces_negative_values(self):
        tokens = [derive_token(SECRET, f"10.0.0.1:{port}") for port in range(200)]
        assert any(t < 0 for t in tokens)
        assert any(t >= 0 for t in tokens)

    def test_distinct_addresses_rarely_collide(self):
        addresses = [f"10.{i // 256}.{i % 256}.1:{20000 + i}" for i in range(5000)]
        tokens = {derive_token(SECRET, a) for a in addresses}

        # Birthday bound over 2**32 makes more than a couple collisions implausible
        assert len(tokens) >= len(addresses) - 2

    def test_depends_on_secret(self):
        other = b'fedcba9876543210'
        tokens = [derive_token(SECRET, f"10.0.0.1:{p}") for p in range(20)]
        others = [derive_token(other, f"10.0.0.1:{p}") for p in range(20)]

        assert tokens != others


class TestTokenGenerator:
    """Test the secret holder."""

    def test_generates_random_secret(self):
        first = TokenGenerator()
        second = TokenGenerator()

        assert len(first.secret) == SECRET_SIZE
        assert first.secret != second.secret

    def test_accepts_tuple_or_string(self):
        generator = TokenGenerator(SECRET)

        assert generator.derive_token(('192.0.2.1', 19132)) == derive_token(SECRET, '192.0.2.1:19132')
        assert generator.derive_token('192.0.2.1:19132') == derive_token(SECRET, '192.0.2.1:19132')

    def test_secret_failure_propagates(self, monkeypatch):
        def broken(size):
            raise OSError("no entropy")

        monkeypatch.setattr('gsquery_server.query.token.secrets.token_bytes', broken)
        with pytest.raises(OSError):
            TokenGenerator()


class TestFormatAddress:
    """Test host:port formatting."""

    def test_ipv4(self):
        assert format_address(('127.0.0.1', 19132)) == '127.0.0.1:19132'

    def test_ipv6(self):
        assert format_address(('::1', 19132, 0, 0)) == '[::1]:19132'

    def test_ipv6_with_zone(self):
        assert format_address(('fe80::1%eth0', 5, 0, 2)) == '[fe80::1%eth0]:5'

    def test_hostname(self):
        assert format_address(('localhost', 80)) == 'localhost:80'
