"""Shared fixtures for query server tests."""

from types import SimpleNamespace

import pytest

from gsquery_server.query.handler import QueryHandler
from gsquery_server.query.token import TokenGenerator

SECRET = b'0123456789abcdef'
CLIENT_ADDR = ('203.0.113.7', 51234)


@pytest.fixture
def token_generator():
    return TokenGenerator(SECRET)


@pytest.fixture
def handler(token_generator):
    return QueryHandler(
        {'hostname': 'Test'},
        ['Alice', 'Bob'],
        token_generator=token_generator,
    )


@pytest.fixture
def server_config():
    return SimpleNamespace(
        QUERY_HOST='127.0.0.1',
        QUERY_PORT=0,
        SERVER_NAME='Test Server',
        GAME_TYPE='SMP',
        GAME_ID='MINECRAFT',
        GAME_VERSION='1.2.3',
        SERVER_ENGINE='gsquery-server',
        MAP_NAME='world',
        MAX_PLAYERS=10,
        WHITELIST='off',
        STATUS_API_URL='',
        STATUS_POLL_INTERVAL=0.05,
        API_TIMEOUT=2,
    )
