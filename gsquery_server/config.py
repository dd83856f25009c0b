"""
Configuration for the GameSpy Query Server
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Server configuration"""

    # Query listener (UDP)
    QUERY_HOST = os.getenv('QUERY_HOST', '0.0.0.0')
    QUERY_PORT = int(os.getenv('QUERY_PORT', '19132'))

    # Reported server info
    SERVER_NAME = os.getenv('SERVER_NAME', 'Query Server')
    GAME_TYPE = os.getenv('GAME_TYPE', 'SMP')
    GAME_ID = os.getenv('GAME_ID', 'MINECRAFT')
    GAME_VERSION = os.getenv('GAME_VERSION', '1.0.0')
    SERVER_ENGINE = os.getenv('SERVER_ENGINE', 'gsquery-server')
    MAP_NAME = os.getenv('MAP_NAME', 'world')
    MAX_PLAYERS = int(os.getenv('MAX_PLAYERS', '20'))
    WHITELIST = os.getenv('WHITELIST', 'off')

    # Status API the player list is pulled from (disabled if empty)
    STATUS_API_URL = os.getenv('STATUS_API_URL', '')
    STATUS_POLL_INTERVAL = float(os.getenv('STATUS_POLL_INTERVAL', '15'))
    API_TIMEOUT = float(os.getenv('API_TIMEOUT', '5'))  # seconds

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def from_env(cls):
        """Create config from environment"""
        return cls()

    def __repr__(self):
        return f"<Config QUERY={self.QUERY_HOST}:{self.QUERY_PORT} NAME={self.SERVER_NAME!r}>"


# Singleton instance
config = Config()
