"""
Default server info for query responses
"""


def build_server_info(config, num_players: int = 0) -> dict:
    """
    Build the info map reported to query clients.

    Keys are in the order query clients conventionally list them.

    Args:
        config: Server configuration object
        num_players: Number of players currently online

    Returns:
        Dictionary of server variables
    """
    return {
        'hostname': config.SERVER_NAME,
        'gametype': config.GAME_TYPE,
        'game_id': config.GAME_ID,
        'version': config.GAME_VERSION,
        'server_engine': config.SERVER_ENGINE,
        'plugins': '',
        'map': config.MAP_NAME,
        'numplayers': str(num_players),
        'maxplayers': str(config.MAX_PLAYERS),
        'whitelist': config.WHITELIST,
        'hostip': config.QUERY_HOST,
        'hostport': str(config.QUERY_PORT),
    }
