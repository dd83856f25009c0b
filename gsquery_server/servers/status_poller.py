"""
Status poller

Keeps the query handler's info and player list in sync with the game
server by polling its status API.

Expected response body:
    {"info": {"hostname": "...", ...}, "players": ["Alice", "Bob"]}

Both keys are optional. A failed poll keeps the previous state.
"""

import asyncio
import logging

from aiohttp import ClientError, ClientSession, ClientTimeout

logger = logging.getLogger(__name__)


class StatusPoller:
    """Periodically pulls server status from an HTTP API"""

    def __init__(self, config, handler, url: str = None):
        """
        Initialize the poller.

        Args:
            config: Server configuration object
            handler: QueryHandler to update
            url: Optional URL override (defaults to config.STATUS_API_URL)
        """
        self.config = config
        self.handler = handler
        self.url = url or config.STATUS_API_URL
        self.interval = config.STATUS_POLL_INTERVAL
        self.timeout = ClientTimeout(total=config.API_TIMEOUT)
        self._task = None

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def apply_status(self, data) -> bool:
        """
        Apply a status document to the handler.

        Args:
            data: Decoded JSON body

        Returns:
            True if anything was updated
        """
        if not isinstance(data, dict):
            logger.warning(f"[STATUS] Unexpected API response type: {type(data)}")
            return False

        info = data.get('info')
        players = data.get('players')
        updated = False

        if isinstance(players, list):
            players = [str(p) for p in players]
            self.handler.set_players(players)
            updated = True
            if not isinstance(info, dict):
                # Keep the reported player count in line with the list
                current, _ = self.handler.snapshot()
                if 'numplayers' in current:
                    info = dict(current, numplayers=str(len(players)))
        elif players is not None:
            logger.warning(f"[STATUS] Ignoring players of type {type(players)}")

        if isinstance(info, dict):
            self.handler.set_info({str(k): str(v) for k, v in info.items()})
            updated = True
        elif info is not None:
            logger.warning(f"[STATUS] Ignoring info of type {type(info)}")

        return updated

    async def poll_once(self) -> bool:
        """
        Fetch the status once and apply it.

        Returns:
            True if the handler was updated
        """
        try:
            async with ClientSession(timeout=self.timeout) as http_session:
                async with http_session.get(self.url) as resp:
                    if resp.status != 200:
                        logger.warning(f"[STATUS] API returned {resp.status} for {self.url}")
                        return False
                    data = await resp.json(content_type=None)
        except (ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"[STATUS] API error: {e}")
            return False

        updated = self.apply_status(data)
        if updated:
            _, players = self.handler.snapshot()
            logger.debug(f"[STATUS] Status updated: {len(players)} players")
        return updated

    async def run(self):
        """Poll until cancelled."""
        logger.info(f"[STATUS] Polling {self.url} every {self.interval}s")
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval)

    async def start(self):
        """Start polling in the background."""
        if not self.enabled:
            logger.info("[STATUS] No status API configured, poller disabled")
            return None
        self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self):
        """Stop polling."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("[STATUS] Poller stopped")
