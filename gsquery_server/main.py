"""
Main entry point for the GameSpy Query Server

Starts:
- Query Server (GameSpy Query Protocol v4, UDP)
- Status Poller (optional, keeps the player list current)
"""

import asyncio
import logging
import signal

from gsquery_server.config import config
from gsquery_server.query.handler import QueryHandler
from gsquery_server.query.server_info import build_server_info
from gsquery_server.servers.gamespy.query_server import GameSpyQueryServer
from gsquery_server.servers.status_poller import StatusPoller

logger = logging.getLogger(__name__)


class QueryServerManager:
    """Manages the query server and its status source"""

    def __init__(self, config=config):
        self.config = config
        self.handler = QueryHandler(build_server_info(config))
        self.servers = {}
        self.running = False
        self.stopped = asyncio.Event()

    async def start_all(self):
        """Start all servers"""

        print("\n" + "="*70)
        print("🎮 GameSpy Query Server")
        print("="*70)
        print()

        try:
            print("📊 Starting Query Server...")
            query_server = GameSpyQueryServer(self.config, self.handler)
            await query_server.start()
            self.servers['query'] = query_server
            print(f"   ✓ Query Server running on port {self.config.QUERY_PORT} (UDP)")

            poller = StatusPoller(self.config, self.handler)
            if poller.enabled:
                print("\n🔄 Starting Status Poller...")
                await poller.start()
                self.servers['status'] = poller
                print(f"   ✓ Polling {poller.url} every {poller.interval}s")

            print("\n" + "="*70)
            print("✅ All servers started successfully!")
            print("="*70)
            print()
            print(f"   Name:    {self.config.SERVER_NAME}")
            print(f"   Query:   {self.config.QUERY_HOST}:{self.config.QUERY_PORT} (UDP)")
            print()
            print("Press Ctrl+C to stop")
            print("="*70)
            print()

            self.running = True

            await self.stopped.wait()

        except Exception as e:
            logger.error(f"Error starting servers: {e}", exc_info=True)
            await self.stop_all()
            raise

    async def stop_all(self):
        """Stop all servers gracefully"""

        if not self.running:
            self.stopped.set()
            return

        print("\n" + "="*70)
        print("🛑 Shutting down servers...")
        print("="*70)

        if 'status' in self.servers:
            print("   Stopping Status Poller...")
            await self.servers['status'].stop()

        if 'query' in self.servers:
            print("   Stopping Query Server...")
            await self.servers['query'].stop()

        print("\n✅ All servers stopped")
        print("="*70)

        self.running = False
        self.stopped.set()


async def main():
    """Main entry point"""

    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    manager = QueryServerManager()

    # Register signal handlers for graceful shutdown
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda s=sig: asyncio.create_task(manager.stop_all()))

    try:
        await manager.start_all()
    finally:
        await manager.stop_all()


def run():
    """Console script entry point"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n\nGoodbye! 👋")


if __name__ == '__main__':
    run()
