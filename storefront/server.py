#!/usr/bin/env python3
"""
Licence Storefront Server
Serves the account and mock database API on aiohttp.
"""

import asyncio
import logging
from datetime import datetime, timezone

from aiohttp import web

from api import setup_api_routes
from config import settings
from user_store import UserRepository

logger = logging.getLogger(__name__)


async def health_handler(request):
    """Report that the server is up."""
    return web.json_response({
        'status': 'healthy',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'version': settings.app_version,
        'users': request.app['users'].count()
    })


def create_app(users: UserRepository = None) -> web.Application:
    """Build the storefront application around *users* (a fresh seeded store by default)."""
    app = web.Application()
    app['users'] = users if users is not None else UserRepository()
    app.router.add_get('/health', health_handler)
    setup_api_routes(app)
    return app


async def serve():
    """Start the HTTP server and run until cancelled."""
    app = create_app()

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, settings.host, settings.port)
    await site.start()

    logger.info(f"{settings.app_name} v{settings.app_version} listening on http://{settings.host}:{settings.port}")

    try:
        await asyncio.Future()
    finally:
        await runner.cleanup()


def main():
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Shutdown complete")


if __name__ == "__main__":
    main()
