"""
Route guards for protected client pages
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from config import settings
from session import SessionManager

logger = logging.getLogger(__name__)


class Redirect(Exception):
    """Raised to send the viewer to another page."""

    def __init__(self, location: str):
        super().__init__(location)
        self.location = location


class RouteGuard:
    """
    Lets a page render only when *check* passes.

    The check runs after a short delay so a page never flashes before the
    redirect; a failed check raises ``Redirect(redirect_to)``.
    """

    def __init__(self, check: Callable[[], bool], redirect_to: str, delay: Optional[float] = None):
        self.check = check
        self.redirect_to = redirect_to
        self.delay = settings.guard_delay if delay is None else delay

    async def check_access(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.check():
            logger.info(f"Access denied, redirecting to {self.redirect_to}")
            raise Redirect(self.redirect_to)

    async def render(self, page: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        await self.check_access()
        return await page(*args, **kwargs)


def license_guard(session: SessionManager, redirect_to: str = "/activate", delay: Optional[float] = None) -> RouteGuard:
    """Requires an unexpired licence token."""
    return RouteGuard(session.has_valid_license, redirect_to, delay)


def account_guard(session: SessionManager, redirect_to: str = "/login", delay: Optional[float] = None) -> RouteGuard:
    """Requires a signed-in account."""
    return RouteGuard(session.is_logged_in, redirect_to, delay)


def redirect_if(check: Callable[[], bool], location: str) -> None:
    """Skip a page the viewer no longer needs, e.g. login when signed in."""
    if check():
        raise Redirect(location)
