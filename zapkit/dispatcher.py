"""
URL → platform handler → TitleResult.

The dispatcher walks an ordered handler list and hands the URL to the first
handler that claims it. The list must end with a total handler (Generic) so
selection always terminates.
"""

import asyncio
import logging
from typing import Optional, Sequence

from .config import BOT_UA, MOBILE_UA
from .env import Env
from .http import HANDLED_EXCEPTIONS, resolve_redirects as _follow
from .models import TitleResult
from .platforms import GenericHandler, PlatformHandler, default_handlers, hostname_of
from .platforms.base import describe_error

logger = logging.getLogger("zapkit")


class Dispatcher:
    def __init__(self, handlers: Optional[Sequence[PlatformHandler]] = None):
        handlers = list(handlers) if handlers is not None else default_handlers()
        if not handlers or not isinstance(handlers[-1], GenericHandler):
            raise ValueError("handler list must end with a GenericHandler")
        self.handlers = handlers

    def handler_for(self, url: str) -> Optional[PlatformHandler]:
        for handler in self.handlers:
            if handler.can_handle(url):
                return handler
        return None

    async def resolve(self, url: str, env: Env) -> TitleResult:
        """Title/author for ``url``. Failures come back as ``title=None``; nothing is raised."""
        handler = self.handler_for(url)
        if handler is None:
            logger.error(f"没有处理器匹配 {url}")
            return TitleResult(title=None, errors=["no handler"])

        logger.debug(f"[dispatch] {url} → {handler.get_name()}")
        deadline = env.settings.request_deadline
        try:
            if deadline and deadline > 0:
                return await asyncio.wait_for(handler.fetch_title(url, env), timeout=deadline)
            return await handler.fetch_title(url, env)
        except asyncio.TimeoutError:
            logger.warning(f"[{handler.get_name()}] 超过请求总时限 {deadline}s: {url}")
            return TitleResult(title=None, errors=[f"deadline exceeded ({deadline}s)"])
        except HANDLED_EXCEPTIONS as e:
            logger.warning(f"[{handler.get_name()}] 处理失败: {describe_error(e)}")
            return TitleResult(title=None, errors=[describe_error(e)])


async def resolve_redirects(url: str, env: Env) -> tuple[str, Optional[str]]:
    """(final URL, error). On failure the input URL comes back with the error text."""
    user_agent = MOBILE_UA if hostname_of(url).endswith("xhslink.com") else BOT_UA
    try:
        return await _follow(env.client, url, user_agent=user_agent, timeout=env.settings.timeout), None
    except HANDLED_EXCEPTIONS as e:
        logger.warning(f"跳转解析失败 {url}: {describe_error(e)}")
        return url, describe_error(e)
