import logging
import re
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Union
from urllib.parse import urlsplit

import httpx

from ..cache import cache_key
from ..config import BOT_UA
from ..env import Env
from ..http import NETWORK_EXCEPTIONS, PARSE_EXCEPTIONS, _headers
from ..models import ExtractionError, StrategyOutcome, TitleResult

logger = logging.getLogger("zapkit")

Strategy = tuple[str, Callable[[], Awaitable[StrategyOutcome]]]

# 通用占位标题 / 反爬中间页
PLACEHOLDER_TITLES = {
    "vlog",
    "page not found",
    "access restricted",
    "access denied",
    "404 not found",
    "just a moment...",
    "环境异常",
    "参数错误",
    "安全验证",
    "页面不存在",
}

_ALNUM_RE = re.compile(r"[^a-z0-9\u4e00-\u9fa5]")


def hostname_of(url: str) -> str:
    try:
        return (urlsplit(url.strip()).hostname or "").lower()
    except (ValueError, AttributeError):
        return ""


def describe_error(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}"
    if isinstance(exc, httpx.TimeoutException):
        return "timeout"
    return f"{type(exc).__name__}: {exc}"


class PlatformHandler(ABC):
    """One content platform: URL recognition plus an ordered list of fetch strategies."""

    name: str = ""
    display_names: tuple[str, ...] = ()
    domains: tuple[str, ...] = ()
    title_suffixes: tuple[str, ...] = ()

    def get_name(self) -> str:
        return self.name

    def can_handle(self, url: str) -> bool:
        host = hostname_of(url)
        if not host:
            return False
        return any(host == d or host.endswith("." + d) for d in self.domains)

    def native_id(self, url: str) -> Optional[str]:
        return None

    def cache_key(self, url: str) -> str:
        return cache_key(self.name, url, self.native_id(url))

    @abstractmethod
    def strategies(self, url: str, env: Env) -> list[Strategy]:
        ...

    def is_placeholder(self, title: Optional[str]) -> bool:
        if not title or not title.strip():
            return True
        lower = title.strip().lower()
        if lower in PLACEHOLDER_TITLES:
            return True
        if lower in {n.lower() for n in self.display_names}:
            return True
        return _ALNUM_RE.sub("", lower) == "vlog"

    def clean_title(self, title: str) -> str:
        title = (title or "").strip()
        for suffix in self.title_suffixes:
            title = re.sub(rf"\s*[-|_]\s*{re.escape(suffix)}\s*$", "", title).strip()
        return title

    def clean_author(self, author: str) -> str:
        return (author or "").strip()

    def compose(self, title: str, author: str) -> str:
        return title

    def _result(self, title: str, author: str, **kw) -> TitleResult:
        return TitleResult(title=self.compose(title, author), author=author, **kw)

    async def fetch_title(self, url: str, env: Env) -> TitleResult:
        key = self.cache_key(url)
        if env.cache is not None:
            cached = await env.cache.get(key)
            if cached and not self.is_placeholder(cached.get("title")):
                logger.debug(f"[{self.name}] 缓存命中 {key}")
                return self._result(cached["title"], cached.get("author", ""), cached=True, method="cache")

        errors: list[str] = []
        for method, run in self.strategies(url, env):
            try:
                outcome = await run()
            except NETWORK_EXCEPTIONS as e:
                outcome = ExtractionError(describe_error(e), method)
            except PARSE_EXCEPTIONS as e:
                outcome = ExtractionError(describe_error(e), method)

            if isinstance(outcome, ExtractionError):
                outcome.method = outcome.method or method
                errors.append(str(outcome))
                logger.warning(f"[{self.name}] {outcome}")
                continue

            title = self.clean_title(outcome.title or "")
            if self.is_placeholder(title):
                errors.append(f"{method}: placeholder title {title!r}")
                logger.warning(f"[{self.name}] {method} 返回占位标题 {title!r}，尝试下一策略")
                continue

            author = self.clean_author(outcome.author)
            if env.cache is not None:
                await env.cache.put(key, {"title": title, "author": author}, env.settings.cache_ttl)
            return self._result(title, author, method=outcome.method or method, errors=errors)

        logger.warning(f"[{self.name}] 所有策略均失败: {url}")
        return TitleResult(title=None, author="", errors=errors)

    # ─── 共享策略 ──────────────────────────────────────────────────────────────

    async def fetch_reader(self, url: str, env: Env, user_agent: str = BOT_UA) -> Union[str, ExtractionError]:
        """Render ``url`` through the reader proxy; returns its markdown-ish text."""
        bare = re.sub(r"^https?://", "", url.strip())
        api_url = f"{env.settings.reader_base}http://{bare}"
        headers = _headers(user_agent, accept="text/plain")
        if env.reader_api_key:
            headers["Authorization"] = f"Bearer {env.reader_api_key}"
        resp = await env.client.get(api_url, headers=headers, timeout=env.settings.timeout)
        if resp.status_code == 429:
            return ExtractionError("rate limited", "reader")
        if resp.status_code != 200:
            return ExtractionError(f"HTTP {resp.status_code}", "reader")
        return resp.text
