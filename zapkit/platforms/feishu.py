import re
from typing import Optional

from ..config import BOT_UA
from ..env import Env
from ..htmltools import extract_title_from_html
from ..http import fetch_page
from ..models import ExtractionError, StrategyOutcome, TitleResult
from .base import PlatformHandler, Strategy

MAX_TITLE = 100

_AUTHOR_PATTERNS = (
    re.compile(r"创建者[：:]\s*([^\n\r]+)", re.IGNORECASE),
    re.compile(r"作者[：:]\s*([^\n\r]+)", re.IGNORECASE),
    re.compile(r"\bby\s+([^\n\r]+)", re.IGNORECASE),
    re.compile(r"文档所有者[：:]\s*([^\n\r]+)", re.IGNORECASE),
)


def reader_author(content: str) -> str:
    for p in _AUTHOR_PATTERNS:
        m = p.search(content)
        if m and m.group(1).strip():
            return m.group(1).strip()
    return ""


def reader_title(content: str) -> Optional[str]:
    lines = content.split("\n") if content else []
    first = lines[0].strip() if lines else ""
    if not first:
        return None
    title = re.sub(r"^Title:\s*", "", first, flags=re.IGNORECASE).strip()
    title = re.sub(r"\s*-\s*(?:Feishu\s*Docs|飞书云文档)$", "", title, flags=re.IGNORECASE).strip()
    if not title:
        return None
    return title[:MAX_TITLE]


class FeishuHandler(PlatformHandler):
    name = "feishu"
    display_names = ("飞书", "飞书云文档", "Feishu", "Feishu Docs", "Lark")
    domains = ("feishu.cn", "feishu.com", "larksuite.com")
    title_suffixes = ("Feishu Docs", "飞书云文档")

    def native_id(self, url: str) -> Optional[str]:
        m = re.search(r"/(?:docx|docs|wiki|sheets|base|file)/([A-Za-z0-9]+)", url)
        return m.group(1) if m else None

    def strategies(self, url: str, env: Env) -> list[Strategy]:
        return [
            ("feishu_reader", lambda: self._try_reader(url, env)),
            ("feishu_html", lambda: self._try_html(url, env)),
        ]

    async def _try_reader(self, url: str, env: Env) -> StrategyOutcome:
        content = await self.fetch_reader(url, env)
        if isinstance(content, ExtractionError):
            return content
        title = reader_title(content)
        if not title:
            return ExtractionError("reader output has no title", "feishu_reader")
        return TitleResult(title=title, author=reader_author(content), method="feishu_reader")

    async def _try_html(self, url: str, env: Env) -> StrategyOutcome:
        resp = await fetch_page(env.client, url, user_agent=BOT_UA, timeout=env.settings.timeout)
        title = extract_title_from_html(resp.text)
        if not title:
            return ExtractionError("no title in page", "feishu_html")
        return TitleResult(title=title, method="feishu_html")
