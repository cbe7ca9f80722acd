import re
from typing import Optional
from urllib.parse import unquote

from ..config import WECHAT_UA
from ..env import Env
from ..htmltools import decode_entities, extract_h1, extract_og_title, extract_title_tag, first_match
from ..http import fetch_page
from ..models import ExtractionError, StrategyOutcome, TitleResult
from .base import PlatformHandler, Strategy

_MSG_TITLE_PATTERNS = (
    re.compile(r"msg_title\s*=\s*(?:window\.title\s*=\s*)?'([^']+)'"),
    re.compile(r'msg_title\s*=\s*(?:window\.title\s*=\s*)?"([^"]+)"'),
)

_AUTHOR_PATTERNS = (
    re.compile(r'var\s+nickname\s*=\s*(?:htmlDecode\()?"([^"]+)"'),
    re.compile(r'"nick_name"\s*:\s*"([^"]+)"'),
    re.compile(r'var\s+msg_author\s*=\s*"([^"]+)"'),
    re.compile(r'id="js_name"[^>]*>\s*([^<]+?)\s*<'),
)


def _unescape_js(text: str) -> str:
    text = text.replace("\\n", "\n").replace("\\x26", "&")
    return re.sub(r"\\u([0-9a-fA-F]{4})", lambda m: chr(int(m.group(1), 16)), text)


def og_title_first_line(page: str) -> Optional[str]:
    """og:title on WeChat can carry the whole article body; only the first line is the title."""
    value = extract_og_title(page)
    if not value:
        return None
    return _unescape_js(value).split("\n")[0].strip() or None


def msg_title(page: str) -> Optional[str]:
    for p in _MSG_TITLE_PATTERNS:
        m = p.search(page)
        if m:
            try:
                return decode_entities(unquote(m.group(1))) or None
            except ValueError:
                return decode_entities(m.group(1)) or None
    return None


def account_name(page: str) -> str:
    for p in _AUTHOR_PATTERNS:
        m = p.search(page)
        if m:
            return decode_entities(_unescape_js(m.group(1)))
    return ""


TITLE_EXTRACTORS = (og_title_first_line, msg_title, extract_title_tag, extract_h1)


class WeChatHandler(PlatformHandler):
    name = "wechat"
    display_names = ("微信", "微信公众号", "微信公众平台")
    domains = ("mp.weixin.qq.com", "weixin.qq.com")
    title_suffixes = ("微信公众平台",)

    def native_id(self, url: str) -> Optional[str]:
        m = re.search(r"mp\.weixin\.qq\.com/s/([A-Za-z0-9_-]+)", url)
        return m.group(1) if m else None

    def compose(self, title: str, author: str) -> str:
        return f"{title} #{author}" if author else title

    def strategies(self, url: str, env: Env) -> list[Strategy]:
        return [
            ("wechat_html", lambda: self._try_html(url, env)),
            ("wechat_reader", lambda: self._try_reader(url, env)),
        ]

    async def _try_html(self, url: str, env: Env) -> StrategyOutcome:
        resp = await fetch_page(env.client, url, user_agent=WECHAT_UA, timeout=env.settings.timeout)
        page = resp.text
        title = first_match(page, TITLE_EXTRACTORS)
        if not title:
            return ExtractionError("no title in page", "wechat_html")
        return TitleResult(title=title, author=account_name(page), method="wechat_html")

    async def _try_reader(self, url: str, env: Env) -> StrategyOutcome:
        content = await self.fetch_reader(url, env)
        if isinstance(content, ExtractionError):
            return content
        m = re.search(r"^Title:\s*(.+)$", content, re.MULTILINE)
        if not m:
            return ExtractionError("reader output has no title line", "wechat_reader")
        return TitleResult(title=m.group(1), method="wechat_reader")
