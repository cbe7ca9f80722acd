import logging
import re
from typing import Optional

from ..config import API_ENDPOINTS, BOT_UA, DESKTOP_UA
from ..env import Env
from ..htmltools import decode_entities, extract_og_description, extract_og_title, extract_title_from_html, strip_tags
from ..http import NETWORK_EXCEPTIONS, fetch_json, fetch_page
from ..models import ExtractionError, StrategyOutcome, TitleResult
from .base import PlatformHandler, Strategy

logger = logging.getLogger("zapkit")

MAX_TEXT = 100

_STATUS_RE = re.compile(r"/status(?:es)?/(\d+)")
_SCREEN_NAME_RE = re.compile(r"(?:twitter|x)\.com/(\w+)/status")
_TCO_ANCHOR_RE = re.compile(r'<a[^>]*href="(https?://t\.co/[A-Za-z0-9]+)"[^>]*>([^<]*)</a>')
_READER_TITLE_RE = re.compile(r'^(.*?)\s+on (?:X|Twitter):\s+"([\s\S]*?)"\s*/\s*(?:X|Twitter)$')


def screen_name(url: str) -> str:
    m = _SCREEN_NAME_RE.search(url)
    return m.group(1) if m else ""


def parse_oembed(data: dict) -> tuple[str, str, list[str]]:
    """(tweet text, author name, t.co links) from an oEmbed payload."""
    embed = data.get("html") or ""
    links = [href for href, label in _TCO_ANCHOR_RE.findall(embed)
             if not label.strip().startswith("pic.twitter.com")]
    text = strip_tags(embed)
    text = re.split(r"&mdash;|—", text, maxsplit=1)[0]
    return decode_entities(text), (data.get("author_name") or "").strip(), links


def parse_reader(content: str) -> tuple[Optional[str], str]:
    """(text, author) from reader output: ``Title: <author> on X: "<text>" / X``."""
    for line in content.split("\n"):
        if not line.startswith("Title:"):
            continue
        raw = line[len("Title:"):].strip()
        m = _READER_TITLE_RE.match(raw)
        if m:
            return m.group(2).strip(), m.group(1).strip()
        fallback = re.sub(r"\s*/\s*X$", "", raw, flags=re.IGNORECASE).strip()
        if fallback:
            return fallback, ""
        break

    m = re.search(r"\nMarkdown Content:\n([\s\S]+)", content)
    if m:
        for line in m.group(1).split("\n"):
            if line.strip():
                return line.strip(), ""
    return None, ""


def parse_nitter(page: str) -> tuple[str, str]:
    author = ""
    m = re.search(r'class="fullname"[^>]*>([^<]+)<', page)
    if m:
        author = decode_entities(m.group(1))
    text = ""
    m = re.search(r'class="tweet-content[^"]*"[^>]*>([\s\S]*?)</div>', page)
    if m:
        text = decode_entities(strip_tags(m.group(1)))
    return text, author


def parse_meta(page: str) -> tuple[str, str]:
    """(text, author) from ``og:title`` like ``Jack on X: "hello"``, else ``og:description``."""
    title = extract_og_title(page) or ""
    desc = extract_og_description(page) or ""
    author = ""
    m = re.match(r"(.+?)\s+on (?:X|Twitter)\b", title)
    if m:
        author = m.group(1).strip()
    quoted = re.search(r'"(.+)"', title)
    if quoted:
        return quoted.group(1), author
    if desc and (not title or title.lower() in ("x", "twitter") or author):
        return desc, author
    return title, author


class TwitterHandler(PlatformHandler):
    name = "twitter"
    display_names = ("X", "Twitter", "X (formerly Twitter)")
    domains = ("twitter.com", "x.com")

    def native_id(self, url: str) -> Optional[str]:
        m = _STATUS_RE.search(url)
        return m.group(1) if m else None

    def clean_title(self, title: str) -> str:
        return re.sub(r"\s*/\s*(?:X|Twitter)\s*$", "", (title or "").strip()).strip()

    def compose(self, title: str, author: str) -> str:
        text = title if len(title) <= MAX_TEXT else title[:MAX_TEXT] + "..."
        return f'{author}: "{text}"' if author else text

    def strategies(self, url: str, env: Env) -> list[Strategy]:
        return [
            ("twitter_oembed", lambda: self._try_oembed(url, env)),
            ("twitter_reader", lambda: self._try_reader(url, env)),
            ("twitter_nitter", lambda: self._try_nitter(url, env)),
            ("twitter_meta", lambda: self._try_meta(url, env)),
        ]

    async def _linked_title(self, link: str, env: Env) -> Optional[str]:
        try:
            resp = await fetch_page(env.client, link, user_agent=BOT_UA, timeout=env.settings.timeout)
        except NETWORK_EXCEPTIONS as e:
            logger.debug(f"[twitter] 链接标题获取失败 {link}: {e}")
            return None
        title = extract_title_from_html(resp.text)
        if title and not self.is_placeholder(title):
            return title
        return None

    async def _try_oembed(self, url: str, env: Env) -> StrategyOutcome:
        data = await fetch_json(
            env.client,
            API_ENDPOINTS["twitter"]["oembed"],
            params={"url": url, "omit_script": "true"},
            user_agent=BOT_UA,
            timeout=env.settings.timeout,
        )
        text, author, links = parse_oembed(data)
        if links:
            linked = await self._linked_title(links[0], env)
            if linked:
                text = linked
        if not text:
            return ExtractionError("empty embed", "twitter_oembed")
        return TitleResult(title=text, author=author, method="twitter_oembed")

    async def _try_reader(self, url: str, env: Env) -> StrategyOutcome:
        content = await self.fetch_reader(url, env, user_agent=DESKTOP_UA)
        if isinstance(content, ExtractionError):
            return content
        text, author = parse_reader(content)
        if not text:
            return ExtractionError("reader output has no tweet", "twitter_reader")
        return TitleResult(title=text, author=author or screen_name(url), method="twitter_reader")

    async def _try_nitter(self, url: str, env: Env) -> StrategyOutcome:
        for instance in env.settings.nitter_instances:
            mirror = re.sub(r"(?:mobile\.)?(?:twitter|x)\.com", instance, url, count=1)
            try:
                resp = await fetch_page(env.client, mirror, user_agent=DESKTOP_UA, timeout=env.settings.timeout)
            except NETWORK_EXCEPTIONS as e:
                logger.debug(f"[twitter] nitter 镜像 {instance} 失败: {e}")
                continue
            text, author = parse_nitter(resp.text)
            if text:
                return TitleResult(title=text, author=author or screen_name(url), method="twitter_nitter")
        return ExtractionError("all nitter instances failed", "twitter_nitter")

    async def _try_meta(self, url: str, env: Env) -> StrategyOutcome:
        resp = await fetch_page(env.client, url, user_agent=BOT_UA, timeout=env.settings.timeout)
        text, author = parse_meta(resp.text)
        if not text:
            return ExtractionError("no og:title", "twitter_meta")
        return TitleResult(title=text, author=author or screen_name(url), method="twitter_meta")
