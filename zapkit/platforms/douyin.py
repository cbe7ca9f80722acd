import json
import re
from typing import Optional

from ..config import API_ENDPOINTS, MOBILE_UA
from ..env import Env
from ..htmltools import extract_balanced_json, extract_title_tag
from ..http import fetch_page, location_of
from ..models import ExtractionError, StrategyOutcome, TitleResult
from .base import PlatformHandler, Strategy, hostname_of

MAX_TITLE = 80

_ID_RE = re.compile(r"/(?:share/)?(?:video|note)/(\d+)")


def clean_desc(desc: str) -> str:
    """Drop #hashtags and bound the length."""
    text = re.sub(r"#\S+\s*", " ", desc or "")
    text = re.sub(r"\s+", " ", text).strip()
    if len(text) > MAX_TITLE:
        text = text[:MAX_TITLE] + "..."
    return text


def _router_item(page: str) -> Optional[dict]:
    raw = extract_balanced_json(page, "window._ROUTER_DATA")
    if raw is None:
        return None
    try:
        router = json.loads(raw)
    except json.JSONDecodeError:
        router = json.loads(raw.replace("&quot;", '"').replace("&#39;", "'"))
    loader = router.get("loaderData", {})
    page_data = loader.get("video_(id)/page")
    if not page_data:
        for key, value in loader.items():
            if "page" in key and isinstance(value, dict) and value.get("videoInfoRes"):
                page_data = value
                break
    if not page_data:
        return None
    item_list = page_data.get("videoInfoRes", {}).get("item_list") or []
    return item_list[0] if item_list else None


def parse_page(page: str) -> tuple[Optional[str], str]:
    """(title, author) from a Douyin video page; ``<title>`` when the router blob is unusable."""
    author = ""
    item = _router_item(page)
    if item:
        author = (item.get("author") or {}).get("nickname", "") or ""
        title = clean_desc(item.get("desc", ""))
        if title:
            return title, author
    return extract_title_tag(page), author


class DouyinHandler(PlatformHandler):
    name = "douyin"
    display_names = ("抖音", "抖音-记录美好生活", "抖音短视频", "douyin")
    domains = ("douyin.com", "iesdouyin.com")
    title_suffixes = ("抖音",)

    def native_id(self, url: str) -> Optional[str]:
        m = _ID_RE.search(url)
        return m.group(1) if m else None

    def strategies(self, url: str, env: Env) -> list[Strategy]:
        state: dict[str, str] = {}
        return [
            ("douyin_html", lambda: self._try_page(url, env, state)),
            ("douyin_share", lambda: self._try_share_page(url, env, state)),
        ]

    async def _resolve(self, url: str, env: Env, state: dict) -> str:
        if "resolved" not in state:
            resolved = url
            if hostname_of(url) == "v.douyin.com":
                resolved = await location_of(env.client, url, user_agent=MOBILE_UA,
                                             timeout=env.settings.timeout) or url
            state["resolved"] = resolved
        return state["resolved"]

    async def _try_page(self, url: str, env: Env, state: dict) -> StrategyOutcome:
        target = await self._resolve(url, env, state)
        resp = await fetch_page(env.client, target, user_agent=MOBILE_UA, timeout=env.settings.timeout)
        state["resolved"] = str(resp.url)
        title, author = parse_page(resp.text)
        if not title:
            return ExtractionError("no title in page", "douyin_html")
        return TitleResult(title=title, author=author, method="douyin_html")

    async def _try_share_page(self, url: str, env: Env, state: dict) -> StrategyOutcome:
        target = state.get("resolved") or url
        video_id = self.native_id(target) or self.native_id(url)
        if not video_id:
            return ExtractionError("no video id", "douyin_share")
        share_url = API_ENDPOINTS["douyin"]["share_video"].format(video_id=video_id)
        resp = await fetch_page(env.client, share_url, user_agent=MOBILE_UA, timeout=env.settings.timeout)
        title, author = parse_page(resp.text)
        if not title:
            return ExtractionError("no title in share page", "douyin_share")
        return TitleResult(title=title, author=author, method="douyin_share")
