import re
from typing import Optional
from urllib.parse import urlsplit

from ..config import MOBILE_UA
from ..env import Env
from ..htmltools import (
    extract_balanced_json,
    extract_og_description,
    extract_og_title,
    extract_title_tag,
    load_js_object,
)
from ..http import fetch_page
from ..models import ExtractionError, StrategyOutcome, TitleResult
from .base import PlatformHandler, Strategy, hostname_of

DESC_AS_TITLE = 50

# 页面/阅读器输出中的样板文字：法务声明、界面元素、页脚链接
NOISE_PATTERNS = [re.compile(p, re.MULTILINE) for p in (
    r"\*\s*发现",
    r"\*\s*发布",
    r"\*\s*通知",
    r"登录$",
    r"^我$",
    r"关注",
    r"\d+:\d+\s*\d+:\d+",
    r"[\d.]+x\s*倍速",
    r"请\s+刷新\s+试试",
    r"内容可能使用AI技术生成",
    r"加载中",
    r"去首页.*?笔记",
    r"登录后评论",
    r"发送\s+取消",
    r"我要申诉",
    r"温馨提示",
    r"沪ICP备.*",
    r"营业执照.*",
    r"公网安备.*",
    r"增值电信.*",
    r"医疗器械.*",
    r"互联网药品.*",
    r"违法不良.*",
    r"举报中心.*",
    r"有害信息.*",
    r"自营经营者.*",
    r"网络文化.*",
    r"个性化推荐.*",
    r"行吟信息.*",
    r"地址：.*",
    r"电话：.*",
    r"©\s*\d{4}.*",
    r"更多$",
    r"活动$",
    r"创作服务$",
    r"直播管理$",
    r"电脑直播助手$",
    r"专业号$",
    r"推广合作$",
    r"蒲公英$",
    r"商家入驻$",
    r"MCN入驻",
    r"举报$",
)]

_READER_AUTHOR_PATTERNS = (
    re.compile(r"\bby\s+([a-zA-Z0-9_一-龥]+)", re.IGNORECASE),
    re.compile(r"发布者[:：]\s*([a-zA-Z0-9_一-龥]+)"),
    re.compile(r"作者[:：]\s*([a-zA-Z0-9_一-龥]+)"),
    re.compile(r"([a-zA-Z0-9_一-龥]+)\.create"),
)


def strip_noise(text: str) -> str:
    cleaned = text or ""
    for p in NOISE_PATTERNS:
        cleaned = p.sub("", cleaned)
    return re.sub(r"\n{3,}", "\n\n", cleaned).strip()


def _note_user(note: dict) -> str:
    user = note.get("user") or {}
    return user.get("nickname") or user.get("nickName") or user.get("name") or ""


def note_from_state(state: dict) -> Optional[dict]:
    """Locate the note object across the desktop and mobile state shapes."""
    note_root = state.get("note") or {}
    if isinstance(note_root.get("note"), dict) and note_root["note"]:
        return note_root["note"]
    if isinstance(note_root.get("firstNote"), dict) and note_root["firstNote"]:
        return note_root["firstNote"]
    detail_map = note_root.get("noteDetailMap") or {}
    for entry in detail_map.values():
        if isinstance(entry, dict):
            note = entry.get("note") if isinstance(entry.get("note"), dict) else entry
            if note:
                return note
    mobile = ((state.get("noteData") or {}).get("data") or {}).get("noteData")
    if isinstance(mobile, dict) and mobile:
        return mobile
    return None


def parse_initial_state(page: str) -> Optional[dict]:
    """``{title, desc, author}`` from ``window.__INITIAL_STATE__``, or None."""
    raw = extract_balanced_json(page, "window.__INITIAL_STATE__")
    if raw is None:
        return None
    note = note_from_state(load_js_object(raw))
    if note is None:
        return None
    return {
        "title": (note.get("title") or "").strip(),
        "desc": strip_noise(note.get("desc") or ""),
        "author": _note_user(note),
    }


def _truncate(text: str, limit: int = DESC_AS_TITLE) -> str:
    text = text.strip()
    return f"{text[:limit]}..." if len(text) > limit else text


def parse_reader(content: str) -> dict:
    cleaned = re.sub(r"={20,}", "", content or "").replace("\r\n", "\n").replace("\r", "\n")
    title = ""
    for pattern in (
        r"^Title:\s*([^\n]+?)\s*-\s*小红书",
        r"^([^\n]+?)\s*-\s*小红书",
        r"^Title:\s*([^\n]+)",
    ):
        m = re.search(pattern, cleaned, re.MULTILINE)
        if m:
            title = m.group(1).strip()
            break
    if not title:
        for line in cleaned.split("\n"):
            line = strip_noise(line.strip())
            if line and len(line) < 100:
                title = line
                break

    author = ""
    for p in _READER_AUTHOR_PATTERNS:
        m = p.search(cleaned)
        if m:
            author = m.group(1)
            break
    return {"title": title, "author": author}


class XiaohongshuHandler(PlatformHandler):
    name = "xiaohongshu"
    display_names = ("小红书", "RedNote", "小红书 - 你的生活指南", "小红书 - 你的生活兴趣社区")
    domains = ("xiaohongshu.com", "xhslink.com", "xhs.cn")
    title_suffixes = ("小红书",)

    def native_id(self, url: str) -> Optional[str]:
        m = re.search(r"/(?:explore|discovery/item|item)/([A-Za-z0-9]+)", url)
        if m:
            return m.group(1)
        if hostname_of(url).endswith("xhslink.com"):
            try:
                path = urlsplit(url).path.strip("/").replace("/", "")
            except ValueError:
                return None
            return path or None
        return None

    def clean_author(self, author: str) -> str:
        author = (author or "").strip()
        return re.sub(r"\.create$", "", author)

    def compose(self, title: str, author: str) -> str:
        return f"{title} #{author}" if author else title

    def strategies(self, url: str, env: Env) -> list[Strategy]:
        return [
            ("xhs_html", lambda: self._try_html(url, env)),
            ("xhs_reader", lambda: self._try_reader(url, env)),
        ]

    def _valid(self, title: Optional[str]) -> bool:
        return not self.is_placeholder(self.clean_title(title or ""))

    async def _try_html(self, url: str, env: Env) -> StrategyOutcome:
        resp = await fetch_page(env.client, url, user_agent=MOBILE_UA, timeout=env.settings.timeout,
                                headers={"Cache-Control": "no-cache", "Pragma": "no-cache"})
        page = resp.text
        title, author, desc = "", "", ""

        state = parse_initial_state(page)
        if state:
            author = state["author"]
            desc = state["desc"]
            if self._valid(state["title"]):
                title = state["title"]

        if not title:
            meta_title = extract_og_title(page) or ""
            meta_desc = strip_noise(extract_og_description(page) or "")
            if self._valid(meta_title):
                title = meta_title
            elif meta_desc or desc:
                title = _truncate(desc or meta_desc)

        if not self._valid(title):
            title = extract_title_tag(page) or ""

        if not author:
            m = re.search(r'"nickname"\s*:\s*"([^"]+)"', page)
            if m:
                author = m.group(1)

        if not self._valid(title):
            return ExtractionError("generic title", "xhs_html")
        return TitleResult(title=title, author=author, method="xhs_html")

    async def _try_reader(self, url: str, env: Env) -> StrategyOutcome:
        content = await self.fetch_reader(url, env, user_agent=MOBILE_UA)
        if isinstance(content, ExtractionError):
            return content
        parsed = parse_reader(content)
        if not parsed["title"]:
            return ExtractionError("reader output has no title", "xhs_reader")
        return TitleResult(title=parsed["title"], author=parsed["author"], method="xhs_reader")
