"""
HTML / 文本工具 - 实体解码、通用标题提取、内嵌 JSON 定位

Every extractor here is a pure ``str -> Optional[str]`` function so platform
handlers can chain them in priority order.
"""

import html
import json
import re
from typing import Callable, Iterable, Optional

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
_UNDEFINED_RE = re.compile(r"([:,\[]\s*)undefined(?=\s*[,}\]])")


def decode_entities(text: Optional[str]) -> str:
    if not text:
        return ""
    return html.unescape(text).replace("\xa0", " ").strip()


def strip_tags(fragment: str) -> str:
    return _WS_RE.sub(" ", _TAG_RE.sub(" ", fragment or "")).strip()


def meta_content(page: str, key: str) -> Optional[str]:
    """Value of ``<meta property|name="key" content="...">`` in either attribute order."""
    if not page:
        return None
    k = re.escape(key)
    patterns = [
        rf"<meta[^>]*(?:property|name)\s*=\s*[\"']{k}[\"'][^>]*content\s*=\s*\"([^\"]*)\"",
        rf"<meta[^>]*(?:property|name)\s*=\s*[\"']{k}[\"'][^>]*content\s*=\s*'([^']*)'",
        rf"<meta[^>]*content\s*=\s*\"([^\"]*)\"[^>]*(?:property|name)\s*=\s*[\"']{k}[\"']",
        rf"<meta[^>]*content\s*=\s*'([^']*)'[^>]*(?:property|name)\s*=\s*[\"']{k}[\"']",
    ]
    for p in patterns:
        m = re.search(p, page, re.IGNORECASE)
        if m:
            value = decode_entities(m.group(1))
            if value:
                return value
    return None


def extract_og_title(page: str) -> Optional[str]:
    return meta_content(page, "og:title")


def extract_og_description(page: str) -> Optional[str]:
    return meta_content(page, "og:description")


def extract_title_tag(page: str) -> Optional[str]:
    m = re.search(r"<title[^>]*>([^<]+)</title>", page or "", re.IGNORECASE)
    if m:
        return decode_entities(m.group(1)) or None
    return None


def extract_h1(page: str) -> Optional[str]:
    m = re.search(r"<h1[^>]*>([\s\S]*?)</h1>", page or "", re.IGNORECASE)
    if m:
        return decode_entities(strip_tags(m.group(1))) or None
    return None


def first_match(page: str, extractors: Iterable[Callable[[str], Optional[str]]]) -> Optional[str]:
    for fn in extractors:
        value = fn(page)
        if value:
            return value
    return None


GENERIC_TITLE_EXTRACTORS = (extract_og_title, extract_title_tag, extract_h1)


def extract_title_from_html(page: str) -> Optional[str]:
    """og:title → <title> → first <h1>."""
    if not page:
        return None
    return first_match(page, GENERIC_TITLE_EXTRACTORS)


# ─── 内嵌 JSON ──────────────────────────────────────────────────────────────────

def scan_object(text: str, start: int) -> Optional[int]:
    """Index just past the ``}`` closing the object that opens at ``text[start]``.

    Braces inside string literals (including escaped quotes) are not counted.
    """
    if start < 0 or start >= len(text) or text[start] != "{":
        return None
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if escaped:
            escaped = False
            continue
        if ch == "\\":
            escaped = in_string
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return None


def extract_balanced_json(text: str, marker: str) -> Optional[str]:
    """Raw text of the JSON object assigned right after ``marker`` (e.g. ``window.__INITIAL_STATE__``)."""
    if not text:
        return None
    idx = text.find(marker)
    if idx == -1:
        return None
    cursor = idx + len(marker)
    while cursor < len(text) and (text[cursor].isspace() or text[cursor] == "="):
        cursor += 1
    end = scan_object(text, cursor)
    if end is None:
        return None
    return text[cursor:end]


def first_balanced_object(text: str) -> Optional[str]:
    if not text:
        return None
    start = text.find("{")
    while start != -1:
        end = scan_object(text, start)
        if end is not None:
            return text[start:end]
        start = text.find("{", start + 1)
    return None


def load_js_object(raw: str):
    """json.loads for inline JS state blobs, which use bare ``undefined``."""
    return json.loads(_UNDEFINED_RE.sub(r"\1null", raw))
