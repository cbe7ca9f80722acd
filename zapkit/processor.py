"""
内容处理 - 分离链接标题与用户笔记

Given the raw pasted text and the resolved metadata, keep only what the user
actually wrote: the URL, app share boilerplate, hashtags and any restatement
of the link title are dropped.
"""

import re
import unicodedata
from typing import Optional

from .models import ContentMetadata, ProcessedContent

URL_RE = re.compile(r"(https?://[^\s]+)")
HASHTAG_RE = re.compile(r"#[^\s]+")

# App 分享文案
SHARE_NOISE_PATTERNS = [re.compile(p, re.DOTALL) for p in (
    r"复制后打开.*$",
    r"复制此链接.*$",
    r"打开.*查看.*$",
    r"分享自.*$",
    r"来自.*$",
)]

# 标题即全部内容的平台，笔记一律清空
FULL_CONTENT_PLATFORMS = {"xiaohongshu", "douyin", "小红书", "抖音"}


def extract_url(text: str) -> Optional[str]:
    m = URL_RE.search(text or "")
    return m.group(1) if m else None


def clean_share_noise(text: str) -> str:
    cleaned = text or ""
    for p in SHARE_NOISE_PATTERNS:
        cleaned = p.sub("", cleaned)
    return HASHTAG_RE.sub("", cleaned).strip()


def normalize_text(text: str) -> str:
    """Lower-case, with every run of whitespace/punctuation collapsed to one space."""
    chars = [
        " " if ch.isspace() or unicodedata.category(ch).startswith("P") else ch
        for ch in text or ""
    ]
    return re.sub(r" +", " ", "".join(chars)).lower().strip()


def is_duplicate_text(a: str, b: str) -> bool:
    na, nb = normalize_text(a), normalize_text(b)
    return na in nb or nb in na


def extract_user_note(raw_text: str, link_title: Optional[str] = None) -> Optional[str]:
    note = clean_share_noise(URL_RE.sub("", raw_text or "").strip())
    if not note:
        return None
    if link_title and is_duplicate_text(note, link_title):
        return None
    return note


def process(raw_text: str, metadata: ContentMetadata) -> ProcessedContent:
    if not metadata.is_link:
        return ProcessedContent(title=None, content=raw_text, type="text")

    if metadata.platform in FULL_CONTENT_PLATFORMS or metadata.source in FULL_CONTENT_PLATFORMS:
        return ProcessedContent(title=metadata.title, content="", type="link")

    return ProcessedContent(
        title=metadata.title,
        content=extract_user_note(raw_text, metadata.title) or "",
        type="link",
    )
