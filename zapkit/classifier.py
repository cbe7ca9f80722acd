"""
内容分类 - Gemini 判定 + 确定性兜底

``classify`` never fails: a disabled model, a missing key, a transport error or
an unusable reply all end in :func:`fallback_classification`.
``classify_remote`` is the strict variant used by the HTTP endpoint; it raises
:class:`ConfigurationError` when no key is configured.
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .config import Settings
from .htmltools import first_balanced_object
from .http import HANDLED_EXCEPTIONS
from .models import Category, Classification, ContentMetadata
from .platforms.base import hostname_of
from .prompts import CLASSIFICATION_RULES

logger = logging.getLogger("zapkit")

MODEL_EXCEPTIONS = HANDLED_EXCEPTIONS + (genai_errors.APIError, asyncio.TimeoutError)


class ConfigurationError(Exception):
    """The deployment is missing something it needs (e.g. the model API key)."""


@dataclass(frozen=True)
class KnownPlatform:
    key: str
    name: str
    category: Category


# host → platform; first match wins, so more specific hosts come first
PLATFORM_PATTERNS = {
    "mp.weixin.qq.com": KnownPlatform("wechat", "微信公众号", Category.EXTERNAL),
    "weixin.qq.com": KnownPlatform("wechat", "微信", Category.EXTERNAL),
    "xiaohongshu.com": KnownPlatform("xiaohongshu", "小红书", Category.EXTERNAL),
    "xhslink.com": KnownPlatform("xiaohongshu", "小红书", Category.EXTERNAL),
    "zhuanlan.zhihu.com": KnownPlatform("zhihu", "知乎专栏", Category.EXTERNAL),
    "zhihu.com": KnownPlatform("zhihu", "知乎", Category.EXTERNAL),
    "bilibili.com": KnownPlatform("bilibili", "B站", Category.EXTERNAL),
    "b23.tv": KnownPlatform("bilibili", "B站", Category.EXTERNAL),
    "douyin.com": KnownPlatform("douyin", "抖音", Category.EXTERNAL),
    "youtube.com": KnownPlatform("youtube", "YouTube", Category.EXTERNAL),
    "youtu.be": KnownPlatform("youtube", "YouTube", Category.EXTERNAL),
    "twitter.com": KnownPlatform("twitter", "Twitter/X", Category.EXTERNAL),
    "x.com": KnownPlatform("twitter", "Twitter/X", Category.EXTERNAL),
    "github.com": KnownPlatform("github", "GitHub", Category.EXTERNAL),
    "notion.so": KnownPlatform("notion", "Notion", Category.EXTERNAL),
    "feishu.cn": KnownPlatform("feishu", "飞书", Category.EXTERNAL),
    "dingtalk.com": KnownPlatform("dingtalk", "钉钉", Category.EXTERNAL),
    "taobao.com": KnownPlatform("taobao", "淘宝", Category.PERSONAL),
    "jd.com": KnownPlatform("jd", "京东", Category.PERSONAL),
    "tmall.com": KnownPlatform("tmall", "天猫", Category.PERSONAL),
}


def identify_platform(url: Optional[str]) -> Optional[KnownPlatform]:
    host = hostname_of(url or "")
    if not host:
        return None
    for pattern, info in PLATFORM_PATTERNS.items():
        if host == pattern or host.endswith("." + pattern):
            return info
    return None


def _platform_by_label(label: Optional[str]) -> Optional[KnownPlatform]:
    if not label:
        return None
    for info in PLATFORM_PATTERNS.values():
        if label in (info.key, info.name):
            return info
    return None


def fallback_classification(metadata: ContentMetadata, reason: str = "") -> Classification:
    """Known platform → its category; other links → external; plain text → others."""
    if metadata.is_link:
        info = identify_platform(metadata.original_url or metadata.content) or _platform_by_label(metadata.platform)
        category = info.category if info else Category.EXTERNAL
    else:
        category = Category.OTHERS
    return Classification(category=category, reasoning=reason)


def build_prompt(raw_text: str, metadata: ContentMetadata) -> str:
    return "\n".join([
        CLASSIFICATION_RULES,
        "",
        "---",
        "",
        "用户输入原文 / Input content:",
        '"""',
        raw_text,
        '"""',
        "",
        "元数据（系统检测事实，仅供参考）/ Metadata:",
        json.dumps(metadata.to_dict(), ensure_ascii=False, indent=2),
        "",
        '请严格按 JSON 返回，字符串内的双引号需转义，不要包含 Markdown 标记：{"reasoning": "...", "category": "category_key"}',
    ])


def parse_model_output(raw: str) -> Optional[Classification]:
    """Classification from a model reply, or None when the reply is unusable."""
    text = (raw or "").strip()
    if not text:
        return None
    text = re.sub(r"^```(?:json)?\s*", "", text)
    text = re.sub(r"\s*```$", "", text)
    blob = first_balanced_object(text)
    if blob is None:
        return None
    try:
        data = json.loads(blob)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    category = Category.coerce(data.get("category"))
    if category is None:
        return None
    reasoning = data.get("reasoning")
    return Classification(category=category, reasoning=reasoning if isinstance(reasoning, str) else "")


async def _generate(prompt: str, api_key: str, model: str, timeout: float) -> str:
    client = genai.Client(api_key=api_key)
    resp = await asyncio.wait_for(
        client.aio.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(temperature=0.1, max_output_tokens=2000),
        ),
        timeout=timeout,
    )
    return getattr(resp, "text", "") or ""


async def classify_remote(raw_text: str, metadata: ContentMetadata,
                          settings: Optional[Settings] = None) -> Classification:
    settings = settings or Settings.from_env()
    if not settings.llm_api_key:
        raise ConfigurationError("GEMINI_API_KEY / GOOGLE_API_KEY is not set")

    try:
        raw = await _generate(build_prompt(raw_text, metadata), settings.llm_api_key,
                              settings.llm_model, settings.timeout)
    except MODEL_EXCEPTIONS as e:
        logger.warning(f"模型分类失败，使用兜底规则: {type(e).__name__}: {e}")
        return fallback_classification(metadata, f"Model call failed ({type(e).__name__}), fallback applied")

    result = parse_model_output(raw)
    if result is None:
        logger.warning(f"模型返回无法解析: {raw[:200]!r}")
        return fallback_classification(metadata, "Invalid category from model, fallback applied")
    return result


async def classify(raw_text: str, metadata: ContentMetadata,
                   settings: Optional[Settings] = None, enabled: bool = True) -> Classification:
    if not enabled:
        return fallback_classification(metadata)
    try:
        return await classify_remote(raw_text, metadata, settings)
    except ConfigurationError as e:
        logger.warning(f"{e}，使用兜底规则")
        return fallback_classification(metadata, "Model not configured, fallback applied")
