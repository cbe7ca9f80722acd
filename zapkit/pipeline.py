"""
Ingestion: free text in, storable :class:`~zapkit.models.Item` out.

URL extraction → platform identification → title resolution → classification
→ note/title split.
"""

import logging
import re
from typing import Optional

from .classifier import classify, identify_platform
from .dispatcher import Dispatcher
from .env import Env
from .models import ContentMetadata, Item
from .processor import extract_url, process

logger = logging.getLogger("zapkit")

PLATFORM_TITLE_SUFFIXES = (" - 知乎专栏", " - 知乎", " - 飞书云文档")


def clean_platform_title(title: str, url: str) -> str:
    """Trim verbose platform decorations: GitHub repo blurbs, trailing site names."""
    if "github.com" in url and title.startswith("GitHub - "):
        m = re.match(r"^GitHub - ([^:]+)", title)
        if m and m.group(1).strip():
            return m.group(1).strip()
    for suffix in PLATFORM_TITLE_SUFFIXES:
        if title.endswith(suffix):
            return title[: -len(suffix)]
    return title


async def build_metadata(text: str, env: Env, dispatcher: Optional[Dispatcher] = None) -> ContentMetadata:
    url = extract_url(text)
    if not url:
        return ContentMetadata(content=text, is_link=False)

    metadata = ContentMetadata(content=url, original_url=url, is_link=True)
    dispatcher = dispatcher or Dispatcher()

    handler = dispatcher.handler_for(url)
    known = identify_platform(url)
    if known:
        metadata.platform, metadata.source = known.key, known.name
    elif handler is not None and handler.display_names:
        metadata.platform, metadata.source = handler.name, handler.display_names[0]

    result = await dispatcher.resolve(url, env)
    if result.title:
        metadata.title = clean_platform_title(result.title, url)
        logger.debug(f"标题获取成功: {metadata.title}")
    else:
        logger.info(f"未获取到标题: {url}")
    return metadata


async def ingest(text: str, env: Env, auto_classify: bool = True,
                 dispatcher: Optional[Dispatcher] = None) -> Item:
    metadata = await build_metadata(text, env, dispatcher)
    classification = await classify(text, metadata, env.settings, enabled=auto_classify)
    processed = process(text, metadata)
    return Item(
        content=processed.content,
        type=processed.type,
        category=classification.category,
        title=processed.title,
        source=metadata.source,
        original_url=metadata.original_url,
        reasoning=classification.reasoning,
    )
