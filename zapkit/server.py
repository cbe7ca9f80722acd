"""
HTTP edge function.

    GET  ?url=<url>[&debug=1]   → {"title": ..., "author": ...}
    GET  ?url=<url>&resolve=1   → {"resolvedUrl": ...}
    POST {"content", "metadata"} → {"category": ..., "reasoning": ...}
    OPTIONS                     → 204 (CORS preflight)

Does NOT store anything: the caller persists the returned record.
"""

import asyncio
import json
import logging

import functions_framework

from .cache import MemoryCache
from .classifier import ConfigurationError, classify_remote
from .config import Settings
from .dispatcher import Dispatcher, resolve_redirects
from .env import open_env
from .models import ContentMetadata

logger = logging.getLogger("zapkit")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "86400",
}

EDGE_CACHE = "public, max-age=3600"
NO_CACHE = "no-cache"

# shared across requests served by this instance
_cache = MemoryCache()
_dispatcher = Dispatcher()


def _json(payload: dict, status: int = 200, cache_control: str = NO_CACHE):
    headers = {
        **CORS_HEADERS,
        "Content-Type": "application/json; charset=utf-8",
        "Cache-Control": cache_control,
    }
    return (json.dumps(payload, ensure_ascii=False), status, headers)


async def _fetch_title(url: str, settings: Settings):
    async with open_env(settings, cache=_cache) as env:
        return await _dispatcher.resolve(url, env)


async def _resolve_only(url: str, settings: Settings):
    async with open_env(settings, cache=_cache) as env:
        return await resolve_redirects(url, env)


def handle_classify(request, settings: Settings):
    body = request.get_json(silent=True) or {}
    content = body.get("content") if isinstance(body, dict) else None
    if not content or not isinstance(content, str):
        return _json({"error": "Missing content"}, 400)

    metadata = ContentMetadata.from_dict(body.get("metadata"))
    try:
        result = asyncio.run(classify_remote(content, metadata, settings))
    except ConfigurationError as e:
        logger.error(f"分类服务未配置: {e}")
        return _json({"error": "Server misconfiguration: API key not found", "details": str(e)}, 500)
    return _json(result.to_dict())


def handle_title(request, settings: Settings):
    url = (request.args.get("url") or "").strip()
    if not url:
        return _json({"error": "Missing url parameter"}, 400)

    if request.args.get("resolve") == "1":
        resolved, error = asyncio.run(_resolve_only(url, settings))
        payload = {"resolvedUrl": resolved}
        if error:
            payload["error"] = error
        return _json(payload)

    debug = request.args.get("debug") == "1"
    result = asyncio.run(_fetch_title(url, settings))
    if debug:
        handler = _dispatcher.handler_for(url)
        payload = result.to_dict(debug=True)
        payload["platform"] = handler.get_name() if handler else None
        return _json(payload)
    return _json(result.to_dict(), cache_control=EDGE_CACHE if result.ok else NO_CACHE)


@functions_framework.http
def zap_in(request):
    """Cloud Function entry point."""
    if request.method == "OPTIONS":
        return ("", 204, CORS_HEADERS)

    settings = Settings.from_env()
    if request.method == "POST" and not request.args.get("url"):
        return handle_classify(request, settings)
    return handle_title(request, settings)
