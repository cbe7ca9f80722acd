import json
import logging
from typing import Optional

import httpx

from .config import BOT_UA, MOBILE_UA, TIMEOUT

logger = logging.getLogger("zapkit")

NETWORK_EXCEPTIONS = (
    httpx.HTTPError,
    httpx.TimeoutException,
    httpx.InvalidURL,
)

PARSE_EXCEPTIONS = (
    json.JSONDecodeError,
    ValueError,
    KeyError,
    IndexError,
    TypeError,
    AttributeError,
)

HANDLED_EXCEPTIONS = NETWORK_EXCEPTIONS + PARSE_EXCEPTIONS


def _headers(user_agent: str, accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8") -> dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": accept,
        "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
    }


def new_client(timeout: float = TIMEOUT, **kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(follow_redirects=True, timeout=timeout, **kwargs)


async def fetch_page(
    client: httpx.AsyncClient,
    url: str,
    user_agent: str = BOT_UA,
    timeout: Optional[float] = None,
    headers: Optional[dict] = None,
) -> httpx.Response:
    """GET with a platform-tuned UA; non-2xx raises httpx.HTTPStatusError.

    No retries: a failing strategy hands over to the next one.
    """
    h = _headers(user_agent)
    if headers:
        h.update(headers)
    kwargs = {"headers": h}
    if timeout is not None:
        kwargs["timeout"] = timeout
    resp = await client.get(url, **kwargs)
    resp.raise_for_status()
    return resp


async def fetch_json(client: httpx.AsyncClient, url: str, params: Optional[dict] = None,
                     user_agent: str = BOT_UA, timeout: Optional[float] = None):
    kwargs = {"headers": _headers(user_agent, accept="application/json"), "params": params}
    if timeout is not None:
        kwargs["timeout"] = timeout
    resp = await client.get(url, **kwargs)
    resp.raise_for_status()
    return resp.json()


async def location_of(client: httpx.AsyncClient, url: str, user_agent: str = MOBILE_UA,
                      timeout: Optional[float] = None) -> Optional[str]:
    """Target of a single redirect hop, read from the Location header without following it."""
    kwargs = {"headers": _headers(user_agent), "follow_redirects": False}
    if timeout is not None:
        kwargs["timeout"] = timeout
    resp = await client.get(url, **kwargs)
    location = resp.headers.get("location")
    if location:
        return str(resp.url.join(location))
    return None


async def resolve_redirects(client: httpx.AsyncClient, url: str, user_agent: str = BOT_UA,
                            timeout: Optional[float] = None) -> str:
    """Final URL after following every redirect."""
    kwargs = {"headers": _headers(user_agent), "follow_redirects": True}
    if timeout is not None:
        kwargs["timeout"] = timeout
    resp = await client.get(url, **kwargs)
    return str(resp.url)
