from pathlib import Path
from typing import Callable, Optional, Union

import httpx
import pytest

from zapkit.config import Settings
from zapkit.env import Env

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class MockRouter:
    """httpx transport answering from a ``{url: response}`` table.

    Keys match the full URL first, then the URL without its query string, then
    any key ending in ``*`` as a prefix. Unknown URLs get a 404.
    """

    def __init__(self, routes: Optional[dict[str, Route]] = None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._find(request.url)
        if route is None:
            return httpx.Response(404, text="not found")
        if callable(route):
            return route(request)
        return httpx.Response(
            route.status_code,
            headers=route.headers,
            content=route.content,
        )

    def _find(self, url: httpx.URL) -> Optional[Route]:
        full = str(url)
        if full in self.routes:
            return self.routes[full]
        bare = full.split("?", 1)[0]
        if bare in self.routes:
            return self.routes[bare]
        for key, route in self.routes.items():
            if key.endswith("*") and full.startswith(key[:-1]):
                return route
        return None

    def urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self), follow_redirects=True)


def html(body: str, status: int = 200, **headers) -> httpx.Response:
    return httpx.Response(status, text=body, headers={"content-type": "text/html; charset=utf-8", **headers})


def text(body: str, status: int = 200) -> httpx.Response:
    return httpx.Response(status, text=body, headers={"content-type": "text/plain; charset=utf-8"})


def redirect(location: str, status: int = 302) -> httpx.Response:
    return httpx.Response(status, headers={"location": location})


def make_settings(**overrides) -> Settings:
    values = dict(
        timeout=5.0,
        cache_ttl=3600,
        request_deadline=0,
        reader_base="https://r.jina.ai/",
        reader_api_key="",
        llm_api_key="",
        llm_model="gemini-2.0-flash",
        nitter_instances=["nitter.test"],
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def fixture_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def load_fixture(fixture_dir):
    def _loader(name: str) -> str:
        with open(fixture_dir / name, "r", encoding="utf-8") as f:
            return f.read()
    return _loader


@pytest.fixture
def make_env():
    def _factory(router: Union[MockRouter, dict, None] = None, cache=None, **settings) -> Env:
        if not isinstance(router, MockRouter):
            router = MockRouter(router)
        return Env(client=router.client(), cache=cache, settings=make_settings(**settings))
    return _factory
