from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Optional

import httpx

from .cache import Cache
from .config import Settings
from .http import new_client


@dataclass
class Env:
    """Runtime bindings handed to every handler: HTTP client, cache, credentials."""

    client: httpx.AsyncClient
    cache: Optional[Cache] = None
    settings: Settings = field(default_factory=Settings)

    @property
    def reader_api_key(self) -> str:
        return self.settings.reader_api_key


@asynccontextmanager
async def open_env(settings: Optional[Settings] = None, cache: Optional[Cache] = None,
                   client: Optional[httpx.AsyncClient] = None):
    settings = settings or Settings.from_env()
    own_client = client is None
    if own_client:
        client = new_client(timeout=settings.timeout)
    try:
        yield Env(client=client, cache=cache, settings=settings)
    finally:
        if own_client:
            await client.aclose()
