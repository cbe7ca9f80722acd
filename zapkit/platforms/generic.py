from ..config import BOT_UA
from ..env import Env
from ..htmltools import extract_title_from_html
from ..http import fetch_page
from ..models import ExtractionError, StrategyOutcome, TitleResult
from .base import PlatformHandler, Strategy


class GenericHandler(PlatformHandler):
    """Catch-all; registered last so dispatch always terminates."""

    name = "generic"

    def can_handle(self, url: str) -> bool:
        return True

    def strategies(self, url: str, env: Env) -> list[Strategy]:
        return [("generic_html", lambda: self._try_html(url, env))]

    async def _try_html(self, url: str, env: Env) -> StrategyOutcome:
        resp = await fetch_page(env.client, url, user_agent=BOT_UA, timeout=env.settings.timeout)
        title = extract_title_from_html(resp.text)
        if not title:
            return ExtractionError("no title in page", "generic_html")
        return TitleResult(title=title, method="generic_html")
