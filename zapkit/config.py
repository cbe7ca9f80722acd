import os
from dataclasses import dataclass, field

# ─── User-Agent ─────────────────────────────────────────────────────────────────

MOBILE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_6 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/16.6 Mobile/15E148 Safari/604.1"
)

DESKTOP_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

WECHAT_UA = (
    "Mozilla/5.0 (Linux; Android 10; K) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/114.0.0.0 Mobile Safari/537.36 MicroMessenger/8.0.38.2401(0x2800265F) "
    "Process/tools WeChat/arm64 Weixin NetType/WIFI Language/zh_CN ABI/arm64"
)

BOT_UA = "Mozilla/5.0 (compatible; bingbot/2.0; +http://www.bing.com/bingbot.htm)"

# ─── 运行参数 ───────────────────────────────────────────────────────────────────

TIMEOUT = float(os.getenv("ZAPKIT_TIMEOUT", "15.0"))
CACHE_TTL = int(os.getenv("ZAPKIT_CACHE_TTL", "3600"))
REQUEST_DEADLINE = float(os.getenv("ZAPKIT_REQUEST_DEADLINE", "0") or 0)

READER_BASE = os.getenv("ZAPKIT_READER_BASE", "https://r.jina.ai/")
LLM_MODEL = os.getenv("ZAPKIT_LLM_MODEL", "gemini-2.0-flash")

NITTER_INSTANCES = [
    h.strip()
    for h in os.getenv(
        "ZAPKIT_NITTER_INSTANCES",
        "nitter.net,nitter.poast.org,nitter.privacydev.net",
    ).split(",")
    if h.strip()
]

API_ENDPOINTS = {
    "twitter": {
        "oembed": "https://publish.twitter.com/oembed",
    },
    "douyin": {
        "share_video": "https://www.iesdouyin.com/share/video/{video_id}",
    },
}


def _get_reader_key() -> str:
    return os.getenv("JINA_API_KEY") or ""


def _get_llm_key() -> str:
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or ""


@dataclass
class Settings:
    """Snapshot of the tunables above, passed around instead of re-reading the environment."""

    timeout: float = TIMEOUT
    cache_ttl: int = CACHE_TTL
    request_deadline: float = REQUEST_DEADLINE
    reader_base: str = READER_BASE
    reader_api_key: str = ""
    llm_api_key: str = ""
    llm_model: str = LLM_MODEL
    nitter_instances: list[str] = field(default_factory=lambda: list(NITTER_INSTANCES))

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(reader_api_key=_get_reader_key(), llm_api_key=_get_llm_key())
