"""zapkit - resolve pasted links to titles and triage them into categories."""

from .cache import MemoryCache, cache_key, normalize_url
from .classifier import ConfigurationError, classify, classify_remote, fallback_classification, identify_platform
from .config import Settings
from .dispatcher import Dispatcher, resolve_redirects
from .env import Env, open_env
from .models import (
    Category,
    Classification,
    ContentMetadata,
    ExtractionError,
    Item,
    ProcessedContent,
    TitleResult,
)
from .pipeline import ingest
from .platforms import default_handlers
from .processor import process

__version__ = "0.1.0"

__all__ = [
    "Category",
    "Classification",
    "ConfigurationError",
    "ContentMetadata",
    "Dispatcher",
    "Env",
    "ExtractionError",
    "Item",
    "MemoryCache",
    "ProcessedContent",
    "Settings",
    "TitleResult",
    "cache_key",
    "classify",
    "classify_remote",
    "default_handlers",
    "fallback_classification",
    "identify_platform",
    "ingest",
    "normalize_url",
    "open_env",
    "process",
    "resolve_redirects",
]
