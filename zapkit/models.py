from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Union

# ─── 数据结构 ───────────────────────────────────────────────────────────────────


@dataclass
class TitleResult:
    """Universal output of an extraction attempt. ``title is None`` means failure."""

    title: Optional[str] = None
    author: str = ""
    cached: bool = False
    method: str = ""
    errors: list[str] = field(default_factory=list)

    def __post_init__(self):
        if self.title is not None:
            self.title = self.title.strip() or None
        self.author = (self.author or "").strip()

    @property
    def ok(self) -> bool:
        return self.title is not None

    def to_dict(self, debug: bool = False) -> dict:
        if debug:
            return asdict(self)
        return {"title": self.title, "author": self.author}


@dataclass
class ExtractionError:
    """Tagged failure returned by a strategy instead of a TitleResult."""

    reason: str
    method: str = ""

    def __str__(self) -> str:
        return f"{self.method}: {self.reason}" if self.method else self.reason


StrategyOutcome = Union[TitleResult, ExtractionError]


class Category(str, Enum):
    IDEAS = "ideas"
    WORK = "work"
    PERSONAL = "personal"
    EXTERNAL = "external"
    OTHERS = "others"

    @classmethod
    def coerce(cls, value) -> Optional["Category"]:
        """Map current and legacy labels onto the current set; unknown values give None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        v = value.strip().lower()
        try:
            return cls(v)
        except ValueError:
            return LEGACY_CATEGORIES.get(v)


LEGACY_CATEGORIES = {
    "inspiration": Category.IDEAS,
    "idea": Category.IDEAS,
    "article": Category.EXTERNAL,
    "other": Category.OTHERS,
}


@dataclass
class ContentMetadata:
    content: str
    title: Optional[str] = None
    source: Optional[str] = None
    platform: Optional[str] = None
    original_url: Optional[str] = None
    is_link: bool = False

    def to_dict(self) -> dict:
        out = {"content": self.content, "isLink": self.is_link}
        for key, value in (
            ("title", self.title),
            ("source", self.source),
            ("platform", self.platform),
            ("originalUrl", self.original_url),
        ):
            if value:
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ContentMetadata":
        data = data if isinstance(data, dict) else {}
        return cls(
            content=str(data.get("content") or ""),
            title=data.get("title") or None,
            source=data.get("source") or None,
            platform=data.get("platform") or None,
            original_url=data.get("originalUrl") or data.get("original_url") or None,
            is_link=bool(data.get("isLink", data.get("is_link", False))),
        )


@dataclass
class ProcessedContent:
    title: Optional[str] = None
    content: str = ""
    type: str = "text"  # text / link


@dataclass
class Classification:
    category: Category = Category.OTHERS
    reasoning: str = ""

    def to_dict(self) -> dict:
        out = {"category": self.category.value}
        if self.reasoning:
            out["reasoning"] = self.reasoning
        return out


@dataclass
class Item:
    """Structured record ready for storage."""

    content: str = ""
    type: str = "text"
    category: Category = Category.OTHERS
    title: Optional[str] = None
    source: Optional[str] = None
    original_url: Optional[str] = None
    reasoning: str = ""

    def to_dict(self) -> dict:
        return {
            "content": self.content,
            "type": self.type,
            "category": self.category.value,
            "title": self.title,
            "source": self.source,
            "originalUrl": self.original_url,
        }
