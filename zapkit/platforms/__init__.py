from .base import PLACEHOLDER_TITLES, PlatformHandler, hostname_of
from .douyin import DouyinHandler
from .feishu import FeishuHandler
from .generic import GenericHandler
from .twitter import TwitterHandler
from .wechat import WeChatHandler
from .xiaohongshu import XiaohongshuHandler

HANDLERS = {
    "wechat": WeChatHandler,
    "twitter": TwitterHandler,
    "xiaohongshu": XiaohongshuHandler,
    "douyin": DouyinHandler,
    "feishu": FeishuHandler,
    "generic": GenericHandler,
}


def default_handlers() -> list[PlatformHandler]:
    """Fresh handler instances in dispatch priority order; Generic is last."""
    return [cls() for cls in HANDLERS.values()]


__all__ = [
    "HANDLERS",
    "PLACEHOLDER_TITLES",
    "PlatformHandler",
    "DouyinHandler",
    "FeishuHandler",
    "GenericHandler",
    "TwitterHandler",
    "WeChatHandler",
    "XiaohongshuHandler",
    "default_handlers",
    "hostname_of",
]
