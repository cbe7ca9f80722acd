import pytest

from zapkit.models import ContentMetadata
from zapkit.processor import (
    clean_share_noise,
    extract_url,
    extract_user_note,
    is_duplicate_text,
    normalize_text,
    process,
)


def link_meta(url, title=None, platform=None, source=None):
    return ContentMetadata(content=url, original_url=url, is_link=True,
                           title=title, platform=platform, source=source)


@pytest.mark.unit
class Describe_text_helpers:
    def test_extract_url_should_take_first_link(self):
        """取文本中的第一个链接。"""
        assert extract_url("看看 https://a.com/x 和 https://b.com") == "https://a.com/x"
        assert extract_url("没有链接") is None

    def test_clean_share_noise_should_drop_boilerplate_and_hashtags(self):
        """去掉 App 分享文案与 #话题。"""
        assert clean_share_noise("好文 #读书 复制后打开抖音，看看【作品】") == "好文"
        assert clean_share_noise("值得一看\n分享自知乎") == "值得一看"

    def test_normalize_text_should_fold_punctuation_and_case(self):
        """标点与空白折叠为单个空格并转小写。"""
        assert normalize_text("Hello,  World！——测试") == "hello world 测试"

    def test_is_duplicate_text_should_use_containment(self):
        """归一化后互相包含即视为重复。"""
        assert is_duplicate_text("great article", "Great Article about X")
        assert not is_duplicate_text("完全不同", "Great Article about X")
        assert is_duplicate_text("！！", "")
        assert is_duplicate_text("!!!", "Some Title")


@pytest.mark.unit
class Describe_extract_user_note:
    def test_given_restated_title_should_return_none(self):
        """笔记只是复述标题时丢弃。"""
        raw = "Great article about X https://example.com/a 复制此链接，打开浏览器"
        assert extract_user_note(raw, "Great article about X") is None

    def test_given_own_words_should_keep_them(self):
        """用户自己的话保留。"""
        raw = "周末要读完 https://example.com/a"
        assert extract_user_note(raw, "Great article about X") == "周末要读完"

    def test_given_only_url_should_return_none(self):
        """只有链接时没有笔记。"""
        assert extract_user_note("https://example.com/a") is None

    def test_given_punctuation_only_note_should_return_none(self):
        """只有标点的笔记归一化后为空，视为重复丢弃。"""
        assert extract_user_note("!!! https://example.com/a", "Some Title") is None
        assert extract_user_note("。。 https://example.com/a", "任意标题") is None


@pytest.mark.unit
class Describe_process:
    def test_given_plain_text_should_pass_through(self):
        """纯文本原样作为内容。"""
        result = process("记得买牙刷", ContentMetadata(content="记得买牙刷"))
        assert (result.title, result.content, result.type) == (None, "记得买牙刷", "text")

    def test_given_title_restatement_should_leave_empty_note(self):
        """链接标题被复述时内容为空。"""
        url = "https://example.com/a"
        raw = f"Great article about X {url} 复制此链接，打开浏览器查看"
        result = process(raw, link_meta(url, title="Great article about X"))
        assert result.title == "Great article about X"
        assert result.content == ""
        assert result.type == "link"

    @pytest.mark.parametrize("platform, source", [
        ("xiaohongshu", "小红书"),
        ("douyin", None),
        (None, "抖音"),
    ])
    def test_given_full_content_platform_should_force_empty_note(self, platform, source):
        """小红书与抖音的笔记一律清空。"""
        url = "http://xhslink.com/a/abc"
        raw = f"我的想法很重要 {url}"
        result = process(raw, link_meta(url, title="T #N", platform=platform, source=source))
        assert result.content == ""
        assert result.title == "T #N"

    def test_given_other_link_should_keep_user_note(self):
        """其他平台保留用户笔记。"""
        url = "https://mp.weixin.qq.com/s/abc"
        result = process(f"回头细看 #收藏 {url}", link_meta(url, title="Hello World", platform="wechat"))
        assert result.content == "回头细看"
