import asyncio

import httpx
import pytest
from conftest import MockRouter, html, text

from zapkit.platforms.twitter import TwitterHandler, parse_meta, parse_nitter, parse_oembed, parse_reader

URL = "https://x.com/user/status/12345"
OEMBED = "https://publish.twitter.com/oembed"
READER = "https://r.jina.ai/http://x.com/user/status/12345"
NITTER = "https://nitter.test/user/status/12345"

EMBED_HTML = (
    '<blockquote class="twitter-tweet"><p lang="en" dir="ltr">Shipping the new parser today &amp; it is fast'
    '</p>&mdash; Jane Dev (@jane) <a href="https://twitter.com/jane/status/12345">May 1, 2024</a></blockquote>\n'
)


def oembed(html_snippet: str, author: str = "Jane Dev") -> httpx.Response:
    return httpx.Response(200, json={"author_name": author, "html": html_snippet, "url": URL})


@pytest.mark.unit
class Describe_twitter_parsers:
    def test_parse_oembed_should_cut_attribution(self):
        """嵌入 HTML 去标签后在 — 处截断。"""
        tweet, author, links = parse_oembed({"author_name": "Jane Dev", "html": EMBED_HTML})
        assert tweet == "Shipping the new parser today & it is fast"
        assert author == "Jane Dev"
        assert links == []

    def test_parse_oembed_should_collect_tco_links_but_not_pictures(self):
        """收集 t.co 链接，忽略图片链接。"""
        snippet = (
            '<blockquote><p>Read this <a href="https://t.co/AbC123">example.com/post</a> '
            '<a href="https://t.co/PiC999">pic.twitter.com/xyz</a></p>— Jane</blockquote>'
        )
        _, _, links = parse_oembed({"html": snippet})
        assert links == ["https://t.co/AbC123"]

    def test_parse_reader_should_split_author_and_text(self):
        """阅读器标题行拆出作者与推文。"""
        content = 'Title: Jane Dev on X: "Hello "quoted" world" / X\n\nURL Source: https://x.com/...'
        assert parse_reader(content) == ('Hello "quoted" world', "Jane Dev")

    def test_parse_reader_should_fall_back_to_markdown_body(self):
        """没有标题行时取正文第一行。"""
        content = "URL Source: https://x.com/a\nMarkdown Content:\n\n  First line of tweet\nmore"
        assert parse_reader(content) == ("First line of tweet", "")

    def test_parse_nitter_should_read_fullname_and_content(self):
        """Nitter 页面取全名与推文内容。"""
        page = (
            '<a class="fullname" href="/jane" title="Jane Dev">Jane Dev</a>'
            '<div class="tweet-content media-body" dir="auto">Nitter <b>text</b></div>'
        )
        assert parse_nitter(page) == ("Nitter text", "Jane Dev")

    def test_parse_meta_should_unquote_og_title(self):
        """og:title 形如 “X on X: "..."” 时取引号内文字。"""
        page = '<meta property="og:title" content="Jane Dev on X: &quot;Meta text&quot;">'
        assert parse_meta(page) == ("Meta text", "Jane Dev")


@pytest.mark.unit
class Describe_TwitterHandler:
    def test_given_oembed_should_compose_author_and_text(self, make_env):
        """oEmbed 成功时组合为 作者: "推文"。"""
        router = MockRouter({OEMBED: oembed(EMBED_HTML)})
        result = asyncio.run(TwitterHandler().fetch_title(URL, make_env(router)))
        assert result.title == 'Jane Dev: "Shipping the new parser today & it is fast"'
        assert result.author == "Jane Dev"
        req = router.requests[0]
        assert req.url.params["url"] == URL
        assert req.url.params["omit_script"] == "true"

    def test_given_linked_page_should_prefer_its_title(self, make_env):
        """推文带链接时优先使用链接页面标题。"""
        snippet = '<blockquote><p>must read <a href="https://t.co/AbC123">example.com/post</a></p>&mdash; Jane</blockquote>'
        router = MockRouter({
            OEMBED: oembed(snippet),
            "https://t.co/AbC123": html('<meta property="og:title" content="The Linked Article">'),
        })
        result = asyncio.run(TwitterHandler().fetch_title(URL, make_env(router)))
        assert result.title == 'Jane Dev: "The Linked Article"'

    def test_given_linked_page_failure_should_keep_tweet_text(self, make_env):
        """链接页面失败时保留推文本身。"""
        snippet = '<blockquote><p>must read <a href="https://t.co/AbC123">example.com/post</a></p>&mdash; Jane</blockquote>'
        router = MockRouter({OEMBED: oembed(snippet)})
        result = asyncio.run(TwitterHandler().fetch_title(URL, make_env(router)))
        assert result.title == 'Jane Dev: "must read example.com/post"'

    def test_given_long_tweet_should_truncate_to_100_chars(self, make_env):
        """超过 100 字的推文截断并加省略号。"""
        long_text = "a" * 150
        router = MockRouter({OEMBED: oembed(f"<p>{long_text}</p>&mdash; Jane")})
        result = asyncio.run(TwitterHandler().fetch_title(URL, make_env(router)))
        assert result.title == f'Jane Dev: "{"a" * 100}..."'

    def test_given_every_strategy_failing_should_return_null(self, make_env):
        """oEmbed 404 且其余策略全部失败时返回空标题。"""
        router = MockRouter({OEMBED: httpx.Response(404, json={})})
        result = asyncio.run(TwitterHandler().fetch_title(URL, make_env(router)))
        assert result.title is None
        assert result.author == ""
        assert [e.split(":")[0] for e in result.errors] == [
            "twitter_oembed", "reader", "twitter_nitter", "twitter_meta",
        ]
        assert NITTER in router.urls()

    def test_given_oembed_failure_should_use_reader(self, make_env):
        """oEmbed 失败后使用阅读器结果。"""
        router = MockRouter({READER: text('Title: Jane Dev on X: "via reader" / X\n')})
        result = asyncio.run(TwitterHandler().fetch_title(URL, make_env(router)))
        assert result.title == 'Jane Dev: "via reader"'
        assert result.method == "twitter_reader"

    def test_given_only_nitter_should_use_mirror(self, make_env):
        """只有镜像站可用时使用镜像结果。"""
        page = '<a class="fullname">Jane Dev</a><div class="tweet-content">from nitter</div>'
        router = MockRouter({NITTER: html(page)})
        result = asyncio.run(TwitterHandler().fetch_title(URL, make_env(router)))
        assert result.title == 'Jane Dev: "from nitter"'

    def test_given_bare_x_title_should_be_rejected(self, make_env):
        """标题仅为 “X” 时视为占位，继续下一策略。"""
        router = MockRouter({
            OEMBED: oembed("<p>X</p>&mdash; Jane"),
            READER: text('Title: Jane Dev on X: "real" / X'),
        })
        result = asyncio.run(TwitterHandler().fetch_title(URL, make_env(router)))
        assert result.title == 'Jane Dev: "real"'

    def test_native_id_should_come_from_status_path(self):
        """推文 ID 取自 /status/ 路径。"""
        handler = TwitterHandler()
        assert handler.native_id("https://mobile.twitter.com/u/status/987?s=20") == "987"
        assert handler.cache_key(URL) == "twitter:12345"
        assert handler.native_id("https://x.com/home") is None

    def test_can_handle_should_not_match_lookalike_hosts(self):
        """box.com 之类的域名不应被识别为 X。"""
        handler = TwitterHandler()
        assert handler.can_handle("https://mobile.twitter.com/u/status/1")
        assert handler.can_handle(URL)
        assert not handler.can_handle("https://box.com/file/1")
