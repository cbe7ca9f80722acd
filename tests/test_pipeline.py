import asyncio

import pytest
from conftest import MockRouter, html

from zapkit.models import Category
from zapkit.pipeline import build_metadata, clean_platform_title, ingest

WECHAT = "https://mp.weixin.qq.com/s/abc123"


@pytest.mark.unit
class Describe_clean_platform_title:
    def test_should_shorten_github_repo_titles(self):
        """GitHub 仓库标题只保留 owner/repo。"""
        title = "GitHub - psf/requests: A simple, yet elegant, HTTP library."
        assert clean_platform_title(title, "https://github.com/psf/requests") == "psf/requests"

    def test_should_strip_known_site_suffixes(self):
        """去掉知乎、飞书等站点后缀。"""
        assert clean_platform_title("如何学习 Python - 知乎", "https://www.zhihu.com/q/1") == "如何学习 Python"
        assert clean_platform_title("专栏文章 - 知乎专栏", "https://zhuanlan.zhihu.com/p/1") == "专栏文章"

    def test_should_leave_other_titles_alone(self):
        """其他标题不变。"""
        assert clean_platform_title("GitHub - not a repo", "https://example.com") == "GitHub - not a repo"


@pytest.mark.unit
class Describe_build_metadata:
    def test_given_plain_text_should_not_fetch(self, make_env):
        """纯文本不发请求。"""
        router = MockRouter()
        meta = asyncio.run(build_metadata("记得买牙刷", make_env(router)))
        assert meta.is_link is False
        assert meta.content == "记得买牙刷"
        assert router.requests == []

    def test_given_unknown_site_should_use_handler_identity(self, make_env):
        """未登记的平台按处理器名称标注。"""
        url = "https://acme.larksuite.com/docx/Zz1"
        router = MockRouter({url: html("<title>Plan</title>")})
        meta = asyncio.run(build_metadata(url, make_env(router)))
        assert (meta.platform, meta.source) == ("feishu", "飞书")
        assert meta.title == "Plan"

    def test_given_generic_page_should_leave_source_empty(self, make_env):
        """通用网页没有平台来源。"""
        url = "https://blog.example.com/a"
        meta = asyncio.run(build_metadata(url, make_env({url: html("<title>Post</title>")})))
        assert meta.platform is None and meta.source is None
        assert meta.title == "Post"


@pytest.mark.unit
class Describe_ingest:
    def test_given_wechat_link_should_build_item(self, make_env):
        """公众号链接生成 external 条目，笔记与标题分离。"""
        env = make_env({WECHAT: html('<meta property="og:title" content="Hello World">')})
        item = asyncio.run(ingest(f"值得一读 {WECHAT}", env, auto_classify=False))
        assert item.to_dict() == {
            "content": "值得一读",
            "type": "link",
            "category": "external",
            "title": "Hello World",
            "source": "微信公众号",
            "originalUrl": WECHAT,
        }

    def test_given_github_link_should_clean_title(self, make_env):
        """GitHub 链接标题被精简。"""
        url = "https://github.com/psf/requests"
        env = make_env({url: html("<title>GitHub - psf/requests: HTTP for Humans</title>")})
        item = asyncio.run(ingest(url, env, auto_classify=False))
        assert item.title == "psf/requests"
        assert item.source == "GitHub"
        assert item.content == ""

    def test_given_plain_text_without_model_should_be_others(self, make_env):
        """纯文本且不调用模型时归为 others。"""
        item = asyncio.run(ingest("记得买牙刷", make_env(), auto_classify=False))
        assert item.category is Category.OTHERS
        assert item.type == "text"
        assert item.content == "记得买牙刷"
        assert item.original_url is None

    def test_given_unreachable_link_should_keep_url_without_title(self, make_env):
        """标题获取失败时条目仍保留链接。"""
        url = "https://gone.example.com/x"
        item = asyncio.run(ingest(url, make_env({}), auto_classify=False))
        assert item.title is None
        assert item.original_url == url
        assert item.category is Category.EXTERNAL
