import json

import pytest
from conftest import MockRouter, html

from zapkit.cli import format_brief, main
from zapkit.models import Category, Item

WECHAT = "https://mp.weixin.qq.com/s/abc123"


@pytest.fixture
def router(monkeypatch):
    r = MockRouter({WECHAT: html('<meta property="og:title" content="Hello World">')})
    monkeypatch.setattr("zapkit.env.new_client", lambda timeout=None: r.client())
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "JINA_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    return r


@pytest.mark.unit
class Describe_format_brief:
    def test_should_join_category_title_note_and_link(self):
        """单行摘要依次包含类别、标题、笔记与链接。"""
        item = Item(content="值得一读", type="link", category=Category.EXTERNAL,
                    title="Hello World", original_url=WECHAT)
        assert format_brief(item) == f'🔗[external] | "Hello World" | 值得一读 | {WECHAT}'


@pytest.mark.unit
class Describe_main:
    def test_given_plain_text_should_print_others(self, router, capsys):
        """纯文本不调用模型时输出 others。"""
        main(["--no-classify", "记得买牙刷"])
        out = capsys.readouterr().out
        assert "[others]" in out
        assert "记得买牙刷" in out
        assert router.requests == []

    def test_given_title_only_should_print_title(self, router, capsys):
        """--title-only 只输出标题。"""
        main(["--title-only", WECHAT])
        assert capsys.readouterr().out.strip() == "Hello World"

    def test_given_title_only_failure_should_exit_1(self, router, capsys):
        """获取不到标题时以 1 退出。"""
        with pytest.raises(SystemExit) as exc:
            main(["-t", "https://gone.example.com/"])
        assert exc.value.code == 1
        assert "未获取到标题" in capsys.readouterr().err

    def test_given_json_should_print_item(self, router, capsys):
        """--json 输出完整条目。"""
        main(["--json", "--no-classify", f"值得一读 {WECHAT}"])
        data = json.loads(capsys.readouterr().out)
        assert data["title"] == "Hello World"
        assert data["content"] == "值得一读"
        assert data["category"] == "external"

    def test_given_batch_file_should_process_each_line(self, router, capsys, tmp_path):
        """批量模式逐行处理并跳过注释。"""
        inbox = tmp_path / "inbox.txt"
        inbox.write_text(f"# 收件箱\n{WECHAT}\n记得买牙刷\n\n", encoding="utf-8")
        main(["--batch", str(inbox), "--no-classify"])
        captured = capsys.readouterr()
        lines = captured.out.strip().splitlines()
        assert len(lines) == 2
        assert '"Hello World"' in lines[0]
        assert "[others]" in lines[1]
        assert "批量处理完成: 2 条" in captured.err

    def test_given_no_input_should_exit_1(self, capsys):
        """没有输入时打印帮助并退出。"""
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1
