import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from .cache import MemoryCache
from .dispatcher import Dispatcher, resolve_redirects
from .env import Env, open_env
from .http import HANDLED_EXCEPTIONS
from .models import Item
from .pipeline import ingest
from .processor import extract_url

logger = logging.getLogger("zapkit")

CATEGORY_ICONS = {
    "ideas": "💡",
    "work": "💼",
    "personal": "🏠",
    "external": "🔗",
    "others": "📝",
}


def format_brief(item: Item) -> str:
    """One-line summary: category, title, note, link."""
    cat = item.category.value
    parts = [f"{CATEGORY_ICONS.get(cat, '')}[{cat}]"]
    if item.title:
        parts.append(f'"{item.title}"')
    if item.content:
        parts.append(item.content.replace("\n", " ")[:60])
    if item.original_url:
        parts.append(item.original_url)
    return " | ".join(parts)


def _print_item(item: Item, as_json: bool):
    if as_json:
        print(json.dumps(item.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(format_brief(item))


async def batch_ingest(path: str, env: Env, as_json: bool = False, auto_classify: bool = True) -> list[Item]:
    with open(path, encoding="utf-8") as f:
        lines = [line.strip() for line in f if line.strip() and not line.startswith("#")]

    dispatcher = Dispatcher()
    items: list[Item] = []
    untitled: list[str] = []
    total = len(lines)
    for i, line in enumerate(lines, 1):
        print(f"[{i}/{total}] 处理中... {line[:60]}", file=sys.stderr)
        item = await ingest(line, env, auto_classify=auto_classify, dispatcher=dispatcher)
        items.append(item)
        if item.type == "link" and not item.title:
            untitled.append(line)
        if not as_json:
            print(format_brief(item))

    if as_json and items:
        print(json.dumps([it.to_dict() for it in items], ensure_ascii=False, indent=2))

    print(f"\n{'═'*40}", file=sys.stderr)
    print(f"  批量处理完成: {total} 条", file=sys.stderr)
    if untitled:
        print(f"  未获取到标题 {len(untitled)} 个:", file=sys.stderr)
        for line in untitled:
            print(f"    - {line[:50]}", file=sys.stderr)
    print(f"{'═'*40}", file=sys.stderr)
    return items


async def _run(args) -> int:
    async with open_env(cache=MemoryCache()) as env:
        if args.batch:
            await batch_ingest(args.batch, env, as_json=args.json, auto_classify=not args.no_classify)
            return 0

        url = extract_url(args.input) or args.input
        if args.resolve:
            resolved, error = await resolve_redirects(url, env)
            print(resolved)
            if error:
                print(f"❌ 跳转解析失败: {error}", file=sys.stderr)
                return 1
            return 0

        if args.title_only:
            result = await Dispatcher().resolve(url, env)
            if args.json:
                print(json.dumps(result.to_dict(debug=args.verbose), ensure_ascii=False, indent=2))
            elif result.ok:
                print(result.title)
            if not result.ok:
                print(f"❌ 未获取到标题: {url}", file=sys.stderr)
                for err in result.errors:
                    print(f"    - {err}", file=sys.stderr)
                return 1
            return 0

        item = await ingest(args.input, env, auto_classify=not args.no_classify)
        _print_item(item, args.json)
        return 0


def main(argv: Optional[list[str]] = None):
    parser = argparse.ArgumentParser(
        description="zapkit - 链接标题解析与内容分类",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
支持平台: 微信公众号 | Twitter/X | 小红书 | 抖音 | 飞书 | 通用网页

示例:
  zapkit "https://mp.weixin.qq.com/s/xxx"
  zapkit "复制后打开小红书 http://xhslink.com/a/xxx" --json
  zapkit "https://x.com/user/status/123" --title-only
  zapkit --batch inbox.txt --no-classify
""",
    )
    parser.add_argument("input", nargs="?", help="链接或任意文本")
    parser.add_argument("--json", "-j", action="store_true", help="JSON 格式输出")
    parser.add_argument("--title-only", "-t", action="store_true", help="只解析链接标题")
    parser.add_argument("--resolve", "-r", action="store_true", help="只跟随跳转，输出最终 URL")
    parser.add_argument("--no-classify", action="store_true", help="不调用模型，使用规则分类")
    parser.add_argument("--batch", "-b", metavar="FILE", help="批量处理: 每行一条输入")
    parser.add_argument("--verbose", "-v", action="store_true", help="详细日志")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
    if args.verbose:
        logger.setLevel(logging.DEBUG)

    if not args.input and not args.batch:
        parser.print_help()
        sys.exit(1)

    try:
        code = asyncio.run(_run(args))
    except (OSError, *HANDLED_EXCEPTIONS) as e:
        print(f"❌ 错误: {e}", file=sys.stderr)
        sys.exit(1)
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
