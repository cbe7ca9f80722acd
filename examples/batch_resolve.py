#!/usr/bin/env python3
"""
批量解析示例 - 从文件读取链接，只解析标题

用法:
    python examples/batch_resolve.py links.txt
    python examples/batch_resolve.py links.txt --json --output results.json
"""
import argparse
import asyncio
import json
import sys

from zapkit import Dispatcher, MemoryCache, open_env


async def run(urls: list[str]) -> list[dict]:
    dispatcher = Dispatcher()
    rows = []
    async with open_env(cache=MemoryCache()) as env:
        for i, url in enumerate(urls, 1):
            print(f"[{i}/{len(urls)}] {url[:60]}...", file=sys.stderr)
            result = await dispatcher.resolve(url, env)
            handler = dispatcher.handler_for(url)
            rows.append({"url": url, "platform": handler.get_name() if handler else None,
                         **result.to_dict(debug=True)})
            if not result.ok:
                print(f"  ❌ {'; '.join(result.errors) or '未获取到标题'}", file=sys.stderr)
    return rows


def main():
    parser = argparse.ArgumentParser(description="批量解析链接标题")
    parser.add_argument("file", help="链接文件（每行一个 URL）")
    parser.add_argument("--json", "-j", action="store_true", help="JSON 输出")
    parser.add_argument("--output", "-o", help="结果写入文件")
    args = parser.parse_args()

    with open(args.file, encoding="utf-8") as f:
        urls = [line.strip() for line in f if line.strip() and not line.startswith("#")]

    print(f"📋 共 {len(urls)} 个链接\n", file=sys.stderr)
    rows = asyncio.run(run(urls))

    for row in rows:
        if args.json:
            print(json.dumps(row, ensure_ascii=False))
        else:
            print(f"[{row['platform']}] {row['title'] or '-'}  {row['url']}")

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(rows, f, ensure_ascii=False, indent=2)

    ok = sum(1 for r in rows if r["title"])
    print(f"\n✅ 完成: {ok}/{len(rows)} 成功", file=sys.stderr)


if __name__ == "__main__":
    main()
