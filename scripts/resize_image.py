"""Create (or reuse) a resized derivative from the command line, or check the backends."""

from __future__ import annotations

import argparse
import asyncio
import sys

from imagecache import ImageEncoding, ResizeOrchestrator, get_settings
from imagecache.integrations import run_all_checks
from imagecache.monitoring.logging import configure_logging


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("source", nargs="?", help="Source image path relative to IMAGECACHE_ROOT")
    parser.add_argument("--width", type=int, default=0)
    parser.add_argument("--height", type=int, default=0)
    parser.add_argument(
        "--type",
        dest="encoding",
        default=ImageEncoding.WEBP.value,
        choices=[encoding.value for encoding in ImageEncoding],
    )
    parser.add_argument("--quality", type=int, default=80)
    parser.add_argument("--check", action="store_true", help="Report which backends are usable and exit")
    args = parser.parse_args(argv)
    if not args.check and args.source is None:
        parser.error("source is required unless --check is given")
    return args


async def _check() -> int:
    results = await run_all_checks()
    for result in results:
        status = "✅" if result.success else "❌"
        print(f"{status} {result.name}: {result.message}")
    return 0 if any(result.success for result in results) else 1


async def _run(args: argparse.Namespace) -> int:
    if args.check:
        return await _check()

    orchestrator = ResizeOrchestrator(get_settings())
    try:
        outcome = await orchestrator.resize_image(
            args.source,
            width=args.width,
            height=args.height,
            encoding=args.encoding,
            quality=args.quality,
        )
    finally:
        await orchestrator.close()

    if outcome is None:
        print(f"❌ Could not resize {args.source}")
        return 1
    source = "cache" if outcome.from_cache else outcome.backend
    print(f"✅ {outcome.relative_path} ({outcome.width}x{outcome.height}, {source})")
    return 0


def main(argv: list[str] | None = None) -> None:
    configure_logging()
    sys.exit(asyncio.run(_run(_parse_args(argv))))


if __name__ == "__main__":
    main()
