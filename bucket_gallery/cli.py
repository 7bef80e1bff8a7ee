from __future__ import annotations

import argparse
import asyncio
import json
import logging
import subprocess
import sys

from .config import settings
from .models.listing import GalleryOutcome, STATUS_EMPTY, STATUS_OK
from .services.gallery_service import build_client, load_gallery

EXIT_CODES = {STATUS_OK: 0, STATUS_EMPTY: 1}

def run(cmd: list[str]) -> int:
    print("+", " ".join(cmd))
    return subprocess.call(cmd)

async def _resolve(url: str) -> GalleryOutcome:
    async with build_client() as client:
        return await load_gallery(url, client)

def cmd_resolve(args: argparse.Namespace) -> int:
    outcome = asyncio.run(_resolve(args.url))
    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2))
    elif outcome.ok:
        for image in outcome.images:
            print(f"{image.last_modified.isoformat()}  {image.url}")
    else:
        print(outcome.message, file=sys.stderr)
    return EXIT_CODES.get(outcome.status, 2)

def cmd_serve(args: argparse.Namespace) -> int:
    cmd = [sys.executable, "-m", "uvicorn", "bucket_gallery.main:app", "--host", args.host, "--port", str(args.port)]
    if args.reload:
        cmd.append("--reload")
    return run(cmd)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="galleryctl")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_resolve = sub.add_parser("resolve", help="fetch a bucket listing and print its image URLs")
    p_resolve.add_argument("url")
    p_resolve.add_argument("--json", action="store_true")
    p_resolve.set_defaults(func=cmd_resolve)

    p_serve = sub.add_parser("serve", help="run the gallery web app")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.add_argument("--reload", action="store_true")
    p_serve.set_defaults(func=cmd_serve)

    return parser

def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    return args.func(args)

if __name__ == "__main__":
    raise SystemExit(main())
