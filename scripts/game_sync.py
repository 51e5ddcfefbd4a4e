#!/usr/bin/env python3
"""Command-line access to a game-configuration bucket.

Usage
-----
Set environment variables and run::

    export SUPABASE_URL="https://<ref>.supabase.co"
    export SUPABASE_SERVICE_ROLE_KEY="..."
    python scripts/game_sync.py save acme draft --body config.json
    python scripts/game_sync.py publish acme --body config.json
    python scripts/game_sync.py make-live acme
    python scripts/game_sync.py recenter acme draft 45.0 -93.0 --mode relative
    python scripts/game_sync.py show acme --channel published
    python scripts/game_sync.py selftest

Every command prints its result as JSON. Errors are printed to stderr
and exit with status 1 (caller input) or 2 (storage/data).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pygamesync import GameSyncClient, GameSyncConfig  # noqa: E402
from pygamesync.exceptions import GameSyncError, GameSyncValidationError  # noqa: E402
from pygamesync.models import RecenterMode  # noqa: E402


def _read_body(path: str | None) -> dict[str, Any]:
    if path is None:
        return {}
    text = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    body = json.loads(text)
    if not isinstance(body, dict):
        raise GameSyncValidationError("Body must be a JSON object", field="body")
    return body


def _dump(value: Any) -> str:
    if hasattr(value, "to_document"):
        value = value.to_document()
    return json.dumps(value, indent=2, ensure_ascii=False)


async def _run(args: argparse.Namespace) -> Any:
    config = GameSyncConfig.from_env()
    async with GameSyncClient(config) as client:
        if args.command == "save":
            return await client.save(args.slug, args.channel, _read_body(args.body), version_id=args.version_id)
        if args.command == "publish":
            return await client.publish(args.slug, _read_body(args.body), version_id=args.version_id)
        if args.command == "make-live":
            return await client.make_live(args.slug, title=args.title)
        if args.command == "recenter":
            center = {"lat": args.lat, "lng": args.lng}
            return await client.recenter(args.slug, args.channel, center, mode=args.mode)
        if args.command == "show":
            if args.version:
                return await client.load_version(args.slug, args.version)
            if args.live:
                return await client.load_live(args.slug)
            if args.channel:
                return await client.load(args.slug, args.channel)
            return await client.get_index(args.slug)
        if args.command == "selftest":
            return await client.selftest()
    raise AssertionError(f"unhandled command {args.command!r}")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage draft/published/live game configurations.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    save = commands.add_parser("save", help="Save a snapshot to a channel")
    save.add_argument("slug")
    save.add_argument("channel", help="draft or published")
    save.add_argument("--body", help="JSON file with the configuration ('-' for stdin)")
    save.add_argument("--version-id", help="Reuse a version id (idempotent retry)")

    publish = commands.add_parser("publish", help="Save a snapshot to the published channel")
    publish.add_argument("slug")
    publish.add_argument("--body", help="JSON file with the configuration ('-' for stdin)")
    publish.add_argument("--version-id", help="Reuse a version id (idempotent retry)")

    make_live = commands.add_parser("make-live", help="Point the live channel at published")
    make_live.add_argument("slug")
    make_live.add_argument("--title", help="Title for a newly created index")

    recenter = commands.add_parser("recenter", help="Move every pin to a new map center")
    recenter.add_argument("slug")
    recenter.add_argument("channel", help="draft or published")
    recenter.add_argument("lat", type=float)
    recenter.add_argument("lng", type=float)
    recenter.add_argument(
        "--mode",
        required=True,
        choices=[mode.value for mode in RecenterMode],
        help="relative keeps the layout, absolute snaps every pin onto the center",
    )

    show = commands.add_parser("show", help="Print the index or a stored document")
    show.add_argument("slug")
    target = show.add_mutually_exclusive_group()
    target.add_argument("--channel", help="Print <slug>/<channel>/current.json")
    target.add_argument("--live", action="store_true", help="Print the live mirror")
    target.add_argument("--version", help="Print a specific snapshot version")

    commands.add_parser("selftest", help="Check configuration and bucket write access")
    return parser


def main() -> int:
    args = _parser().parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        result = asyncio.run(_run(args))
    except (GameSyncValidationError, json.JSONDecodeError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except GameSyncError as exc:
        print(f"error: {type(exc).__name__}: {exc}", file=sys.stderr)
        return 2

    print(_dump(result))
    if args.command == "selftest" and not result.ok:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
