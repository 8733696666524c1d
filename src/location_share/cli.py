"""Command line entrypoint for location sharing."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from location_share.adapters.position_sources import ReplayPositionSource
from location_share.app_logging import configure_logging
from location_share.containers import AppContainer, build_container
from location_share.domain.errors import StoreError
from location_share.domain.locations import PositionFix
from location_share.domain.sessions import to_epoch_ms
from location_share.services.store import utc_now
from location_share.services.submitter import SubmitterFlow

EXIT_SUCCESS = 0
EXIT_INVALID = 1
EXIT_INTERRUPTED = 130

_logger = logging.getLogger("location_share.cli")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Share a device location through a time-limited link. "
            "Tracker and submitter must use the same shared store (Supabase) "
            "when they run as separate processes."
        )
    )
    parser.add_argument(
        "--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("track", help="Generate a link and watch for locations.")

    check = commands.add_parser(
        "check", help="Check whether a session link is valid."
    )
    check.add_argument("session")

    submit = commands.add_parser("submit", help="Send fixes for a session.")
    submit.add_argument("session")
    submit.add_argument("--latitude", type=float, required=True)
    submit.add_argument("--longitude", type=float, required=True)
    submit.add_argument("--accuracy", type=float, default=10.0)
    submit.add_argument("--count", type=int, default=1)
    submit.add_argument("--interval", type=float, default=5.0)
    return parser.parse_args(argv)


async def run_track(container: AppContainer) -> int:
    try:
        tracking = await container.tracker_service.generate_link()
        print(f"Send this link to the target device: {tracking.link}")
        print(tracking.status)
        await asyncio.Event().wait()
    finally:
        await container.close_resources()
    return EXIT_SUCCESS


async def run_check(container: AppContainer, session_id: str) -> int:
    try:
        validity = container.session_service.check_validity(session_id)
    finally:
        await container.close_resources()
    if not validity.valid:
        print(f"Link expired or invalid: {validity.message}")
        return EXIT_INVALID
    print(f"Session {session_id} is valid until {validity.session.expires.isoformat()}")
    return EXIT_SUCCESS


async def run_submit(container: AppContainer, args: argparse.Namespace) -> int:
    try:
        validity = container.session_service.check_validity(args.session)
        if not validity.valid:
            print(f"Link expired or invalid: {validity.message}")
            print("Please request a new link from the tracker.")
            return EXIT_INVALID

        start_ms = to_epoch_ms(utc_now())
        fixes = [
            PositionFix(
                latitude=args.latitude,
                longitude=args.longitude,
                accuracy=args.accuracy,
                timestamp=start_ms + int(index * args.interval * 1000),
            )
            for index in range(args.count)
        ]
        source = ReplayPositionSource(fixes=fixes, interval_seconds=args.interval)
        flow = SubmitterFlow(
            session_id=args.session,
            location_service=container.location_service,
            position_source=source,
            timezone=container.settings.display_timezone,
        )
        flow.confirm()
        try:
            await source.drain()
        finally:
            flow.close()
        print(flow.status)
        if flow.detail:
            print(flow.detail)
        return EXIT_SUCCESS
    finally:
        await container.close_resources()


async def run_command(args: argparse.Namespace) -> int:
    container = build_container()
    if args.command == "track":
        return await run_track(container)
    if args.command == "check":
        return await run_check(container, args.session)
    return await run_submit(container, args)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(logging.getLevelName(args.log_level))
    try:
        return asyncio.run(run_command(args))
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    except StoreError:
        _logger.exception("Shared store unavailable")
        return EXIT_INVALID


if __name__ == "__main__":
    raise SystemExit(main())
