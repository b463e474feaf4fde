"""Entrypoint that watches submissions until the judge finishes them."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Sequence

from .errors import ApiError
from .logger import setup_logging
from .models.submission import StatusChange
from .service import AcmojService
from .view import render_status_change

logger = logging.getLogger(__name__)

_IDLE_CHECK_S = 0.5


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acmoj-watch",
        description="Poll ACMOJ submissions and print status changes until they are judged.",
    )
    parser.add_argument("submission_ids", nargs="+", type=int, metavar="ID")
    return parser


async def watch(service: AcmojService, submission_ids: Sequence[int]) -> None:
    def _print_change(change: StatusChange) -> None:
        print(change.message)

    service.monitor.subscribe(_print_change)
    for submission_id in submission_ids:
        try:
            detail = await service.client.get_submission_details(submission_id)
        except ApiError as exc:
            logger.error("Cannot load submission #%s: %s", submission_id, exc.user_message)
            continue
        status = str(detail.get("status") or "pending")
        print(render_status_change(submission_id, status, terminal=False))
        service.monitor.track(submission_id, status)

    while service.monitor.running:
        await asyncio.sleep(_IDLE_CHECK_S)


async def _run(submission_ids: Sequence[int]) -> None:
    async with AcmojService.from_settings() as service:
        await watch(service, submission_ids)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    try:
        asyncio.run(_run(args.submission_ids))
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
