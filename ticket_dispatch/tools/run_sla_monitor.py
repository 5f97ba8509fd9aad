"""Run the SLA monitor outside the API process.

Usage:
    python -m ticket_dispatch.tools.run_sla_monitor          # one scan, then exit
    python -m ticket_dispatch.tools.run_sla_monitor --loop   # scan on the configured interval
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from ticket_dispatch.adapters.persistence.database import engine
from ticket_dispatch.config import settings
from ticket_dispatch.infrastructure import container
from ticket_dispatch.infrastructure.scheduler import SlaScheduler

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(name)s | %(message)s")
logger = logging.getLogger(__name__)


async def _run_once() -> int:
    try:
        report = await container.sla_monitor.tick()
        await container.notifications.drain()
    finally:
        await engine.dispose()
    print(json.dumps(report.summary(), indent=2))
    return 0 if report.ok else 1


async def _run_forever(interval: int) -> None:
    scheduler = SlaScheduler(interval)
    scheduler.start(container.run_scheduled_tick)
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.stop()
        await container.notifications.drain()
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Run the support ticket SLA monitor")
    parser.add_argument(
        "--loop", action="store_true",
        help="Keep running and scan on a fixed interval",
    )
    parser.add_argument(
        "--interval", type=int, default=settings.sla_monitor_interval_seconds,
        help="Seconds between scans with --loop (default: %(default)s)",
    )
    args = parser.parse_args()

    if args.interval < 1:
        logger.error("Interval must be positive")
        sys.exit(2)

    if args.loop:
        try:
            asyncio.run(_run_forever(args.interval))
        except KeyboardInterrupt:
            logger.info("SLA monitor stopped")
    else:
        sys.exit(asyncio.run(_run_once()))


if __name__ == "__main__":
    main()
