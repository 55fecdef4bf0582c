"""Run the daily food need reset once.

Meant for a process host (cron, a platform scheduler) when the in-process
scheduler is disabled with ``NEED_RESET_ENABLED=false``:

    0 * * * * cd /srv/feednet && python scripts/reset_needs.py

Running it more often than daily is safe; it only resets after a local
midnight has passed since the last recorded run.
"""
import sys
import os
sys.path.append(os.getcwd())
import asyncio
import logging

from app.database import dispose_engine, init_models
from app.services import NeedResetScheduler


async def main() -> int:
    await init_models()
    scheduler = NeedResetScheduler()
    try:
        ran = await scheduler.tick()
    finally:
        await dispose_engine()
    print("Reset applied" if ran else "No reset due")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    sys.exit(asyncio.run(main()))
