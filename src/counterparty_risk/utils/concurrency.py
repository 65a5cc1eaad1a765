"""
Best-effort fan-out helpers.

Joins independently-failable awaitables and returns one SourceResult per
branch. One branch failing never cancels or short-circuits its siblings.
"""

import asyncio
import logging
import time
from typing import Awaitable, Dict, Mapping

from ..models.results import SourceResult

logger = logging.getLogger(__name__)


async def settle(awaitable: Awaitable, name: str = "source") -> SourceResult:
    """Await one branch, capturing any exception as a failed SourceResult"""
    try:
        value = await awaitable
    except Exception as e:
        logger.error(f"{name} failed: {e}")
        return SourceResult.failure(e)
    return SourceResult.success(value)


async def gather_settled(named: Mapping[str, Awaitable]) -> Dict[str, SourceResult]:
    """Run all awaitables concurrently and wait until every one has settled"""
    names = list(named)
    results = await asyncio.gather(*(settle(named[name], name) for name in names))
    return dict(zip(names, results))


class Timer:
    """Wall-clock timer for one analysis run"""

    def __init__(self):
        self.start_time = None
        self.end_time = None

    def start(self):
        self.start_time = time.time()
        self.end_time = None

    def stop(self) -> float:
        if self.start_time is None:
            return 0.0
        self.end_time = time.time()
        return self.end_time - self.start_time

    def elapsed(self) -> float:
        """Elapsed seconds, without stopping"""
        if self.start_time is None:
            return 0.0
        current_time = self.end_time if self.end_time else time.time()
        return current_time - self.start_time

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
