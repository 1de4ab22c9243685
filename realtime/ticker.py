from __future__ import annotations

import asyncio
import logging
from typing import Optional

from domain.engine import MatchEngine
from domain.phases import TickOutcome

logger = logging.getLogger(__name__)


class MatchTicker:
  """Wall-clock driver: calls `engine.tick()` once per interval.

  There is only ever one ticker task. `start()` cancels the previous task
  before creating a new one, so the pre-match countdown and the round clock
  can never overlap. Deadlines are monotonic; after a stall the ticker
  resyncs instead of firing a burst of catch-up ticks.
  """

  def __init__(self, engine: MatchEngine, interval: float = 1.0):
    self.engine = engine
    self.interval = interval
    self._task: Optional[asyncio.Task] = None

  @property
  def running(self) -> bool:
    return self._task is not None and not self._task.done()

  def start(self):
    self.stop()
    self._task = asyncio.get_running_loop().create_task(self._run())

  def stop(self):
    if self._task is not None:
      self._task.cancel()
      self._task = None

  async def _run(self):
    loop = asyncio.get_running_loop()
    deadline = loop.time()
    while True:
      deadline += self.interval
      delay = deadline - loop.time()
      if delay < 0:
        logger.warning("ticker fell behind by %.2fs, resyncing", -delay)
        deadline = loop.time()
        delay = 0
      await asyncio.sleep(delay)

      outcome = self.engine.tick()
      if outcome == TickOutcome.FINISHED:
        await self.engine.publish_results()
        return
      if outcome == TickOutcome.IDLE:
        return
