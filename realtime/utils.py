from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import WebSocket

from state import ConnectionRegistry

logger = logging.getLogger(__name__)


async def send_json_safe(ws: WebSocket, payload: dict):
  try:
    await ws.send_json(payload)
  except Exception as e:
    logger.debug("send to client failed: %s", e)


async def broadcast_all(registry: ConnectionRegistry, payload: dict):
  for ws in list(registry.ws_by_user.values()):
    await send_json_safe(ws, payload)


class Broadcaster:
  """Ordered outbound sink for engine snapshots.

  `publish` is synchronous so the engine never awaits; payloads are queued
  and sent to every client in publish order by a single pump task.
  """

  def __init__(self, registry: ConnectionRegistry):
    self.registry = registry
    self._queue: Optional[asyncio.Queue] = None
    self._pump: Optional[asyncio.Task] = None

  def publish(self, payload: dict):
    if self._queue is None:
      self._queue = asyncio.Queue()
    self._queue.put_nowait(payload)
    if self._pump is None or self._pump.done():
      self._pump = asyncio.get_running_loop().create_task(self._run())

  async def _run(self):
    while True:
      payload = await self._queue.get()
      await broadcast_all(self.registry, payload)

  async def close(self):
    if self._pump:
      self._pump.cancel()
      try:
        await self._pump
      except asyncio.CancelledError:
        pass
      self._pump = None
