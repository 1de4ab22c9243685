from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import Query, WebSocket, WebSocketDisconnect

from domain.engine import MatchEngine
from domain.portfolio import state_payload
from realtime.utils import send_json_safe
from state import ConnectionRegistry, gen_user_id

logger = logging.getLogger(__name__)


def _quantity(msg: dict) -> float:
  try:
    return float(msg.get("qty", 0) or 0)
  except (TypeError, ValueError):
    return 0.0


def dispatch(engine: MatchEngine, uid: str, msg: dict) -> bool:
  """Route one client command to the engine. Unknown types are ignored."""
  mtype = msg.get("type")

  if mtype == "JOIN":
    return engine.join(uid, msg.get("name") or f"User-{uid[:4]}")
  elif mtype == "START_MATCH":
    return engine.start()
  elif mtype == "SELECT_AVATAR":
    return engine.select_avatar(uid, str(msg.get("avatarId")))
  elif mtype == "SELECT_STRATEGY":
    return engine.select_strategy(uid, str(msg.get("strategyId")))
  elif mtype == "BUY":
    return engine.buy(uid, str(msg.get("assetId")), _quantity(msg))
  elif mtype == "SELL":
    return engine.sell(uid, str(msg.get("assetId")), _quantity(msg))
  elif mtype == "USE_POWER_UP":
    return engine.use_power_up(uid, str(msg.get("powerUpId")))
  elif mtype == "RESET":
    engine.request_reset()
    return True
  return False


async def ws_endpoint(ws: WebSocket,
                      userId: Optional[str] = Query(default=None)):
  engine: MatchEngine = ws.app.state.engine
  registry: ConnectionRegistry = ws.app.state.registry

  await ws.accept()
  uid = userId if userId else gen_user_id()
  registry.bind(ws, uid)

  # greet
  await send_json_safe(ws, {"type": "HELLO", "userId": uid})
  await send_json_safe(ws, state_payload(engine.state))

  try:
    while True:
      msg = await ws.receive_json()
      if not isinstance(msg, dict):
        continue
      if msg.get("type") == "PING":
        await send_json_safe(ws, {"type": "PONG", "ts": time.time()})
        continue
      dispatch(engine, uid, msg)

  except WebSocketDisconnect:
    pass
  except ValueError as e:
    logger.debug("closing %s after malformed message: %s", uid, e)
  finally:
    # a reconnect may already have taken over this id
    if registry.release(ws):
      engine.leave(uid)
