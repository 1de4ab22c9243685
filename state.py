from __future__ import annotations

import random
import string
from typing import Dict, Optional, Set

from fastapi import WebSocket


class ConnectionRegistry:
    """Who is connected, and under which connection id."""

    def __init__(self):
        self.clients: Set[WebSocket] = set()          # all connected sockets
        self.user_by_ws: Dict[WebSocket, str] = {}    # ws -> userId
        self.ws_by_user: Dict[str, WebSocket] = {}    # userId -> ws

    def bind(self, ws: WebSocket, user_id: str):
        self.clients.add(ws)
        self.user_by_ws[ws] = user_id
        self.ws_by_user[user_id] = ws

    def release(self, ws: WebSocket) -> Optional[str]:
        """Forget `ws`; returns its user id if that id is still bound to it."""
        self.clients.discard(ws)
        uid = self.user_by_ws.pop(ws, None)
        if uid and self.ws_by_user.get(uid) is ws:
            self.ws_by_user.pop(uid, None)
            return uid
        return None


def gen_user_id() -> str:
    """Generate a short opaque connection id, e.g. 'k8z2q1m9d0'."""
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=10))
