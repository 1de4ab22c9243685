# main.py
import logging
import random
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
# REST routes
from api.routes import router as api_router
from domain.engine import MatchEngine
from narrative.gemini import build_narrator
from realtime.endpoints import ws_endpoint
from realtime.ticker import MatchTicker
from realtime.utils import Broadcaster
from state import ConnectionRegistry


def create_app() -> FastAPI:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    registry = ConnectionRegistry()
    broadcaster = Broadcaster(registry)
    engine = MatchEngine(
        publish=broadcaster.publish,
        narrator=build_narrator(),
        rng=random.Random(config.MATCH_SEED),
    )
    ticker = MatchTicker(engine, config.TICK_SECONDS)
    engine.attach_clock(ticker)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        ticker.stop()
        await broadcaster.close()

    app = FastAPI(title="Market Match", version="1.0", lifespan=lifespan)
    app.state.registry = registry
    app.state.engine = engine
    app.state.ticker = ticker

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- REST API ---
    app.include_router(api_router)

    # --- WebSockets ---
    app.add_api_websocket_route("/ws", ws_endpoint)

    # --- Healthcheck ---
    @app.get("/health")
    async def health():
        return {"status": "ok", "phase": engine.state.phase.value}

    return app


app = create_app()

# --- Dev runner ---
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
