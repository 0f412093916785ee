"""FastAPI entrypoint for the Companion exhibition server."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse, Response

from packages.companion_core.sim.constants import SHUTDOWN_CLOSE_CODE, SHUTDOWN_CLOSE_REASON
from packages.companion_core.sim.hub import Hub

from .routers.ws import router as ws_router
from .services.simulation_clock import SimulationClock
from .settings import load_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("companion_api")

settings = load_settings()

app = FastAPI(title="Companion Exhibition API", version="0.1.0")

_cors_allow_credentials = "*" not in settings.cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=_cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(ws_router)

app.state.settings = settings
app.state.hub = Hub(max_users=settings.max_users)
app.state.clock = None


@app.on_event("startup")
def startup() -> None:
    logger.info("[STARTUP] Companion server starting up at %s", datetime.now(timezone.utc).isoformat())
    clock = SimulationClock(app.state.hub, tick_hz=app.state.settings.tick_hz)
    app.state.clock = clock
    if app.state.settings.autostart_clock:
        clock.start()
    else:
        logger.info("[STARTUP] Simulation clock autostart is disabled")
    logger.info(
        "[STARTUP] Ready: max_users=%d tick_hz=%d",
        app.state.settings.max_users,
        app.state.settings.tick_hz,
    )


@app.on_event("shutdown")
def shutdown() -> None:
    clock = app.state.clock
    if clock is not None:
        clock.stop()
    # Close frames are only queued here. Under uvicorn the sockets may already
    # be going away, so clients can see 1012 instead of 1001.
    closed = app.state.hub.close_all(code=SHUTDOWN_CLOSE_CODE, reason=SHUTDOWN_CLOSE_REASON)
    logger.info("[SHUTDOWN] Closed %d session(s)", closed)


@app.get("/health")
def health() -> dict[str, Any]:
    logger.debug("[HEALTH] Health check requested")
    payload = app.state.hub.status()
    clock = app.state.clock
    payload["clock"] = clock.status() if clock is not None else {"running": False}
    return payload


@app.get("/", include_in_schema=False)
@app.get("/index.html", include_in_schema=False)
def index(request: Request) -> Response:
    path = app.state.settings.index_html_path
    if not path.is_file():
        logger.warning(
            "[INDEX] Client page missing at %s (requested from %s)",
            path,
            request.client.host if request.client else "unknown",
        )
        return PlainTextResponse(f"{path.name} not found", status_code=404)
    return FileResponse(path, media_type="text/html")


def serve() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    serve()
