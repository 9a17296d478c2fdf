"""
WhatNext API: FastAPI app factory.

Use: uvicorn server.app:app
Or:  from server import app
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from engine import __version__

from .config import get_config
from .routes import register_routes
from .state import get_state

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")


def create_app() -> FastAPI:
    """Build FastAPI app with CORS, routes, and startup."""
    config = get_config()
    app = FastAPI(
        title="WhatNext API",
        description="Moment-to-recommendation sessions: a few questions in, a movie list out",
        version=__version__,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)

    @app.on_event("startup")
    def _startup_logging():
        ok, errors = config.validate()
        for err in errors:
            print(f"[startup] WARNING: {err}")
        try:
            state = get_state()
        except Exception as e:
            print(f"[startup] ERROR building application state: {e}")
            return
        print("WhatNext API starting...")
        print(f"Session TTL: {state.engine_config.session_ttl_seconds}s")
        print(f"Config valid: {ok}")

    return app


app = create_app()
