from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import governance, health, token


def create_app(cors_origins: Optional[List[str]] = None) -> FastAPI:
    app = FastAPI(title="DAO Governor API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(governance.router)
    app.include_router(token.router)
    app.include_router(health.router)

    @app.get("/healthz")
    def healthz() -> Dict[str, Any]:
        return {"ok": True}

    return app


app = create_app()
