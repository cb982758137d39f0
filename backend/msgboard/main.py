"""
API: account registration/login and token issuance for the message board.
"""
from __future__ import annotations

import time
from typing import Callable

from fastapi import FastAPI

from msgboard.core.logging import setup_logging
from msgboard.core.settings import settings
from msgboard.core.tokens import TokenConfig, TokenIssuer, TokenVerifier
from msgboard.db.database import Base, engine
from msgboard.db import models  # noqa: F401 — registers tables in Base.metadata
from msgboard.routes.health import router as health_router
from msgboard.routes.user import router as user_router


def create_app(
    token_config: TokenConfig | None = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    setup_logging(settings.log_level)

    app = FastAPI(title="Message Board API")

    Base.metadata.create_all(bind=engine)

    # one immutable config shared by issuer and verifier
    config = token_config or TokenConfig.from_settings(settings)
    app.state.token_issuer = TokenIssuer(config, clock=clock)
    app.state.token_verifier = TokenVerifier(config, clock=clock)

    app.include_router(health_router)
    app.include_router(user_router)
    return app


app = create_app()
