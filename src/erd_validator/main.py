"""ERD validator service FastAPI application."""
from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.shared.config import ErdValidatorConfig
from src.shared.constants import ERD_VALIDATOR_SERVICE_NAME, VERSION
from src.shared.errors import register_exception_handlers
from src.shared.logging import TraceIDMiddleware, setup_logging

config = ErdValidatorConfig()
logger = setup_logging(ERD_VALIDATOR_SERVICE_NAME, config.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - record start time and settings."""
    app.state.start_time = time.time()
    app.state.config = config

    logger.info(
        "Service started: name=%s version=%s port=8000",
        ERD_VALIDATOR_SERVICE_NAME, VERSION,
    )
    yield
    logger.info("Service stopped: name=%s", ERD_VALIDATOR_SERVICE_NAME)


app = FastAPI(
    title="ERD Validator Service",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(TraceIDMiddleware)
register_exception_handlers(app)

# Register all routers
from src.erd_validator.routers.health import router as health_router
from src.erd_validator.routers.validation import router as validation_router

app.include_router(health_router)
app.include_router(validation_router)
