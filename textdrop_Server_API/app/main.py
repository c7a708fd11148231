# main.py
# Description: This file contains the main FastAPI application, which serves the textdrop share API.
#
# Imports
import logging
import sys
from contextlib import asynccontextmanager
#
# 3rd-party Libraries
from loguru import logger
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
#
# Local Imports
#
# Code Store lifecycle
from textdrop_Server_API.app.api.v1.API_Deps.Code_Store_Deps import (
    get_code_store,
    start_code_store_reaper,
    stop_code_store_reaper
)
#
# Share Endpoint
from textdrop_Server_API.app.api.v1.endpoints.share import (
    router as share_router,
    stats_router as share_stats_router,
    limiter as share_limiter
)
from textdrop_Server_API.app.core.config import ALLOWED_ORIGINS, API_V1_PREFIX, settings
#
########################################################################################################################
#
# Functions:


# --- Loguru Configuration with Intercept Handler ---

# Define a handler class to intercept standard logging messages
class InterceptHandler(logging.Handler):
    def emit(self, record):
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )

# Remove default handler
logger.remove()

logger.add(
    sys.stderr,
    level=settings["LOG_LEVEL"],
    format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    colorize=True,
)

# Configure standard logging to use the InterceptHandler
loggers_to_intercept = ["uvicorn", "uvicorn.error", "uvicorn.access"]
for logger_name in loggers_to_intercept:
    mod_logger = logging.getLogger(logger_name)
    mod_logger.handlers = [InterceptHandler()]
    mod_logger.propagate = False # Prevent messages from reaching the root logger

logger.info("Loguru logger configured with standard logging interception")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Build the shared store up front so config errors surface at startup
    get_code_store()
    start_code_store_reaper()
    yield
    logger.info("App Shutdown: stopping code store reaper")
    stop_code_store_reaper()


app = FastAPI(
    title="textdrop API",
    version="0.1.0",
    description="Share text through short codes that expire after 30 minutes.",
    lifespan=lifespan
)

# Rate limiting for share creation
app.state.limiter = share_limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Use configured origins
origins = ALLOWED_ORIGINS if ALLOWED_ORIGINS else ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {"message": "Welcome to the textdrop API; If you're seeing this, the server is running!"}


# Router for share endpoints
app.include_router(share_router, prefix=f"{API_V1_PREFIX}/share", tags=["share"])
app.include_router(share_stats_router, prefix=f"{API_V1_PREFIX}/stats", tags=["stats"])


# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy"}

#
## End of main.py
########################################################################################################################
