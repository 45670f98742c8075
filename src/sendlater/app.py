from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi_pagination import add_pagination
from starlette.middleware.cors import CORSMiddleware

from sendlater import __version__
from sendlater.api.main import api_router
from sendlater.config import get_config
from sendlater.config.main import _lifespan_load_config
from sendlater.db import create_tables
from sendlater.exceptions import SendLaterException, sendlater_exception_handler
from sendlater.logging import init_logger
from sendlater.middleware import LoggingMiddleware
from sendlater.scheduler import shutdown, start_scheduler


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # loading config this must happen first
    _lifespan_load_config()

    create_tables()
    await start_scheduler()
    yield
    await shutdown()


app = FastAPI(
    title="sendlater",
    version=__version__,
    openapi_url=f"{get_config().api_prefix}/openapi.json",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Middleware run outside-in: later lines wrap earlier ones
app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_config().server.base_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Logging is outermost since it also sees the responses of the other middleware
app.add_middleware(LoggingMiddleware, logger=init_logger("requests"))

app.include_router(api_router)
add_pagination(app)

app.add_exception_handler(SendLaterException, sendlater_exception_handler)
