import logging

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from iepsched.config import get_settings
from iepsched.controllers.availability import router as availability_router
from iepsched.controllers.health import router as health_router
from iepsched.controllers.meetings import router as meetings_router
from iepsched.controllers.notifications import router as notifications_router
from iepsched.controllers.team import router as team_router
from iepsched.errors import register_exception_handlers
from iepsched.lifespan import cleanup_resources, setup_resources
from iepsched.middleware import HTTPLogMiddleware


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    resources = await setup_resources()
    try:
        yield
    finally:
        await cleanup_resources(resources)


settings = get_settings()

app = FastAPI(title="IEP Meeting Scheduler API", version="1.0.0", lifespan=lifespan)
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_origin_regex=settings.cors.origins_regex or None,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.debug.request:
    logging.getLogger("iepsched.http").setLevel(logging.DEBUG)
    app.add_middleware(HTTPLogMiddleware)

app.include_router(health_router)
app.include_router(team_router)
app.include_router(availability_router)
app.include_router(meetings_router)
app.include_router(notifications_router)
