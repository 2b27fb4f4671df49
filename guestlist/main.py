from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from guestlist.cache.service import cache_service
from guestlist.config.database import upgrade_db
from guestlist.config.logging import setup_logging
from guestlist.config.settings import settings
from guestlist.guests.dtos import DuplicateGuestError, GuestNotFoundError, GuestValidationError
from guestlist.guests.routers import router as guests_router
from guestlist.routers.healthz.router import router as healthz_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        await upgrade_db()
    await cache_service.connect()
    yield
    await cache_service.close()


if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        profiles_sample_rate=settings.SENTRY_PROFILES_SAMPLE_RATE,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(transaction_style="endpoint"),
        ],
        send_default_pii=False,
    )

app = FastAPI(
    title="Guest List API",
    description="API for managing event guest lists with audit history",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GuestNotFoundError)
async def guest_not_found_handler(request: Request, exc: GuestNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(DuplicateGuestError)
async def duplicate_guest_handler(request: Request, exc: DuplicateGuestError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(GuestValidationError)
async def guest_validation_handler(request: Request, exc: GuestValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# Include routers
app.include_router(healthz_router, prefix="/healthz", tags=["Healthz"])
app.include_router(guests_router, tags=["Guests"])


@app.get("/", tags=["Root"])
async def root():
    return {"message": "Welcome to the Guest List API"}
