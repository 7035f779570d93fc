from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, InterfaceError, TimeoutError as PoolTimeoutError
from showdown.config import settings
from showdown.errors import StorageUnavailable
from showdown.logging_setup import configure_logging
from showdown.routes.system import router as system_router
from showdown.routes.auth import router as auth_router
from showdown.routes.parts import router as parts_router
from showdown.routes.voting import router as voting_router
from showdown.routes.winners import router as winners_router
from showdown.routes.competition import router as competition_router
from showdown.routes.admin import router as admin_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info(
        "startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha,
        competition_start=settings.competition_start_date.isoformat(),
    )
    yield
    # Shutdown
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API: upload parts, vote to qualify, weekly winners",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(system_router)
app.include_router(auth_router)
app.include_router(parts_router)
app.include_router(voting_router)
app.include_router(winners_router)
app.include_router(competition_router)
app.include_router(admin_router)

def _unavailable(detail: str) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": detail}, headers={"Retry-After": "1"})

@app.exception_handler(StorageUnavailable)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailable):
    return _unavailable(exc.detail)

@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
@app.exception_handler(PoolTimeoutError)
async def database_unavailable_handler(request: Request, exc: Exception):
    # every mutating call is idempotent or guarded, so clients may retry
    log.error("storage_unavailable", path=request.url.path, error=str(exc))
    return _unavailable(StorageUnavailable().detail)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    response: Response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    structlog.contextvars.clear_contextvars()
    return response
