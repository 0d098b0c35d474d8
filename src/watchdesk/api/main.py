import asyncio
import contextlib
import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from watchdesk.api.desks import router as desks_router
from watchdesk.api.reports import router as reports_router
from watchdesk.api.schemas.common import ErrorResponse
from watchdesk.container import Container
from watchdesk.db.session import create_tables
from watchdesk.exceptions import StorageError, WatchdeskError
from watchdesk.log import configure_logging

logger = logging.getLogger("watchdesk.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    settings = container.settings()
    configure_logging(settings.log_level)

    if settings.auto_create_tables:
        await create_tables(container.engine())

    sweep_task = None
    if settings.sweep_in_process:
        sweep_task = asyncio.create_task(container.sweeper().run_forever(settings.sweep_interval_seconds))

    yield

    if sweep_task is not None:
        sweep_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweep_task
    await container.engine().dispose()
    await container.frigate_engine().dispose()


app = FastAPI(title="Watchdesk", version="0.1.0", lifespan=lifespan)


def _error(status_code: int, message: str, errors: list[str] | None = None) -> JSONResponse:
    body = ErrorResponse(message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(WatchdeskError)
async def watchdesk_exception_handler(request: Request, exc: WatchdeskError):
    if isinstance(exc, StorageError):
        # Internal detail stays in the log
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc.message)
        return _error(exc.status_code, "Internal storage error")
    return _error(exc.status_code, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        f"{'.'.join(str(part) for part in err['loc'] if part not in ('query', 'body', 'path'))}: {err['msg']}"
        for err in exc.errors()
    ]
    return _error(400, "Validation error", errors)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return _error(500, "Internal server error")


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reports_router)
app.include_router(desks_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
