from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from arena.api.endpoints import enrollments as enrollment_endpoints
from arena.api.endpoints import leaderboard as leaderboard_endpoints
from arena.api.endpoints import matches as match_endpoints
from arena.api.endpoints import notifications as notification_endpoints
from arena.api.endpoints import tournaments as tournament_endpoints
from arena.core.config import settings
from arena.core.database import init_db
from arena.core.exceptions import ArenaError, ErrorCode
from arena.core.logging_config import clear_context, configure_logging, get_logger

configure_logging(
    log_level=settings.LOG_LEVEL,
    json_logs=settings.JSON_LOGS,
    app_env=settings.APP_ENV,
)
logger = get_logger(__name__)

ERROR_STATUS = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_DECIDED: status.HTTP_409_CONFLICT,
    ErrorCode.CONCURRENT_MODIFICATION: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_ENROLLMENT: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_SLUG: status.HTTP_409_CONFLICT,
    ErrorCode.MISSING_REASON: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.INVALID_AMOUNT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.INVALID_INPUT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.ID_GENERATION_EXHAUSTED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.STORAGE_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info("Initializing database", database_url=settings.DATABASE_URL.split("@")[-1])
    init_db()
    yield
    logger.info("Shutting down")


app = FastAPI(title="RushX Arena API", lifespan=lifespan)


@app.exception_handler(ArenaError)
async def arena_error_handler(request: Request, exc: ArenaError) -> JSONResponse:
    status_code = ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
    log = logger.error if status_code >= 500 else logger.warning
    log("request_failed", code=exc.code.value, message=exc.message, path=request.url.path)
    clear_context()
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# Include routers
app.include_router(tournament_endpoints.router, prefix="/tournaments", tags=["Tournaments"])
app.include_router(enrollment_endpoints.router, tags=["Enrollments"])
app.include_router(match_endpoints.router, prefix="/matches", tags=["Matches"])
app.include_router(leaderboard_endpoints.router, prefix="/leaderboard", tags=["Leaderboard"])
app.include_router(notification_endpoints.router, prefix="/notifications", tags=["Notifications"])


@app.get("/")
async def root():
    return {"message": "RushX Arena API"}


if __name__ == "__main__":
    uvicorn.run("arena.main:app", host="0.0.0.0", port=8000, reload=settings.APP_ENV == "development")
