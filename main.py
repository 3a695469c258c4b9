import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from cors_config import add_cors
from database import Base, SessionLocal, engine
from deadlines import seed_default_deadlines
from routers import adr, auth, calendar, chat
from storage import Storage

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    if config.SEED_DEFAULT_DEADLINES:
        db = SessionLocal()
        try:
            seed_default_deadlines(Storage(db))
        finally:
            db.close()
    yield


app = FastAPI(
    title="ADR Reporting Portal API",
    description="Submit adverse drug reaction reports, track regulatory deadlines and ask the pharmacovigilance assistant.",
    version="1.0.0",
    lifespan=lifespan,
)
add_cors(app)


def _field_name(loc) -> str:
    # loc looks like ("body", "suspectedMedications", 0, "name")
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or str(loc[0])


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": _field_name(error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]
    summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
    logger.info("Rejected %s %s: %s", request.method, request.url.path, summary)
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": f"Validation error: {summary}", "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})


app.include_router(adr.router, prefix="/api/adr", tags=["ADR Reports"])
app.include_router(chat.router, prefix="/api", tags=["Assistant"])
app.include_router(calendar.router, prefix="/api/calendar", tags=["Calendar"])
app.include_router(auth.router, prefix="/api/auth", tags=["Users"])


@app.get("/health", summary="Health Check")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
