from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from retro.routers import retro as retro_router
from retro.utils.logging_config import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logging.getLogger("retro").info("Retro policy service started.")
    yield
    logging.getLogger("retro").info("Retro policy service shutdown.")


app = FastAPI(
    title="Retro Board",
    description="Presentation policies for real-time retrospectives",
    lifespan=lifespan,
)

app.include_router(retro_router.router)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger = logging.getLogger("retro")
    if exc.status_code >= 500:
        logger.error("HTTP %s error: %s", exc.status_code, exc.detail)
    else:
        logger.info("HTTP %s: %s", exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger = logging.getLogger("retro")
    error_messages = [err["msg"] for err in exc.errors()]
    logger.warning("Validation error: %s", error_messages)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": error_messages},
    )


@app.get("/health", tags=["healthcheck"])
async def health_check():
    return {"status": "healthy"}
