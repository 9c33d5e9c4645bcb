import os
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from database import engine, Base
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError, HTTPException as FastAPIHTTPException
from routers import auth, countries, favorites
from services.filters import CountryQueries
from services.gateway import CountryGateway
from services.resource_cache import ResourceCache
from utils.errors import AppError

load_dotenv()

logger = logging.getLogger(__name__)

# Auto-create tables (or manage migrations externally)
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Own one gateway and one resource cache per application instance.
    """
    gateway = CountryGateway()
    app.state.country_queries = CountryQueries(gateway, ResourceCache())
    logger.info("Country gateway ready at %s", gateway.base_url)

    yield

    await gateway.aclose()
    del app.state.country_queries


app = FastAPI(title="Countries Explorer", lifespan=lifespan)

# CORS configuration
origins = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception handler for domain errors (auth, duplicates, missing rows, upstream failures)
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": exc.message},
    )

# Exception handler for Pydantic validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "status": "error",
            "message": "Validation error",
            # ctx may hold exception instances, which are not JSON serializable
            "errors": [
                {k: v for k, v in error.items() if k != "ctx"} for error in exc.errors()
            ],
        },
    )

# Exception handler for HTTPException
@app.exception_handler(FastAPIHTTPException)
async def http_exception_handler(request: Request, exc: FastAPIHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": exc.detail},
    )


@app.get("/health", summary="Liveness probe")
def health():
    return {"status": "ok"}


app.include_router(
    auth.router,
    prefix="/api",
    tags=["auth"],
)

app.include_router(
    favorites.router,
    prefix="/api",
)

app.include_router(
    countries.router,
    prefix="/api",
)
