"""FastAPI application entry point."""

import os
import logging
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

# Must be called before importing modules that read env vars (connection, hasher)
load_dotenv()

from api.models import ErrorDetail
from api.routes import health, users
from utils.logging import setup_structured_logging
from adapter.mongodb.connection import close_client, get_mongodb_client, require_settings, DATABASE_NAME
from adapter.mongodb.indexes import ensure_all_indexes

setup_structured_logging()

logger = logging.getLogger(__name__)

# main.py is at <root>/src/api/main.py
_project_root = Path(__file__).parent.parent.parent
with open(_project_root / "pyproject.toml", "rb") as f:
    VERSION = tomllib.load(f)["project"]["version"]

SERVICE_NAME = "User Service"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    # Missing MONGO_URL / MONGO_DATABASE or a bad MONGO_OPERATION_TIMEOUT aborts startup
    require_settings()

    client = get_mongodb_client()
    if client is None:
        raise RuntimeError("Failed to connect to MongoDB")

    if ensure_all_indexes(client[DATABASE_NAME]):
        logger.info("MongoDB indexes verified/created successfully")
    else:
        logger.warning("Failed to create some MongoDB indexes")

    yield

    close_client()


app = FastAPI(
    title=SERVICE_NAME,
    description="CRUD service for user records with soft delete and CSV import",
    version=VERSION,
    lifespan=lifespan,
)

# "*" disables credentials (browsers reject credentials with a wildcard)
cors_origins_env = os.getenv("CORS_ORIGINS", "*")
if cors_origins_env == "*":
    cors_origins = "*"
    allow_credentials = False
else:
    cors_origins = [origin.strip() for origin in cors_origins_env.split(",")]
    allow_credentials = True
    logger.info(f"CORS configured with specific origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Answer unparseable request bodies with 400 in the standard error shape."""
    detail = ErrorDetail(
        code="VALIDATION_FAILURE",
        message="Invalid user input",
        details=str(exc.errors())[:500],
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail.model_dump()})


app.include_router(users.router)
app.include_router(health.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        access_log=False
    )
