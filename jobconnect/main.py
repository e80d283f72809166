# ========================================
# jobconnect/main.py - APPLICATION ENTRY POINT
# ========================================

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobconnect import __version__
from jobconnect.database import close_repository, init_repository
from jobconnect.exceptions import JobConnectError
from jobconnect.models.base import utcnow

# ===========================
# IMPORT ALL ROUTERS
# ===========================

from jobconnect.routes.user import router as user_router
from jobconnect.routes.job import router as job_router
from jobconnect.routes.application import router as application_router

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("jobconnect")

# ===========================
# CREATE FASTAPI APP
# ===========================

app = FastAPI(
    title="JobConnect API",
    description="Job board backend: job search, job posting, and the application workflow",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ===========================
# CORS MIDDLEWARE
# ===========================
raw_origins = os.getenv("ALLOWED_ORIGINS", "")
origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===========================
# DATABASE EVENTS
# ===========================

@app.on_event("startup")
async def start_db():
    """Pick and connect the storage backend."""
    app.state.repository = await init_repository()
    logger.info("Storage backend: %s", app.state.repository.name)


@app.on_event("shutdown")
async def stop_db():
    repository = getattr(app.state, "repository", None)
    if repository is not None:
        await close_repository(repository)

# ===========================
# ERROR HANDLERS
# ===========================

@app.exception_handler(JobConnectError)
async def handle_domain_error(request: Request, exc: JobConnectError):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Validation failed",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})

# ===========================
# REGISTER ROUTERS
# ===========================

app.include_router(user_router, prefix="/api")
app.include_router(job_router, prefix="/api")
app.include_router(application_router, prefix="/api")

# ===========================
# ROOT ENDPOINTS
# ===========================

@app.get("/")
async def root():
    return {"success": True, "message": "JobConnect API is running!", "version": __version__}


@app.get("/health")
async def health_check():
    repository = getattr(app.state, "repository", None)
    return {
        "status": "OK",
        "storage": repository.name if repository is not None else None,
        "timestamp": utcnow().isoformat(),
    }
