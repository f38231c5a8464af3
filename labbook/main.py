import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models  # noqa: F401 - registers tables on Base
from .config import CORS_ORIGINS, REQUEST_TIMEOUT_SECONDS, SECURITY_HEADERS_ENABLED
from .database import Base, engine, get_db
from .domain.bookings.router import admin_router as admin_bookings_router
from .domain.bookings.router import router as bookings_router
from .domain.catalog.router import labs_router, tests_router
from .domain.partners.router import admin_router as admin_partners_router
from .domain.partners.router import router as partners_router
from .domain.profiles.router import router as profile_router
from .domain.realtime.broker import broker
from .domain.realtime.router import router as realtime_router
from .domain.roles.router import admin_router as admin_users_router
from .domain.roles.router import router as roles_router
from .security_headers import SecurityHeadersMiddleware
from .shared.errors import LabBookError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    await broker.start()

    yield

    await broker.stop()
    logger.info("Application shutting down...")


app = FastAPI(title="Dr. Patho Lab Booking API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(LabBookError)
async def labbook_error_handler(request: Request, exc: LabBookError):
    """Domain failures become {"detail": message} with the error's own status"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {type(exc).__name__}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} - {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"{request.method} {request.url.path} - Database error: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": "Service temporarily unavailable. Please try again."},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors from HTTPBearer to 401 authentication errors
    when the issue is with the Authorization header
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.middleware("http")
async def enforce_request_timeout(request: Request, call_next):
    """Bound every request so a stuck backend surfaces as a 504 instead of a hang"""
    try:
        return await asyncio.wait_for(call_next(request), timeout=REQUEST_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.error(
            f"{request.method} {request.url.path} - Timed out after {REQUEST_TIMEOUT_SECONDS}s"
        )
        return JSONResponse(
            status_code=504,
            content={"detail": "The request took too long. Please try again."},
        )


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {CORS_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(bookings_router)
app.include_router(admin_bookings_router)
app.include_router(labs_router)
app.include_router(tests_router)
app.include_router(roles_router)
app.include_router(admin_users_router)
app.include_router(profile_router)
app.include_router(partners_router)
app.include_router(admin_partners_router)
app.include_router(realtime_router)


@app.get("/")
def root():
    return {"message": "Dr. Patho Lab Booking API is running"}


@app.get("/health")
def health(db: Session = Depends(get_db)):
    """Liveness plus database connectivity"""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"❌ Health check database ping failed: {e}")
        return JSONResponse(status_code=503, content={"status": "unhealthy", "database": "unreachable"})
    return {"status": "healthy", "database": "connected"}
