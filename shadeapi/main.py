from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging
import time

# Pre-startup timing
start_import_time = time.time()

from shadeapi.config import settings
from shadeapi.core.errors import ApiError
from shadeapi.core.responses import api_response

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")

@asynccontextmanager
async def lifespan(app: FastAPI):
    startup_begin = time.time()
    logger.info("🚀 Starting application initialization...")

    from shadeapi.database import connect_to_mongo, close_mongo_connection
    await connect_to_mongo()

    if not settings.OPENROUTER_API_KEY:
        # Not fatal here; the first analysis request fails with a configuration error
        logger.warning("⚠️ OPENROUTER_API_KEY is not set, tooth analysis is unavailable")

    startup_duration = time.time() - startup_begin
    logger.info(f"✅ Application startup complete in {startup_duration:.2f}s")

    yield

    logger.info("🛑 Shutting down application...")
    await close_mongo_connection()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Two embedded images need far more than the framework default bodies
@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > settings.MAX_BODY_BYTES:
        return api_response(413, None, "Request body too large")
    return await call_next(request)

@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return api_response(exc.status_code, None, exc.message, exc.errors)

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return api_response(exc.status_code, None, str(exc.detail))

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    if any(err.get("type") == "json_invalid" for err in exc.errors()):
        return api_response(400, None, "Invalid JSON payload")
    errors =[f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}" for err in exc.errors()]
    return api_response(400, None, "Validation failed", errors)

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return api_response(500, None, "Internal server error")

from shadeapi.routes import analysis, auth, users

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(analysis.router)

@app.get("/", tags=["health"])
async def root():
    return {"message": "Welcome to the Dental Shade Analysis API", "status": "healthy"}

@app.get("/system/health", tags=["health"])
async def system_health():
    from shadeapi.database import get_db
    db = get_db()

    mongo_status = "healthy"
    try:
        await db.command("ping")
    except Exception as e:
        logger.warning(f"MongoDB ping failed: {e}")
        mongo_status = "unhealthy"

    return {
        "app_version": settings.VERSION,
        "mongodb_status": mongo_status,
        "analysis_service_configured": bool(settings.OPENROUTER_API_KEY),
        "api_status": "healthy",
    }

# Calculate and log import time
import_duration = time.time() - start_import_time
logger.info(f"⏱️ Module import time: {import_duration:.2f}s")
