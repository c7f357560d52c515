import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gallery.core.config import Settings, settings
from gallery.core.errors import GalleryError
from gallery.core.middleware import UploadSizeLimitMiddleware
from gallery.core.logging_config import setup_logging
from gallery.services.storage import MemoryStorage

# Import API routers
from gallery.api import health as health_router
from gallery.api import memories as memories_router

logger = logging.getLogger(__name__)

# Room for multipart boundaries and part headers on top of the file itself
MULTIPART_OVERHEAD = 64 * 1024

NOT_FOUND_MESSAGE = "Không tìm thấy trang"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create the upload directory and print the startup banner.
    """
    app_settings: Settings = app.state.settings
    upload_dir = app.state.storage.ensure_root()

    logger.info("=" * 50)
    logger.info("🚀 KHOẢNH KHẮC TÌNH YÊU")
    logger.info("📍 Server running: http://localhost:%s", app_settings.PORT)
    logger.info("🔗 Health check: http://localhost:%s/health", app_settings.PORT)
    logger.info("📁 Upload directory: %s", upload_dir.resolve())
    logger.info("=" * 50)

    yield

    logger.info("✅ Server stopped")


def find_static_file(static_root: Path, request_path: str) -> Path | None:
    """
    Map an unmatched GET path to a file under static_root.
    Dotfiles (e.g. .env) and anything escaping the root are never served.
    """
    if not request_path:
        return None
    parts = Path(request_path).parts
    if any(part.startswith(".") for part in parts):
        return None

    root = static_root.resolve()
    candidate = root.joinpath(*parts).resolve()
    if root not in candidate.parents or not candidate.is_file():
        return None
    return candidate


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application around an explicit Settings instance.
    All per-process state lives on app.state.
    """
    app_settings = app_settings or settings
    setup_logging(app_settings.LOG_LEVEL)

    app = FastAPI(title="Memory Gallery API", version=app_settings.APP_VERSION, lifespan=lifespan)
    app.state.settings = app_settings
    app.state.storage = MemoryStorage(app_settings.MEDIA_ROOT_PATH, app_settings.MAX_UPLOAD_BYTES)
    app.state.started_at = time.monotonic()

    # Bounds the multipart body while it streams, before Starlette spools it to a temp file
    app.add_middleware(
        UploadSizeLimitMiddleware,
        path="/upload",
        max_body_bytes=app_settings.MAX_UPLOAD_BYTES + MULTIPART_OVERHEAD,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("📥 %s %s", request.method, request.url.path)
        try:
            return await call_next(request)
        except Exception as exc:
            # Keep serving; the failure only ends this request
            logger.exception("❌ Server error on %s %s", request.method, request.url.path)
            return error_response(500, str(exc))

    # Added last so it is outermost and error responses carry CORS headers too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Error handlers ---

    @app.exception_handler(GalleryError)
    async def gallery_error_handler(request: Request, exc: GalleryError):
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            logger.info("❌ 404 - Not found: %s", request.url.path)
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning("❌ Invalid request on %s: %s", request.url.path, exc.errors())
        return error_response(400, "Dữ liệu không hợp lệ")

    # --- API routers ---

    app.include_router(memories_router.router, tags=["Memories"])
    app.include_router(health_router.router, tags=["Health"])

    # Single-page app fallback, registered last so it only sees unmatched paths
    @app.api_route(
        "/{full_path:path}",
        methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
    async def spa_fallback(full_path: str, request: Request):
        if request.method in ("GET", "HEAD"):
            static_file = find_static_file(app_settings.STATIC_ROOT, full_path)
            if static_file is not None:
                return FileResponse(static_file)
            if app_settings.INDEX_PAGE.is_file():
                logger.debug("🔀 Fallback route for: %s", request.url.path)
                return FileResponse(app_settings.INDEX_PAGE)
        logger.info("❌ 404 - Not found: %s", request.url.path)
        return error_response(404, NOT_FOUND_MESSAGE)

    return app


app = create_app()
