import logging
import sys
from contextlib import asynccontextmanager

from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.api.v1 import auth, categories, posts, users

# Ensure app loggers print to stdout so you see them in the terminal
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stdout,
)
logging.getLogger("app").setLevel(logging.DEBUG)
from app.config import settings
from app.core.clock import Clock, utcnow
from app.core.exceptions import BlogError
from app.db.session import async_session_maker, init_db
from app.services.container import build_services
from prometheus_client import make_asgi_app

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db(app.state.session_maker.kw["bind"])
    yield


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if settings.enable_hsts:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


async def blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
    """Map the domain error taxonomy to HTTP status codes."""
    level = logging.WARNING if exc.status_code in (401, 403) else logging.INFO
    logger.log(level, "%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
    clock: Clock = utcnow,
) -> FastAPI:
    """Build the app. The auth core is wired once here; the JWT key material is read exactly once."""
    settings.validate_jwt_config()
    session_maker = session_maker or async_session_maker

    app = FastAPI(
        title="Blog API",
        description="Blog backend: posts, categories, users, JWT sessions with refresh-token rotation",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.session_maker = session_maker
    app.state.services = build_services(settings, session_maker, clock=clock)
    app.add_exception_handler(BlogError, blog_error_handler)
    app.add_middleware(GZipMiddleware, minimum_size=500)

    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()] if settings.cors_origins else ["*"]
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(categories.router, prefix="/api/v1")
    app.include_router(posts.router, prefix="/api/v1")

    app.mount("/metrics", make_asgi_app())

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
