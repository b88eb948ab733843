import tomllib
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware
from starlette.concurrency import run_in_threadpool

from crm_api.auth.config import AuthSettings, get_auth_settings
from crm_api.auth.router import router as auth_router
from crm_api.config import AppSettings, get_app_settings
from crm_api.dashboard.router import router as dashboard_router
from crm_api.db.activities.router import router as activities_router
from crm_api.db.companies.router import router as companies_router
from crm_api.db.config import DatabaseSettings, get_db_settings
from crm_api.db.contacts.router import router as contacts_router
from crm_api.db.database import MongoDatabase
from crm_api.db.deals.router import router as deals_router
from crm_api.db.organizations.router import router as organizations_router
from crm_api.db.users.router import router as users_router
from crm_api.exceptions import register_exception_handlers
from crm_api.health import router as health_router
from crm_api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware, limiter
from crm_api.utils.logger import logger

ROUTERS = (
    health_router,
    auth_router,
    contacts_router,
    companies_router,
    deals_router,
    activities_router,
    users_router,
    organizations_router,
    dashboard_router,
)


def get_version() -> str:
    """Get version from pyproject.toml, falling back to the configured one."""
    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    if not pyproject_path.exists():
        return get_app_settings().version
    with open(pyproject_path, "rb") as f:
        data = tomllib.load(f)
    return data["project"]["version"]


def create_app(
    app_settings: AppSettings | None = None,
    db_settings: DatabaseSettings | None = None,
    auth_settings: AuthSettings | None = None,
    database: MongoDatabase | None = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        app_settings: Application settings; read from the environment when omitted
        db_settings: MongoDB settings; read from the environment when omitted
        auth_settings: JWT and hashing settings; read from the environment when omitted
        database: Pre-built adapter, e.g. backed by mongomock in tests

    Returns:
        FastAPI: The configured application
    """
    app_settings = app_settings or get_app_settings()
    auth_settings = auth_settings or get_auth_settings()
    database = database or MongoDatabase(db_settings or get_db_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await run_in_threadpool(database.create_indexes)
        logger.info(
            "CRM API started",
            environment=app_settings.environment.value,
            version=app_settings.version,
        )
        yield
        database.close()
        logger.info("CRM API stopped")

    app = FastAPI(
        title="CRM API",
        description="Multi-tenant CRM API",
        version=get_version(),
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.app_settings = app_settings
    app.state.auth_settings = auth_settings
    app.state.database = database

    limiter.enabled = app_settings.rate_limit_enabled
    app.state.limiter = limiter

    register_exception_handlers(app)

    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in ROUTERS:
        app.include_router(router, prefix="/api")

    @app.get("/")
    def root():
        """Root endpoint."""
        return {"success": True, "message": "CRM API is running"}

    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    settings = get_app_settings()
    uvicorn.run("crm_api.main:create_app", factory=True, host=settings.host, port=settings.port)
