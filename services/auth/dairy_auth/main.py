# main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CollectorRegistry
from prometheus_fastapi_instrumentator import Instrumentator

from dairy_auth.version import VERSION
from dairy_auth.api.v1 import routes_auth, routes_users
from dairy_auth.core.config import Settings, settings as default_settings, validate_runtime_config
from dairy_auth.core.errors import register_exception_handlers
from dairy_auth.core.log import configure_logging
from dairy_auth.db.session import Database
from dairy_auth.services.notifier import LogResetNotifier, ResetNotifier

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    reset_notifier: ResetNotifier | None = None,
) -> FastAPI:
    cfg = settings or default_settings
    app = FastAPI(title='Dairy Auth Service', version=VERSION)
    app.state.settings = cfg
    app.state.database = database
    app.state.reset_notifier = reset_notifier or LogResetNotifier()

    if cfg.METRICS_ENABLED:
        # Instrument the app BEFORE adding routes or middleware
        Instrumentator(registry=CollectorRegistry()).instrument(app).expose(
            app,
            include_in_schema=False,
            endpoint="/auth/metrics",
            should_gzip=True,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    register_exception_handlers(app)

    @app.get('/health')
    def health(): return {'status':'ok'}

    @app.get('/auth/health')
    def auth_health(): return {'status':'ok'}

    @app.get('/v1/_info')
    def info(): return {'service':'auth','version':VERSION}

    @app.on_event("startup")
    def startup_event():
        configure_logging(cfg.LOG_LEVEL)
        validate_runtime_config(cfg)
        if app.state.database is None:
            app.state.database = Database(cfg.DATABASE_DSN)
        if cfg.DB_AUTO_CREATE:
            app.state.database.create_all()
        for route in app.routes:
            if hasattr(route, "methods") and hasattr(route, "path"):
                logger.debug("%s %s", sorted(route.methods), route.path)

    @app.on_event("shutdown")
    def shutdown_event():
        if app.state.database is not None:
            app.state.database.dispose()

    app.include_router(routes_auth.router, prefix='/auth', tags=['auth'])
    app.include_router(routes_users.router, prefix='/users', tags=['users'])
    return app


app = create_app()
