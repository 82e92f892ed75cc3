# marketplace/main.py
"""Application factory.

Run with ``uvicorn marketplace.main:create_app --factory`` or
``python -m marketplace.main``.
"""
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

import marketplace.models  # noqa: F401 ensure models are imported so tables are known
from marketplace import crud
from marketplace.api.routes import router as api_router
from marketplace.config import Settings
from marketplace.db import Base, make_engine, make_session_factory
from marketplace.errors import register_error_handlers
from marketplace.identity import IdentityProvider, ManagedAuthClient
from marketplace.middleware import SecurityHeadersMiddleware
from marketplace.utils import logger


def create_app(settings: Optional[Settings] = None, identity: Optional[IdentityProvider] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    engine = make_engine(settings.database_url, settings.db_pool_size, settings.db_max_overflow)
    if identity is None:
        identity = ManagedAuthClient(settings.auth_url, settings.auth_api_key, settings.auth_timeout)

    app = FastAPI(title="Marketplace API", version="1.0.0")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.identity = identity

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(api_router)

    @app.on_event("startup")
    def on_startup_create_tables():
        # Ensure database tables are created on startup
        try:
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as e:
            # migrations may own the schema; keep serving
            logger.error("create_all failed, assuming managed schema: %s", e)
        if settings.seed_categories:
            db = app.state.session_factory()
            try:
                added = crud.seed_categories(db)
                logger.info("Seeded %d categories", added)
            finally:
                db.close()

    @app.on_event("shutdown")
    def on_shutdown():
        identity.close()
        engine.dispose()

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("marketplace.main:create_app", factory=True, host="0.0.0.0", port=int(os.getenv("PORT", "3000")))
