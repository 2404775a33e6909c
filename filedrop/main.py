import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from filedrop.core.config import Settings, get_settings
from filedrop.core.errors import install_error_handlers
from filedrop.core.logging import setup_logging
from filedrop.models.database import init_engine, make_session_factory
from filedrop.routers import auth, files
from filedrop.storage.blob import BlobStore

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # everything a request touches exists before the first one arrives
        cfg = settings or get_settings()
        setup_logging(cfg.log_level, cfg.log_format)
        engine = init_engine(cfg.database_url)
        app.state.settings = cfg
        app.state.session_factory = make_session_factory(engine)
        app.state.blob_store = BlobStore.from_settings(cfg)
        logger.info("Storing blobs in bucket %s under /%s", cfg.aws_s3_bucket_name, cfg.blob_root)
        try:
            yield
        finally:
            engine.dispose()

    app = FastAPI(title="filedrop", lifespan=lifespan)
    install_error_handlers(app)

    # include our routers
    app.include_router(auth.router)
    app.include_router(files.router)

    @app.get("/", response_class=PlainTextResponse)
    def home():
        return "Server is running"

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
