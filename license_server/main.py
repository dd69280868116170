from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from trialguard import crypto
from trialguard.events import configure_logging

from .core.database import create_db_and_tables, make_engine
from .core.settings import Settings, settings
from .trial.router import router as trial_router
from .trial.service import KeyAuthority
from .trial.store import MemoryRevocationStore, SQLRevocationStore

logger = structlog.get_logger("license_server")


def build_authority(config: Settings) -> KeyAuthority:
    """
    Creates the KeyAuthority described by the settings.
    """
    if config.SIGNING_KEY:
        signing_key = crypto.load_signing_key(config.SIGNING_KEY)
    else:
        # in production, load from secure storage!
        signing_key = crypto.generate_signing_key()
        logger.warning("signing_key.generated", detail="SIGNING_KEY not set, grants will not survive a restart")

    if config.DATABASE_URL:
        engine = make_engine(config.DATABASE_URL)
        create_db_and_tables(engine)
        store = SQLRevocationStore(engine)
    else:
        store = MemoryRevocationStore()

    return KeyAuthority(signing_key, store=store, duration_days=config.TRIAL_DURATION_DAYS)


def create_app(authority: KeyAuthority | None = None, admin_key_hash: str | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "authority", None) is None:
            app.state.authority = build_authority(settings)
            app.state.admin_key_hash = settings.ADMIN_KEY_HASH
        if app.state.admin_key_hash is None:
            logger.warning("admin_key.unset", detail="revoke/unrevoke are open to any caller")
        logger.info("license_server.started", public_key=app.state.authority.public_key().hex())
        yield

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.state.authority = authority
    app.state.admin_key_hash = admin_key_hash
    app.include_router(trial_router)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # the rejected input is not echoed back, it may not be encodable
        errors = [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
        return JSONResponse(status_code=422, content={"detail": errors})

    @app.get("/")
    def read_root():
        return {"message": f"Welcome to {settings.PROJECT_NAME}"}

    return app


app = create_app()


def serve():
    import uvicorn

    configure_logging("license_server", settings.LOG_LEVEL)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    serve()
