import logging
from pathlib import Path

from fastapi import FastAPI

from upload_relay.core.config import get_settings
from upload_relay.core.deps import get_pool
from upload_relay.core.logging import configure_logging
from upload_relay.routers.uploads import router as uploads_router

logger = logging.getLogger(__name__)

app = FastAPI(title="Upload Relay")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.on_event("startup")
def on_startup():
    settings = get_settings()
    error_log = configure_logging(settings)
    for root in (settings.save_dir, settings.print_dir):
        Path(root).mkdir(parents=True, exist_ok=True)
    logger.info(
        "Upload relay started: save_dir=%s print_dir=%s error_log=%s",
        settings.save_dir,
        settings.print_dir,
        error_log,
    )


@app.on_event("shutdown")
def on_shutdown():
    get_pool().drain_all()


app.include_router(uploads_router)


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":  # pragma: no cover
    run()
