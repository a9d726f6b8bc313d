import uvicorn

from .app.config import load_settings
from .app.log import configure_logging


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    # lifespan="on" makes a failed database connection abort startup with a
    # non-zero exit status instead of serving without storage
    uvicorn.run(
        "ledger_api.app:app",
        host=settings.app_host,
        port=settings.app_port,
        lifespan="on",
        log_config=None,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
