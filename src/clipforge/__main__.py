"""Run the ClipForge API with uvicorn."""

import uvicorn

from .api.main import create_app
from .infrastructure.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
