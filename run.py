import logging

import uvicorn

from core.config import Settings, load_settings
from main import create_app


def serve(settings: Settings):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    print(f"Starting Game Server Manager on http://{settings.host}:{settings.port} ({settings.panel_backend} backend)")

    # Single worker: registry and settlement timers live in this process
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower()
    )


def main():
    serve(load_settings())


if __name__ == "__main__":
    main()
