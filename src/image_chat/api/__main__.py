"""Run the API server: ``python -m image_chat.api``."""

import logging

import uvicorn

from image_chat.core.config import settings


def main() -> None:
    logging.basicConfig(
        level=settings.api.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "image_chat.api.server:app",
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.api.log_level,
    )


if __name__ == "__main__":
    main()
