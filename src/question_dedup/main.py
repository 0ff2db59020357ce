"""Entrypoint: run the question dedup server."""

import uvicorn

from question_dedup.api.app import create_app
from question_dedup.config.settings import Settings


def main() -> None:
    settings = Settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
