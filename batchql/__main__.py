"""Run the GraphQL server: ``python -m batchql``."""
from __future__ import annotations

import uvicorn

from .app import configure_logging, create_app
from .config import Settings


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
