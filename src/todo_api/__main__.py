"""CLI entry point for launching the todo service with uvicorn."""

import uvicorn

from .main import create_app
from .settings import get_settings


def main() -> None:
    """Run the server on the configured host and port."""
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
