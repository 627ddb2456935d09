"""Entry point for python -m whatsfordinner."""

import uvicorn

from .app import app
from .config import settings


def main() -> None:
    """Run the recipe service."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
