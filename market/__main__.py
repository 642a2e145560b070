"""Run the market service with uvicorn."""

import uvicorn

from market.config import settings


def main() -> None:
    """Start the market HTTP server."""
    uvicorn.run("market.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
