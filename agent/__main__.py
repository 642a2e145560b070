"""Run the agent service with uvicorn."""

import uvicorn

from agent.config import settings


def main() -> None:
    """Start the agent HTTP server."""
    uvicorn.run("agent.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
