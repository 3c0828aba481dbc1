"""CLI entry point for serving the Todo API with uvicorn."""

import uvicorn

from .settings import get_settings


def main() -> None:
    """Run the server on the configured HOST and PORT."""
    settings = get_settings()
    uvicorn.run(
        "src.todo_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
