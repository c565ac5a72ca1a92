"""Run the viewer: ``python -m viewer``."""

import uvicorn

from viewer.config import settings


def main() -> None:
    uvicorn.run("viewer.main:app", host=settings.host, port=settings.port, log_level="warning")


if __name__ == "__main__":
    main()
