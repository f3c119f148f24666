"""``python -m cobot_dashboard`` — validate configuration, then serve with uvicorn."""

from __future__ import annotations

import logging
import sys

import pydantic
import uvicorn

from cobot_dashboard.config import get_settings

logger = logging.getLogger("cobot_dashboard")


def main() -> None:
    try:
        settings = get_settings()
    except pydantic.ValidationError as exc:
        logging.basicConfig(level=logging.INFO, stream=sys.stderr)
        missing = ", ".join(str(err["loc"][0]).upper() for err in exc.errors())
        logger.error("Invalid configuration, set %s in the environment or .env", missing)
        sys.exit(1)

    uvicorn.run(
        "cobot_dashboard.main:app",
        host=settings.dashboard_host,
        port=settings.dashboard_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
