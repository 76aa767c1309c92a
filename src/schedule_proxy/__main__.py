"""Run the schedule proxy: ``python -m src.schedule_proxy``."""

import uvicorn

from src.schedule_proxy.api import create_app
from src.schedule_proxy.config import get_config


def main() -> None:
    config = get_config()
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
