"""``python -m order_relay`` — serve the relay with uvicorn."""

from __future__ import annotations

import logging

import uvicorn

from .api import create_app
from .bootstrap import OrderRelay
from .config import RelaySettings
from .observability import configure_logging

logger = logging.getLogger("order_relay")


def main() -> None:
    settings = RelaySettings.from_env()
    configure_logging(settings.logging.level, settings.logging.json_output)
    relay = OrderRelay.from_settings(settings)
    app = create_app(relay)
    logger.info("Serving on %s:%s", settings.http.host, settings.http.port)
    uvicorn.run(app, host=settings.http.host, port=settings.http.port, log_config=None)


if __name__ == "__main__":
    main()
