"""Main application entry point."""

import logging
import sys

import uvicorn

from .config import AppConfig
from .errors import ConnectError, ShutdownError
from .http_api import create_app
from .logger import configure_logging
from .mqtt import PlugwiseMQTTBridge
from .plugwise import PollingManager, create_plugwise_client


def main():
    """Main application entry point."""
    logger = logging.getLogger(__name__)

    config = AppConfig.from_env()
    configure_logging(config)
    logger.info("Configuration loaded successfully")

    plugwise_client = create_plugwise_client(config.plugwise)

    # Single bridge instance shared by the poller and HTTP API
    mqtt_bridge = PlugwiseMQTTBridge(config, plugwise_client)

    try:
        mqtt_bridge.start()
    except ConnectError:
        # Already logged by the bridge
        sys.exit(1)

    poller = PollingManager(plugwise_client, mqtt_bridge, config.plugwise.poll_interval)
    app = create_app(mqtt_bridge, poller)

    try:
        poller.start()
        logger.info(f"Starting HTTP API server on port {config.http_port}")
        uvicorn.run(
            app,
            host="0.0.0.0",
            port=config.http_port,
            log_level=config.log_level.lower()
        )
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        poller.stop()
        try:
            mqtt_bridge.shutdown()
        except ShutdownError:
            sys.exit(1)


if __name__ == "__main__":
    main()
