"""HTTP API for health and metrics endpoints."""

import time
from typing import TYPE_CHECKING, Optional

from fastapi import FastAPI

from . import __version__
from .mqtt import PlugwiseMQTTBridge

if TYPE_CHECKING:
    from .plugwise import PollingManager

SERVICE_NAME = "plugwise-mqtt-bridge"


class PlugwiseHTTPAPI:
    """HTTP API for liveness, readiness and metrics probes."""

    def __init__(self, mqtt_bridge: PlugwiseMQTTBridge, poller: Optional["PollingManager"] = None):
        """Initialize the HTTP API.

        Args:
            mqtt_bridge: The MQTT bridge instance
            poller: Plugwise polling manager, if polling is enabled
        """
        self.mqtt_bridge = mqtt_bridge
        self.poller = poller
        self.start_time = time.time()
        self.app = FastAPI(
            title="Plugwise MQTT Bridge",
            description="Health and metrics endpoints for the Plugwise MQTT Bridge",
            version=__version__,
        )

        self._setup_routes()

    def _setup_routes(self):
        """Set up FastAPI routes."""

        @self.app.get("/health")
        async def health_check():
            """Liveness probe."""
            return {"status": "healthy", "service": SERVICE_NAME}

        @self.app.get("/ready")
        async def readiness_check():
            """Readiness probe: ready once connected and the action lookup is built."""
            mqtt_connected = self.mqtt_bridge.is_connected()
            lookup_ready = self.mqtt_bridge.action_lookup is not None

            if mqtt_connected and lookup_ready:
                return {"status": "ready", "mqtt_connected": True}
            else:
                return {"status": "not ready", "mqtt_connected": mqtt_connected}

        @self.app.get("/metrics")
        async def metrics():
            """Basic metrics endpoint for monitoring."""
            uptime = time.time() - self.start_time
            lookup = self.mqtt_bridge.action_lookup

            return {
                "uptime_seconds": round(uptime, 2),
                "mqtt_connected": self.mqtt_bridge.is_connected(),
                "action_topics": len(lookup) if lookup is not None else 0,
                "polls": self.poller.poll_count if self.poller is not None else 0,
                "counters": dict(self.mqtt_bridge.stats),
                "dry_run": self.mqtt_bridge.config.mqtt.dry_run,
                "service": SERVICE_NAME,
                "version": __version__,
            }


def create_app(mqtt_bridge: PlugwiseMQTTBridge, poller: Optional["PollingManager"] = None) -> FastAPI:
    """Create FastAPI application instance.

    Args:
        mqtt_bridge: The MQTT bridge instance
        poller: Plugwise polling manager (optional)

    Returns:
        FastAPI application
    """
    api = PlugwiseHTTPAPI(mqtt_bridge, poller)
    return api.app
