"""Periodic Plugwise polling for telemetry and status publication."""

import logging
import threading
from typing import TYPE_CHECKING, Optional

from .messages import STATUS_ONLINE, STATUS_UNAVAILABLE, build_status_message

if TYPE_CHECKING:
    from ..mqtt import PlugwiseMQTTBridge
    from .base import BasePlugwiseClient


class PollingManager:
    """Reads the gateway on a fixed interval and hands the result to the bridge."""

    def __init__(
        self,
        plugwise_client: "BasePlugwiseClient",
        bridge: "PlugwiseMQTTBridge",
        interval_seconds: float,
    ):
        """Initialize the polling manager.

        Args:
            plugwise_client: Device layer to read appliances from
            bridge: MQTT bridge publishing telemetry and status
            interval_seconds: Seconds between polls
        """
        self.plugwise_client = plugwise_client
        self.bridge = bridge
        self.interval_seconds = interval_seconds
        self.poll_count = 0
        self._timer: Optional[threading.Timer] = None
        self._running = False
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Poll immediately, then every interval until stopped."""
        with self._lock:
            if self._running:
                return
            self._running = True
        self.logger.info(f"Polling Plugwise every {self.interval_seconds} seconds")
        self._schedule(0)

    def stop(self) -> None:
        """Cancel the pending poll."""
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        self.logger.info("Plugwise polling stopped")

    def poll_once(self) -> int:
        """Read the gateway once and publish the result.

        Returns:
            Number of telemetry messages handed to the bridge
        """
        appliances = self.plugwise_client.get_appliances()
        self.poll_count += 1

        if appliances is None:
            self.logger.warning("Plugwise gateway unavailable, no telemetry this round")
            self.bridge.publish_status(build_status_message(0, status=STATUS_UNAVAILABLE))
            return 0

        self.bridge.publish_telemetry(appliances)
        self.bridge.publish_status(build_status_message(len(appliances), status=STATUS_ONLINE))
        return len(appliances)

    def _schedule(self, delay: float) -> None:
        with self._lock:
            if not self._running:
                return
            self._timer = threading.Timer(delay, self._run)
            self._timer.daemon = True
            self._timer.start()

    def _run(self) -> None:
        try:
            self.poll_once()
        except Exception as e:
            self.logger.error(f"Error polling Plugwise: {e}", exc_info=True)
        finally:
            self._schedule(self.interval_seconds)
