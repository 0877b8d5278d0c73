"""Base class for Plugwise gateway clients."""

from abc import ABC, abstractmethod
from typing import List, Optional

from .messages import TelemetryMessage


class BasePlugwiseClient(ABC):
    """Abstract device layer used by the MQTT bridge."""

    @abstractmethod
    def set_thermostat(self, appliance_id: str, value: float) -> bool:
        """Change the thermostat setpoint of an appliance."""
        ...

    @abstractmethod
    def get_appliances(self) -> Optional[List[TelemetryMessage]]:
        """Read the current state of every appliance."""
        ...
