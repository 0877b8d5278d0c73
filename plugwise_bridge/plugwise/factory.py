"""Factory function for creating Plugwise clients."""

import logging
from typing import TYPE_CHECKING

from .base import BasePlugwiseClient
from .client import PlugwiseClient

if TYPE_CHECKING:
    from ..config import PlugwiseConfig


def create_plugwise_client(config: "PlugwiseConfig") -> BasePlugwiseClient:
    """Create a Plugwise client from configuration.

    Args:
        config: PlugwiseConfig object (use AppConfig.from_env().plugwise)

    Returns:
        PlugwiseClient instance

    Raises:
        ValueError: If the gateway password is missing
    """
    if not config.password:
        raise ValueError("Plugwise password is required")

    logging.getLogger(__name__).info(f"Creating Plugwise client for {config.host}:{config.port}")
    return PlugwiseClient(
        host=config.host,
        password=config.password,
        username=config.username,
        port=config.port,
        timeout=config.timeout,
    )
