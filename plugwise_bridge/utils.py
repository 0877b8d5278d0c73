"""Process level helpers."""

import logging
import os
import signal

logger = logging.getLogger(__name__)


def send_signal(signal_num: int) -> None:
    """Send a signal to the current process.

    Args:
        signal_num: The signal number to send
    """
    logger.debug(f"Sending signal {signal_num} to process {os.getpid()}")
    os.kill(os.getpid(), signal_num)


def send_sigterm() -> None:
    """Request termination of the application from any thread."""
    send_signal(signal.SIGTERM)
