"""
Trigger Actions
===============
What happens when the monitor reports sustained low bandwidth.

The monitor itself only emits BelowThreshold; this module is the
collaborator that turns it into a host shutdown (or, in testing mode,
into a report).
"""

import sys
import logging
import subprocess
from typing import Callable, Optional

from .models import BelowThreshold
from .utils import Console

logger = logging.getLogger(__name__)


def default_shutdown_command(platform: str = sys.platform) -> list[str]:
    """Immediate power-off command for the given platform."""
    if platform.startswith("win"):
        return ["shutdown", "/s", "/t", "0"]
    return ["shutdown", "-h", "now"]


class ShutdownAction:
    """
    Callable trigger handler.

    Returns True when the shutdown command was launched.
    """

    def __init__(self, command: Optional[list] = None,
                 runner: Callable = subprocess.run):
        self.command = list(command) if command else default_shutdown_command()
        self.runner = runner

    def __call__(self, event: BelowThreshold) -> bool:
        if event.testing_mode:
            logger.info(f"Testing mode: shutdown suppressed (average {event.average:.1f} KB/s)")
            Console.print_info("[TEST MODE] Shutdown triggered.")
            return False

        logger.warning(f"Running shutdown command: {' '.join(self.command)}")
        try:
            self.runner(self.command, check=False)
        except OSError as e:
            logger.error(f"Shutdown command failed: {e}")
            Console.print_error(f"Shutdown command failed: {e}")
            return False

        return True
