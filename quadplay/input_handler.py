"""Keyboard input handling."""

import logging
import select
import sys
import termios
import tty
from typing import Optional

LOGGER = logging.getLogger(__name__)


class KeyboardPoller:
    """Context manager for raw keyboard input on Unix/Linux systems."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self.fd: Optional[int] = None
        self.old_settings: Optional[list] = None

    def __enter__(self):
        try:
            self.fd = self.stream.fileno()
            self.old_settings = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
            return self
        except (termios.error, OSError, ValueError) as e:
            LOGGER.error("Failed to initialize keyboard poller: %s", e)
            raise

    def __exit__(self, *args):
        if self.fd is not None and self.old_settings is not None:
            try:
                termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
            except termios.error as e:
                LOGGER.error("Failed to restore terminal settings: %s", e)

    def read_key(self, timeout: float = 0.1) -> str:
        """Return the next key pressed within timeout, or empty string."""
        if self.fd is None:
            return ""
        ready, _, _ = select.select([self.stream], [], [], timeout)
        if not ready:
            return ""
        return self.stream.read(1)
