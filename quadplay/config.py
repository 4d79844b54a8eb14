"""Configuration management."""

import logging
from pathlib import Path
from typing import Optional

import yaml

from quadplay.constants import POLL_INTERVAL, SEEK_STEP

LOGGER = logging.getLogger(__name__)


class ConfigManager:
    """Manages application configuration."""

    CONFIG_FILE = 'config.yaml'

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or self.CONFIG_FILE
        self.log_level = 'INFO'
        self.library_dir = Path('./library')
        self.state_file = Path('./state.json')
        self.import_dir = Path('./import')
        self.mpv_path: Optional[str] = None
        self.seek_step = SEEK_STEP
        self.poll_interval = POLL_INTERVAL

    def load(self) -> bool:
        """Load configuration from YAML file.

        Returns:
            True if successful, False otherwise. Defaults are kept on failure.
        """
        try:
            with open(self.config_file) as f:
                config = yaml.safe_load(f)
                if not config:
                    LOGGER.error("Configuration file is empty")
                    return False

            # Load log level
            self.log_level = str(config.get('LogLevel', 'INFO')).upper()
            log_level = getattr(logging, self.log_level, logging.INFO)
            logging.getLogger().setLevel(log_level)
            LOGGER.info("Log level set to %s", self.log_level)

            # Load paths
            self.library_dir = Path(config.get('LibraryDir', self.library_dir))
            self.state_file = Path(config.get('StateFile', self.state_file))
            self.import_dir = Path(config.get('ImportDir', self.import_dir))
            self.mpv_path = config.get('MpvPath', self.mpv_path)

            # Load playback settings
            self.seek_step = float(config.get('SeekStep', self.seek_step))
            self.poll_interval = float(config.get('PollInterval', self.poll_interval))
            if self.poll_interval <= 0:
                LOGGER.warning("PollInterval must be positive, using %s", POLL_INTERVAL)
                self.poll_interval = POLL_INTERVAL

            LOGGER.info("Configuration loaded, library at %s", self.library_dir)
            return True

        except FileNotFoundError:
            LOGGER.error("Configuration file not found: %s", self.config_file)
            return False
        except (yaml.YAMLError, TypeError, ValueError, AttributeError) as e:
            LOGGER.error("Failed to load configuration: %s", e)
            return False
