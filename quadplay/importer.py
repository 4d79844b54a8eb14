"""Copies picked audio files into the library directory."""

import logging
import os
import shutil
import tempfile
from pathlib import Path

from quadplay.constants import AUDIO_EXTENSIONS

LOGGER = logging.getLogger(__name__)


def is_audio_file(path: Path) -> bool:
    return path.suffix.lower() in AUDIO_EXTENSIONS


class LibraryImporter:
    """Owns the app-private directory imported tracks are copied into."""

    def __init__(self, library_dir):
        self.library_dir = Path(library_dir).expanduser().absolute()

    def destination_for(self, source: Path) -> Path:
        return self.library_dir / source.name

    def copy_into_library(self, source) -> Path:
        """Copy a file into the library, replacing a same-named copy.

        Returns:
            The path of the library copy.

        Raises:
            OSError: the copy failed.
        """
        source = Path(source)
        self.library_dir.mkdir(parents=True, exist_ok=True)
        destination = self.destination_for(source)

        if destination.exists() and destination.resolve() == source.resolve():
            LOGGER.debug("%s is already in the library", source.name)
            return destination

        # An existing copy is only replaced once the new one is complete.
        fd, tmp_name = tempfile.mkstemp(
            dir=self.library_dir, prefix=".import-", suffix=source.suffix
        )
        os.close(fd)
        try:
            shutil.copy2(source, tmp_name)
            os.replace(tmp_name, destination)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        LOGGER.info("Copied %s to %s", source, destination)
        return destination

    def list_importable(self, directory) -> list:
        """Audio files directly inside a directory, sorted by name."""
        directory = Path(directory)
        try:
            return sorted(
                p for p in directory.iterdir() if p.is_file() and is_audio_file(p)
            )
        except OSError as e:
            LOGGER.error("Failed to read folder %s: %s", directory, e)
            return []
