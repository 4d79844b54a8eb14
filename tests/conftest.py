from pathlib import Path

import pytest

from quadplay.audio import (
    AudioBackend,
    AudioHandle,
    PlaybackError,
    TrackNotFoundError,
    TrackNotPlayableError,
)
from quadplay.controller import PlaybackController
from quadplay.importer import LibraryImporter
from quadplay.storage import KeyValueStore


class FakeAudioPlayer(AudioBackend):
    """In-memory backend: files ending in .bad are undecodable."""

    def __init__(self, duration=180.0):
        self.duration_s = duration
        self.loaded = []
        self.playing = None
        self.fail_play = False
        self.positions = {}

    def load(self, location):
        if not Path(location).is_file():
            raise TrackNotFoundError(location)
        if location.endswith('.bad'):
            raise TrackNotPlayableError(location)
        handle = AudioHandle(location, self.duration_s)
        self.loaded.append(handle)
        return handle

    def play(self, handle):
        if self.fail_play:
            raise PlaybackError("device busy")
        self.playing = handle

    def pause(self, handle):
        if self.playing is handle:
            self.playing = None

    def stop(self, handle):
        handle.stopped = True
        if self.playing is handle:
            self.playing = None
        handle.finish(False)

    def elapsed(self, handle):
        return self.positions.get(handle.location, handle.start_at)

    def seek(self, handle, seconds):
        handle.start_at = seconds

    def finish_current(self):
        """Simulate the current track playing to its end."""
        handle = self.playing
        self.playing = None
        handle.finish(True)


@pytest.fixture
def audio():
    return FakeAudioPlayer()


@pytest.fixture
def store(tmp_path):
    return KeyValueStore(tmp_path / 'state.json')


@pytest.fixture
def importer(tmp_path):
    return LibraryImporter(tmp_path / 'library')


@pytest.fixture
def make_controller(audio, store, importer):
    def factory(**kwargs):
        kwargs.setdefault('poll_interval', 60)
        return PlaybackController(audio=audio, store=store, importer=importer, **kwargs)
    return factory


@pytest.fixture
def controller(make_controller):
    ctrl = make_controller()
    yield ctrl
    ctrl.poller.stop()


@pytest.fixture
def source_files(tmp_path):
    """Three audio files outside the library, as picked by a user."""
    src = tmp_path / 'picked'
    src.mkdir()
    paths = []
    for name in ('Alpha.mp3', 'Bravo.flac', 'Charlie.m4a'):
        path = src / name
        path.write_bytes(b'\x00' * 16)
        paths.append(path)
    return paths
