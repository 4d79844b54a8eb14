"""Playback controller: the single owner of the audio handle and playlists."""

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from quadplay.audio import (
    AudioBackend,
    AudioHandle,
    PlaybackError,
    TrackNotFoundError,
    TrackNotPlayableError,
)
from quadplay.constants import (
    LAST_TRACK_ID_KEY,
    LAST_TRACK_PLAYING_KEY,
    LAST_TRACK_TIME_KEY,
    LAUNCHED_BEFORE_KEY,
    PLAYLISTS_KEY,
    POLL_INTERVAL,
    Event,
)
from quadplay.importer import LibraryImporter, is_audio_file
from quadplay.models import Playlist, Track
from quadplay.poller import PositionPoller
from quadplay.sequencer import PlaylistSequencer
from quadplay.state import StateContainer
from quadplay.storage import KeyValueStore

LOGGER = logging.getLogger(__name__)


@dataclass
class ImportReport:
    """Titles sorted by what happened to them during an import."""
    added: List[str] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def format_time(seconds: Optional[float]) -> str:
    """Format seconds as MM:SS."""
    total = int(seconds or 0)
    return f'{total // 60:02d}:{total % 60:02d}'


class PlaybackController:
    """Drives playback for the selected playlist and persists its state.

    All public operations are serialized on one re-entrant lock; the
    position poller and the audio completion callback go through it too.
    """

    def __init__(
        self,
        audio: AudioBackend,
        store: KeyValueStore,
        importer: LibraryImporter,
        state: Optional[StateContainer] = None,
        sequencer: Optional[PlaylistSequencer] = None,
        poll_interval: float = POLL_INTERVAL,
        share_handler: Optional[Callable[[List[str]], None]] = None
    ):
        self.audio = audio
        self.store = store
        self.importer = importer
        self.state = state or StateContainer()
        self.bus = self.state.bus
        self.share_handler = share_handler
        self.was_playing = False

        self._lock = threading.RLock()
        self._handle: Optional[AudioHandle] = None
        self.poller = PositionPoller(self._poll_position, poll_interval)

        self._check_first_launch()
        self.sequencer = sequencer or PlaylistSequencer(self._load_playlists())
        self.restore_last_played()

    @property
    def playlists(self) -> List[Playlist]:
        return self.sequencer.playlists

    @property
    def controls_enabled(self) -> bool:
        """Transport controls only make sense once something is imported."""
        return bool(self.sequencer.all_tracks())

    def all_tracks(self) -> List[Track]:
        return self.sequencer.all_tracks()

    def search(self, query: str) -> List[Track]:
        return self.sequencer.search(self.sequencer.all_tracks(), query)

    def select_playlist(self, name: str) -> Optional[Playlist]:
        with self._lock:
            playlist = self.sequencer.playlist_named(name)
            if playlist is None:
                LOGGER.warning("No playlist named %s", name)
                return None
            self.state.selected_playlist = playlist
            return playlist

    # Playback

    def play_track(self, track: Track) -> bool:
        """Start playing a track, replacing whatever was loaded.

        Returns:
            True if playback started. On failure the status explains why
            and the current track is cleared.
        """
        with self._lock:
            self._release_handle()

            try:
                handle = self.audio.load(track.location)
            except TrackNotFoundError as e:
                LOGGER.warning("%s", e)
                return self._playback_failed("File does not exist")
            except TrackNotPlayableError as e:
                LOGGER.warning("%s", e)
                return self._playback_failed("File is not playable")
            except PlaybackError as e:
                return self._playback_failed(f"Error playing track: {e}")

            try:
                self.audio.play(handle)
            except PlaybackError as e:
                self.audio.stop(handle)
                return self._playback_failed(f"Error playing track: {e}")

            self._attach(handle)
            self.state.current_track = track
            self.state.current_time = 0.0
            self.state.duration = self.audio.duration(handle) or None
            self.state.is_playing = True
            self.poller.start()
            self._save_last_played()
            self.state.file_status = f"Playing track: {track.title}"
            return True

    def play_pause(self) -> None:
        with self._lock:
            handle = self._handle
            try:
                if handle is not None and self.state.is_playing:
                    self.audio.pause(handle)
                    self.state.is_playing = False
                    self._save_last_played()
                elif handle is not None:
                    self.audio.play(handle)
                    self.state.is_playing = True
                    self.poller.start()
                elif self.state.current_track is not None:
                    self.play_track(self.state.current_track)
            except PlaybackError as e:
                self.state.file_status = f"Error playing track: {e}"

    def play_next(self) -> bool:
        with self._lock:
            playlist = self.state.selected_playlist
            current = self.state.current_track
            if playlist is None or current is None:
                return False
            track = self.sequencer.next_track(playlist, current.id)
            if track is None:
                return False
            return self.play_track(track)

    def play_previous(self) -> bool:
        with self._lock:
            playlist = self.state.selected_playlist
            current = self.state.current_track
            if playlist is None or current is None:
                return False
            track = self.sequencer.previous_track(playlist, current.id)
            if track is None:
                return False
            return self.play_track(track)

    def stop_playback(self) -> None:
        with self._lock:
            self._release_handle()
            self.poller.stop()
            self.state.current_track = None
            self.state.current_time = 0.0
            self.state.duration = None
            self.state.is_playing = False

    def seek(self, seconds: float) -> None:
        with self._lock:
            handle = self._handle
            if handle is None:
                return
            seconds = max(0.0, float(seconds))
            if self.state.duration:
                seconds = min(seconds, self.state.duration)
            try:
                self.audio.seek(handle, seconds)
            except PlaybackError as e:
                LOGGER.warning("Seek failed: %s", e)
                return
            self.state.current_time = seconds

    def skip(self, delta: float) -> None:
        """Seek relative to the current position."""
        with self._lock:
            self.seek(self.state.current_time + delta)

    def toggle_shuffle(self) -> Optional[bool]:
        with self._lock:
            playlist = self.state.selected_playlist
            if playlist is None:
                return None
            playlist.is_shuffling = not playlist.is_shuffling
            LOGGER.info("Shuffle %s for playlist %s",
                        'on' if playlist.is_shuffling else 'off', playlist.name)
            self._playlist_changed(playlist)
            return playlist.is_shuffling

    def toggle_loop(self) -> Optional[bool]:
        with self._lock:
            playlist = self.state.selected_playlist
            if playlist is None:
                return None
            playlist.is_looping = not playlist.is_looping
            LOGGER.info("Loop %s for playlist %s",
                        'on' if playlist.is_looping else 'off', playlist.name)
            self._playlist_changed(playlist)
            return playlist.is_looping

    # Membership

    def import_files(self, paths: Iterable, playlist: Optional[Playlist] = None) -> ImportReport:
        """Copy files into the library and add them to a playlist.

        A file that cannot be read or copied is skipped; the rest of the
        batch is still imported. Copies run without holding the lock.
        """
        report = ImportReport()
        with self._lock:
            if playlist is None:
                playlist = self.state.selected_playlist
            if playlist is None:
                LOGGER.warning("No playlist selected for import")
                return report
            self.state.alert_message = ""

        staged = [self._stage_import(Path(path)) for path in paths]

        with self._lock:
            for source, destination, error in staged:
                if error:
                    self.state.file_status = error
                    report.failed.append(source.name)
                    continue

                track = Track.create(title=source.name, location=str(destination))
                if self.sequencer.add_track(playlist, track):
                    report.added.append(track.title)
                    self.state.file_status = "File imported successfully"
                else:
                    report.duplicates.append(track.title)

            message = ""
            if report.added:
                message = f"Added to Playlist {playlist.name}:\n" + "\n".join(report.added)
            if report.duplicates:
                if message:
                    message += "\n\n"
                message += "Duplicates not added:\n" + "\n".join(report.duplicates)
            self.state.alert_message = message

            self._playlist_changed(playlist)
            return report

    def import_directory(self, directory, playlist: Optional[Playlist] = None) -> ImportReport:
        return self.import_files(self.importer.list_importable(directory), playlist)

    def delete_tracks(self, track_ids: Iterable[str], playlist: Optional[Playlist] = None) -> None:
        with self._lock:
            track_ids = set(track_ids)
            if playlist is None:
                playlist = self.state.selected_playlist
            if playlist is None:
                return

            current = self.state.current_track
            if current is not None and current.id in track_ids:
                self.stop_playback()

            self.sequencer.remove_tracks(playlist, track_ids)
            self.state.alert_message = (
                f"Deleted {len(track_ids)} track(s) from Playlist {playlist.name}"
            )
            self._playlist_changed(playlist)

    def locations_for_tracks(
        self, track_ids: Iterable[str], playlist: Optional[Playlist] = None
    ) -> List[str]:
        with self._lock:
            if playlist is None:
                playlist = self.state.selected_playlist
            if playlist is None:
                return []
            return self.sequencer.locations_for(playlist, track_ids)

    def share_tracks(
        self, track_ids: Iterable[str], playlist: Optional[Playlist] = None
    ) -> List[str]:
        """Hand the selected tracks' files to the share handler."""
        locations = self.locations_for_tracks(track_ids, playlist)
        if not locations:
            return locations
        if self.share_handler is None:
            LOGGER.warning("No share handler configured")
            return locations
        self.share_handler(locations)
        return locations

    # Restart recovery

    def restore_last_played(self) -> Optional[Track]:
        """Point the cursor at the track that was playing at last exit."""
        track_id = self.store.load(LAST_TRACK_ID_KEY)
        position = self.store.load(LAST_TRACK_TIME_KEY)
        was_playing = self.store.load(LAST_TRACK_PLAYING_KEY)
        if track_id is None or position is None or was_playing is None:
            return None
        try:
            position = max(0.0, float(position))
        except (TypeError, ValueError) as e:
            LOGGER.warning("Ignoring unreadable last played position: %s", e)
            return None

        with self._lock:
            playlist = self.sequencer.playlist_containing(track_id)
            if playlist is None:
                LOGGER.info("Last played track %s no longer exists", track_id)
                return None
            track = self.sequencer.find_track(track_id)
            self.state.selected_playlist = playlist
            self.state.current_track = track
            self.state.current_time = position
            self.was_playing = bool(was_playing)
            return track

    def restore_playback_state(self) -> bool:
        """Load the restored track paused at its saved position."""
        with self._lock:
            track = self.state.current_track
            if track is None or self._handle is not None:
                return False
            position = self.state.current_time

            try:
                handle = self.audio.load(track.location)
            except TrackNotFoundError:
                return self._playback_failed("File does not exist")
            except TrackNotPlayableError:
                return self._playback_failed("File is not playable")
            except PlaybackError as e:
                return self._playback_failed(f"Error playing track: {e}")

            try:
                self.audio.seek(handle, position)
            except PlaybackError as e:
                LOGGER.warning("Could not restore position: %s", e)
                position = 0.0

            self._attach(handle)
            self.state.duration = self.audio.duration(handle) or None
            self.state.current_time = position
            self.state.is_playing = False
            return True

    def shutdown(self) -> None:
        with self._lock:
            self._save_last_played()
            self.poller.stop()
            self._release_handle()
            self.state.is_playing = False

    # Internals

    def _attach(self, handle: AudioHandle) -> None:
        self._handle = handle
        handle.finished.add_done_callback(
            lambda future: self._on_finished(handle, future)
        )

    def _release_handle(self) -> None:
        handle = self._handle
        self._handle = None
        if handle is not None:
            self.audio.stop(handle)

    def _on_finished(self, handle: AudioHandle, future: Future) -> None:
        completed = future.result()
        with self._lock:
            if handle is not self._handle:
                return
            if completed:
                LOGGER.info("Finished playing %s", handle.location)
                if self.play_next():
                    return
                self._release_handle()
                self.state.is_playing = False
                self.state.current_time = 0.0
            else:
                self._release_handle()
                self.state.is_playing = False
                self.state.file_status = "Playback ended unexpectedly"

    def _stage_import(self, source: Path):
        """Copy one picked file; returns (source, destination, error status)."""
        if not source.is_file():
            return source, None, "Failed to access file"
        if not is_audio_file(source):
            return source, None, f"Not an audio file: {source.name}"
        try:
            return source, self.importer.copy_into_library(source), None
        except OSError as e:
            LOGGER.warning("Failed to import %s: %s", source, e)
            return source, None, f"Error moving file: {e}"

    def _poll_position(self) -> None:
        with self._lock:
            if self._handle is None:
                return
            self.state.current_time = self.audio.elapsed(self._handle)

    def _playback_failed(self, status: str) -> bool:
        self.poller.stop()
        self.state.current_track = None
        self.state.is_playing = False
        self.state.current_time = 0.0
        self.state.duration = None
        self.state.file_status = status
        return False

    def _playlist_changed(self, playlist: Playlist) -> None:
        self.bus.emit(Event.PLAYLIST_CHANGED, playlist)
        self._save_playlists()

    def _check_first_launch(self) -> None:
        if not self.store.load(LAUNCHED_BEFORE_KEY, False):
            LOGGER.info("First launch, clearing stored state")
            self.store.clear()
            self.store.save(LAUNCHED_BEFORE_KEY, True)

    def _load_playlists(self) -> Optional[List[Playlist]]:
        data = self.store.load(PLAYLISTS_KEY)
        if not data:
            return None
        try:
            playlists = [Playlist.from_dict(p) for p in data]
        except (KeyError, TypeError, ValueError) as e:
            LOGGER.warning("Ignoring unreadable playlists: %s", e)
            return None
        LOGGER.info("Loaded %d playlists", len(playlists))
        return playlists

    def _save_playlists(self) -> None:
        self.store.save(PLAYLISTS_KEY, [p.to_dict() for p in self.sequencer.playlists])

    def _save_last_played(self) -> None:
        track = self.state.current_track
        if track is None:
            return
        self.store.save_many({
            LAST_TRACK_ID_KEY: track.id,
            LAST_TRACK_TIME_KEY: self.state.current_time,
            LAST_TRACK_PLAYING_KEY: self.state.is_playing,
        })
