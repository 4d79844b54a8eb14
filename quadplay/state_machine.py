"""State machine implementation."""

import logging
from typing import Callable, Optional

from quadplay.config import ConfigManager
from quadplay.constants import PLAYLIST_NAMES, SPECIAL_ACTIONS, Action, Event, State
from quadplay.controller import PlaybackController, format_time
from quadplay.input_handler import KeyboardPoller

LOGGER = logging.getLogger(__name__)


class StateMachine:
    """Keyboard front end driving the playback controller."""

    def __init__(
        self,
        config: ConfigManager,
        controller: PlaybackController,
        read_key: Optional[Callable[[], str]] = None
    ):
        self.config = config
        self.controller = controller
        self.read_key = read_key or self._wait_for_key
        self.current_state = State.INIT
        self._actions = {
            Action.PLAY_PAUSE: controller.play_pause,
            Action.NEXT: controller.play_next,
            Action.PREVIOUS: controller.play_previous,
            Action.SHUFFLE: controller.toggle_shuffle,
            Action.LOOP: controller.toggle_loop,
            Action.STOP: controller.stop_playback,
            Action.SEEK_BACK: lambda: controller.skip(-self.config.seek_step),
            Action.SEEK_FORWARD: lambda: controller.skip(self.config.seek_step),
            Action.IMPORT: self._import,
            Action.DELETE: self._delete_current,
        }
        controller.bus.subscribe(Event.PLAY_STATE_CHANGED, self._on_play_state_changed)

    def run(self) -> None:
        """Run the application state machine."""
        try:
            while self.current_state != State.QUIT:
                try:
                    self._execute_state()
                except Exception as e:
                    LOGGER.error("Error in state %s: %s", self.current_state, e)
                    self.current_state = State.QUIT
        except KeyboardInterrupt:
            LOGGER.info("Interrupted by user")
        finally:
            self._state_quit()

    def _execute_state(self) -> None:
        """Execute the current state's logic."""
        if self.current_state == State.INIT:
            self._state_init()
        elif self.current_state == State.SELECT:
            self._state_select()
        elif self.current_state == State.PLAY:
            self._state_play()

    def _state_init(self) -> None:
        """Restore the last session."""
        LOGGER.info("Initializing application")
        for playlist in self.controller.playlists:
            LOGGER.info("Playlist %s: %d track(s)", playlist.name, len(playlist.tracks))

        if self.controller.restore_playback_state():
            track = self.controller.state.current_track
            LOGGER.info(
                "Restored %s at %s", track.title,
                format_time(self.controller.state.current_time)
            )
            self.current_state = State.PLAY
        else:
            self.current_state = State.SELECT
        LOGGER.info("State changed to %s", self.current_state)

    def _state_select(self) -> None:
        """Select a playlist."""
        LOGGER.info("Waiting for playlist selection (%s)", ', '.join(PLAYLIST_NAMES))
        playlist = None

        while playlist is None:
            key = self.read_key()

            if key in PLAYLIST_NAMES:
                playlist = self.controller.select_playlist(key)
            elif self._handle_action_key(key):
                return
            elif key:
                LOGGER.warning("Invalid key: %s", key)

        self.current_state = State.PLAY
        LOGGER.info("State changed to %s", self.current_state)

        current = self.controller.state.current_track
        if (current is None or not playlist.contains(current.id)) and playlist.tracks:
            self.controller.play_track(playlist.tracks[0])

    def _state_play(self) -> None:
        """Handle one key while a playlist is selected."""
        key = self.read_key()
        if not key:
            return
        if key in PLAYLIST_NAMES:
            self.controller.select_playlist(key)
        elif not self._handle_action_key(key):
            LOGGER.warning("Invalid key: %s", key)

    def _state_quit(self) -> None:
        """Exit the application."""
        LOGGER.info("Exiting application")
        self.controller.shutdown()

    def _handle_action_key(self, key: str) -> bool:
        """Handle special action keys.

        Returns:
            True if the key was handled, False otherwise.
        """
        action = SPECIAL_ACTIONS.get(key)
        if not action:
            return False

        if action == Action.QUIT:
            self.current_state = State.QUIT
            return True
        if action == Action.SELECT:
            self.current_state = State.SELECT
            return True

        handler = self._actions.get(action)
        if handler is None:
            return False
        if self.controller.state.selected_playlist is None and action != Action.STOP:
            LOGGER.warning("Select a playlist first")
            return True
        handler()
        return True

    def _import(self) -> None:
        report = self.controller.import_directory(self.config.import_dir)
        LOGGER.info(
            "Import finished: %d added, %d duplicate(s), %d failed",
            len(report.added), len(report.duplicates), len(report.failed)
        )

    def _delete_current(self) -> None:
        track = self.controller.state.current_track
        playlist = self.controller.state.selected_playlist
        if track is None or not playlist.contains(track.id):
            LOGGER.warning("Nothing to delete")
            return
        self.controller.delete_tracks({track.id}, playlist)

    def _on_play_state_changed(self, is_playing: bool) -> None:
        state = self.controller.state
        LOGGER.info(
            "%s %s / %s", 'Playing' if is_playing else 'Paused',
            format_time(state.current_time), format_time(state.duration)
        )

    @staticmethod
    def _wait_for_key() -> str:
        """Wait for a key press."""
        with KeyboardPoller() as kp:
            while True:
                key = kp.read_key()
                if key:
                    return key
