import logging
from typing import Optional

from quadplay.constants import Event
from quadplay.events import EventBus
from quadplay.models import Playlist, Track


LOGGER = logging.getLogger(__name__)


class StateContainer:
    """Observable player state; every change is logged and emitted"""
    def __init__(self, bus: Optional[EventBus] = None):
        self.bus = bus or EventBus()

        self._current_track: Optional[Track] = None
        self._selected_playlist: Optional[Playlist] = None
        self._is_playing = False
        self._current_time = 0.0
        self._duration: Optional[float] = None
        self._file_status = ""
        self._alert_message = ""

    @property
    def current_track(self):
        return self._current_track

    @current_track.setter
    def current_track(self, value):
        if value == self._current_track:
            return
        self._current_track = value
        LOGGER.info("Current track changed to %s", value.title if value else None)
        self.bus.emit(Event.TRACK_CHANGED, value)

    @property
    def selected_playlist(self):
        return self._selected_playlist

    @selected_playlist.setter
    def selected_playlist(self, value):
        if value is self._selected_playlist:
            return
        self._selected_playlist = value
        LOGGER.info("Selected Playlist changed to %s", value.name if value else None)
        self.bus.emit(Event.SELECTION_CHANGED, value)

    @property
    def is_playing(self):
        return self._is_playing

    @is_playing.setter
    def is_playing(self, value):
        if value == self._is_playing:
            return
        self._is_playing = value
        LOGGER.debug("Playing flag changed to %s", value)
        self.bus.emit(Event.PLAY_STATE_CHANGED, value)

    @property
    def current_time(self):
        return self._current_time

    @current_time.setter
    def current_time(self, value):
        if value == self._current_time:
            return
        self._current_time = value
        self.bus.emit(Event.POSITION_CHANGED, value)

    @property
    def duration(self):
        return self._duration

    @duration.setter
    def duration(self, value):
        if value == self._duration:
            return
        self._duration = value
        LOGGER.debug("Duration changed to %s", value)
        self.bus.emit(Event.DURATION_CHANGED, value)

    @property
    def file_status(self):
        return self._file_status

    @file_status.setter
    def file_status(self, value):
        self._file_status = value
        LOGGER.info("Status: %s", value)
        self.bus.emit(Event.STATUS_CHANGED, value)

    @property
    def alert_message(self):
        return self._alert_message

    @alert_message.setter
    def alert_message(self, value):
        self._alert_message = value
        if value:
            LOGGER.info("Alert: %s", value.replace('\n', ' | '))
            self.bus.emit(Event.ALERT, value)
