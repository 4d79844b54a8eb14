"""Package initialization."""

from quadplay.audio import (
    AudioBackend,
    AudioHandle,
    AudioPlayer,
    PlaybackError,
    TrackNotFoundError,
    TrackNotPlayableError,
)
from quadplay.config import ConfigManager
from quadplay.constants import Action, Event, State
from quadplay.controller import ImportReport, PlaybackController, format_time
from quadplay.events import EventBus
from quadplay.importer import LibraryImporter
from quadplay.input_handler import KeyboardPoller
from quadplay.models import Playlist, Track
from quadplay.sequencer import PlaylistSequencer
from quadplay.state import StateContainer
from quadplay.state_machine import StateMachine
from quadplay.storage import KeyValueStore

__all__ = [
    'AudioBackend',
    'AudioHandle',
    'AudioPlayer',
    'PlaybackError',
    'TrackNotFoundError',
    'TrackNotPlayableError',
    'ConfigManager',
    'Action',
    'Event',
    'State',
    'ImportReport',
    'PlaybackController',
    'format_time',
    'EventBus',
    'LibraryImporter',
    'KeyboardPoller',
    'Playlist',
    'Track',
    'PlaylistSequencer',
    'StateContainer',
    'StateMachine',
    'KeyValueStore',
]
