"""Constants and enums for QuadPlay application."""

from enum import Enum


class Action(str, Enum):
    """Playback control actions."""
    PLAY_PAUSE = 'play_pause'
    NEXT = 'next'
    PREVIOUS = 'previous'
    SHUFFLE = 'shuffle'
    LOOP = 'loop'
    STOP = 'stop'
    SEEK_BACK = 'seek_back'
    SEEK_FORWARD = 'seek_forward'
    IMPORT = 'import'
    DELETE = 'delete'
    SELECT = 'select'
    QUIT = 'quit'


class State(str, Enum):
    """Application states."""
    INIT = 'init'
    SELECT = 'select'
    PLAY = 'play'
    QUIT = 'quit'


class Event(str, Enum):
    """Notifications emitted on the event bus."""
    TRACK_CHANGED = 'track_changed'
    PLAY_STATE_CHANGED = 'play_state_changed'
    POSITION_CHANGED = 'position_changed'
    DURATION_CHANGED = 'duration_changed'
    PLAYLIST_CHANGED = 'playlist_changed'
    SELECTION_CHANGED = 'selection_changed'
    STATUS_CHANGED = 'status_changed'
    ALERT = 'alert'


SPECIAL_ACTIONS = {
    ' ': Action.PLAY_PAUSE,
    '+': Action.NEXT,
    'n': Action.NEXT,
    'p': Action.PREVIOUS,
    's': Action.SHUFFLE,
    'l': Action.LOOP,
    'x': Action.STOP,
    ',': Action.SEEK_BACK,
    '.': Action.SEEK_FORWARD,
    'i': Action.IMPORT,
    'd': Action.DELETE,
    '-': Action.SELECT,
    '/': Action.QUIT,
}

SPECIAL_KEYS = list(SPECIAL_ACTIONS.keys())

# Fixed playlist set created on first launch
PLAYLIST_NAMES = ('1', '2', '3', '4')

AUDIO_EXTENSIONS = frozenset({
    '.mp3',
    '.m4a',
    '.aac',
    '.wav',
    '.aiff',
    '.flac',
    '.ogg',
    '.opus',
})

# Key-value store keys
PLAYLISTS_KEY = 'playlists'
LAST_TRACK_ID_KEY = 'last_played_track_id'
LAST_TRACK_TIME_KEY = 'last_played_track_time'
LAST_TRACK_PLAYING_KEY = 'last_played_track_is_playing'
LAUNCHED_BEFORE_KEY = 'has_launched_before'

# Playback settings
POLL_INTERVAL = 0.1
SEEK_STEP = 10.0
