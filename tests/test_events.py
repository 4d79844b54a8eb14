"""Tests for quadplay.events and quadplay.state: observer notifications."""

import threading

from quadplay.constants import Event
from quadplay.events import EventBus
from quadplay.models import Playlist, Track
from quadplay.poller import PositionPoller
from quadplay.state import StateContainer


class TestEventBus:

    def test_subscribers_receive_payload(self):
        bus = EventBus()
        seen = []
        bus.subscribe(Event.ALERT, seen.append)
        bus.emit(Event.ALERT, 'hello')
        bus.emit(Event.STATUS_CHANGED, 'ignored')
        assert seen == ['hello']

    def test_unsubscribe(self):
        bus = EventBus()
        seen = []
        bus.subscribe(Event.ALERT, seen.append)
        bus.unsubscribe(Event.ALERT, seen.append)
        bus.unsubscribe(Event.ALERT, seen.append)
        bus.emit(Event.ALERT, 'hello')
        assert seen == []

    def test_failing_observer_does_not_block_others(self):
        bus = EventBus()
        seen = []

        def broken(_payload):
            raise RuntimeError('boom')

        bus.subscribe(Event.ALERT, broken)
        bus.subscribe(Event.ALERT, seen.append)
        bus.emit(Event.ALERT, 'still delivered')
        assert seen == ['still delivered']


class TestStateContainer:

    def test_changes_are_emitted_once(self):
        state = StateContainer()
        seen = []
        state.bus.subscribe(Event.PLAY_STATE_CHANGED, seen.append)
        state.is_playing = True
        state.is_playing = True
        state.is_playing = False
        assert seen == [True, False]

    def test_track_and_selection_events(self):
        state = StateContainer()
        tracks, selections = [], []
        state.bus.subscribe(Event.TRACK_CHANGED, tracks.append)
        state.bus.subscribe(Event.SELECTION_CHANGED, selections.append)

        track = Track.create('Song', '/song.mp3')
        playlist = Playlist.create('1')
        state.current_track = track
        state.selected_playlist = playlist
        state.current_track = None

        assert tracks == [track, None]
        assert selections == [playlist]

    def test_empty_alert_is_not_emitted(self):
        state = StateContainer()
        seen = []
        state.bus.subscribe(Event.ALERT, seen.append)
        state.alert_message = ''
        state.alert_message = 'Deleted 1 track(s) from Playlist 1'
        assert seen == ['Deleted 1 track(s) from Playlist 1']

    def test_status_emitted_every_time(self):
        state = StateContainer()
        seen = []
        state.bus.subscribe(Event.STATUS_CHANGED, seen.append)
        state.file_status = 'File does not exist'
        state.file_status = 'File does not exist'
        assert len(seen) == 2


class TestPositionPoller:

    def test_ticks_until_stopped(self):
        ticked = threading.Event()
        poller = PositionPoller(ticked.set, interval=0.01)
        poller.start()
        try:
            assert ticked.wait(timeout=2)
            assert poller.running
        finally:
            poller.stop()
        assert not poller.running

    def test_tick_errors_keep_polling(self):
        calls = []
        done = threading.Event()

        def flaky():
            calls.append(1)
            if len(calls) >= 3:
                done.set()
            raise RuntimeError('player gone')

        poller = PositionPoller(flaky, interval=0.01)
        poller.start()
        try:
            assert done.wait(timeout=2)
        finally:
            poller.stop()
