"""Tests for quadplay.state_machine: key handling against a fake player."""

import pytest

from quadplay.config import ConfigManager
from quadplay.constants import State
from quadplay.state_machine import StateMachine


def run_keys(controller, keys, config=None):
    machine = StateMachine(config or ConfigManager(), controller, read_key=iter(keys).__next__)
    machine.run()
    return machine


@pytest.fixture
def stocked(controller, source_files):
    controller.select_playlist('1')
    controller.import_files(source_files)
    controller.state.selected_playlist = None
    return controller


class TestStateMachine:

    def test_quit_from_select(self, controller):
        machine = run_keys(controller, ['/'])
        assert machine.current_state == State.QUIT

    def test_selecting_playlist_starts_first_track(self, stocked, audio):
        run_keys(stocked, ['1', '/'])
        playlist = stocked.sequencer.playlist_named('1')
        assert audio.loaded[0].location == playlist.tracks[0].location

    def test_transport_keys(self, stocked):
        seen = []
        stocked.play_track = lambda track: seen.append(track.title) or True
        stocked.state.current_track = stocked.sequencer.playlist_named('1').tracks[0]

        run_keys(stocked, ['1', 'n', 'p', 's', 'l', '/'])

        playlist = stocked.sequencer.playlist_named('1')
        assert playlist.is_shuffling is True
        assert playlist.is_looping is True
        assert seen == ['Bravo.flac', 'Charlie.m4a']

    def test_next_and_pause(self, stocked):
        machine = run_keys(stocked, ['1', '+', ' ', '/'])
        assert machine.current_state == State.QUIT
        assert stocked.state.current_track.title == 'Bravo.flac'
        assert stocked.state.is_playing is False

    def test_import_key(self, controller, source_files):
        config = ConfigManager()
        config.import_dir = source_files[0].parent
        run_keys(controller, ['2', 'i', '/'], config)
        assert len(controller.sequencer.playlist_named('2').tracks) == 3

    def test_delete_key_removes_current(self, stocked):
        run_keys(stocked, ['1', 'd', '/'])
        playlist = stocked.sequencer.playlist_named('1')
        assert [t.title for t in playlist.tracks] == ['Bravo.flac', 'Charlie.m4a']
        assert stocked.state.current_track is None

    def test_invalid_keys_are_ignored(self, stocked):
        machine = run_keys(stocked, ['z', '1', 'q', '/'])
        assert machine.current_state == State.QUIT

    def test_actions_need_a_playlist(self, stocked, audio):
        run_keys(stocked, [' ', 'n', '/'])
        assert audio.loaded == []

    def test_select_key_returns_to_selection(self, stocked):
        run_keys(stocked, ['1', '-', '3', '/'])
        assert stocked.state.selected_playlist.name == '3'

    def test_error_in_state_quits(self, controller):
        def broken():
            raise RuntimeError('terminal gone')

        machine = StateMachine(ConfigManager(), controller, read_key=broken)
        machine.run()
        assert machine.current_state == State.QUIT
