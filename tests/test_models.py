"""Tests for quadplay.models: identity and dict conversion."""

import dataclasses

import pytest

from quadplay.models import Playlist, Track


class TestTrack:

    def test_create_assigns_unique_ids(self):
        a = Track.create('Song', '/music/song.mp3')
        b = Track.create('Song', '/music/song.mp3')
        assert a.id != b.id

    def test_is_immutable(self):
        track = Track.create('Song', '/music/song.mp3')
        with pytest.raises(dataclasses.FrozenInstanceError):
            track.title = 'Other'

    def test_dict_conversion(self):
        track = Track.create('Song', '/music/song.mp3')
        assert Track.from_dict(track.to_dict()) == track


class TestPlaylist:

    def test_dict_conversion_keeps_flags_and_order(self):
        playlist = Playlist.create('1')
        playlist.add_track(Track.create('B', '/b.mp3'))
        playlist.add_track(Track.create('A', '/a.mp3'))
        playlist.is_looping = True

        restored = Playlist.from_dict(playlist.to_dict())

        assert restored == playlist
        assert [t.title for t in restored.tracks] == ['B', 'A']
        assert restored.is_looping is True
        assert restored.is_shuffling is False

    def test_from_dict_missing_fields_raises(self):
        with pytest.raises(KeyError):
            Playlist.from_dict({'name': '1'})

    def test_index_of(self):
        playlist = Playlist.create('1')
        track = Track.create('A', '/a.mp3')
        playlist.add_track(track)
        assert playlist.index_of(track.id) == 0
        assert playlist.index_of('missing') is None
        assert playlist.contains(track.id)
