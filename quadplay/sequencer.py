"""Playlist sequencing: next/previous selection, membership and search."""

import logging
import random
from typing import Iterable, List, Optional

from quadplay.constants import PLAYLIST_NAMES
from quadplay.models import Playlist, Track

LOGGER = logging.getLogger(__name__)


class PlaylistSequencer:
    """Owns the playlist collection and decides which track plays next."""

    def __init__(
        self,
        playlists: Optional[List[Playlist]] = None,
        rng: Optional[random.Random] = None
    ):
        if playlists is None:
            playlists = [Playlist.create(name) for name in PLAYLIST_NAMES]
        self.playlists = playlists
        self.rng = rng or random.Random()

    def add_track(self, playlist: Playlist, track: Track) -> bool:
        """Add a track to a playlist, refusing duplicate locations."""
        added = playlist.add_track(track)
        if added:
            LOGGER.debug("Added %s to playlist %s", track.title, playlist.name)
        else:
            LOGGER.info(
                "Duplicate not added to playlist %s: %s", playlist.name, track.location
            )
        return added

    def remove_tracks(self, playlist: Playlist, ids: Iterable[str]) -> None:
        """Remove tracks by id. Unknown ids are ignored."""
        before = len(playlist.tracks)
        playlist.remove_tracks(ids)
        LOGGER.debug(
            "Removed %d track(s) from playlist %s",
            before - len(playlist.tracks), playlist.name
        )

    def next_track(self, playlist: Playlist, current_track_id: str) -> Optional[Track]:
        """Pick the track that follows current_track_id.

        Looping repeats the current track and wins over shuffling. Shuffling
        picks uniformly among the other tracks; a single-track playlist
        yields that track again.

        Returns:
            The next track, or None if the playlist is empty or the current
            track is not in it.
        """
        tracks = playlist.tracks
        idx = playlist.index_of(current_track_id)
        if not tracks or idx is None:
            return None

        if playlist.is_looping:
            return tracks[idx]
        if playlist.is_shuffling:
            return tracks[self._get_shuffle_index(len(tracks), idx)]
        return tracks[(idx + 1) % len(tracks)]

    def previous_track(self, playlist: Playlist, current_track_id: str) -> Optional[Track]:
        """Pick the track before current_track_id, wrapping to the end."""
        tracks = playlist.tracks
        idx = playlist.index_of(current_track_id)
        if not tracks or idx is None:
            return None
        return tracks[(idx - 1 + len(tracks)) % len(tracks)]

    def _get_shuffle_index(self, size: int, current: int) -> int:
        """Get a random index other than current."""
        if size < 2:
            return current
        idx = self.rng.randrange(size - 1)
        return idx + 1 if idx >= current else idx

    @staticmethod
    def search(tracks: Iterable[Track], query: str) -> List[Track]:
        """Case-insensitive title match. An empty query matches nothing."""
        if not query:
            return []
        needle = query.casefold()
        return [t for t in tracks if needle in t.title.casefold()]

    def all_tracks(self) -> List[Track]:
        return [t for playlist in self.playlists for t in playlist.tracks]

    def find_track(self, track_id: str) -> Optional[Track]:
        for playlist in self.playlists:
            idx = playlist.index_of(track_id)
            if idx is not None:
                return playlist.tracks[idx]
        return None

    def playlist_named(self, name: str) -> Optional[Playlist]:
        for playlist in self.playlists:
            if playlist.name == name:
                return playlist
        return None

    def playlist_containing(self, track_id: str) -> Optional[Playlist]:
        for playlist in self.playlists:
            if playlist.contains(track_id):
                return playlist
        return None

    @staticmethod
    def locations_for(playlist: Playlist, ids: Iterable[str]) -> List[str]:
        """Locations of the given tracks, in playlist order."""
        ids = set(ids)
        return [t.location for t in playlist.tracks if t.id in ids]
