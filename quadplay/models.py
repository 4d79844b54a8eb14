"""Data models for QuadPlay application."""

import uuid
from dataclasses import dataclass, field
from typing import Iterable, List, Optional


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Track:
    """A single imported audio file."""
    id: str
    title: str
    location: str

    @classmethod
    def create(cls, title: str, location: str) -> 'Track':
        """Build a track with a fresh identifier."""
        return cls(id=_new_id(), title=title, location=str(location))

    def to_dict(self) -> dict:
        return {'id': self.id, 'title': self.title, 'location': self.location}

    @classmethod
    def from_dict(cls, data: dict) -> 'Track':
        return cls(id=data['id'], title=data['title'], location=data['location'])


@dataclass
class Playlist:
    """Named, ordered collection of tracks, unique by location."""
    id: str
    name: str
    tracks: List[Track] = field(default_factory=list)
    is_shuffling: bool = False
    is_looping: bool = False

    @classmethod
    def create(cls, name: str) -> 'Playlist':
        return cls(id=_new_id(), name=name)

    def add_track(self, track: Track) -> bool:
        """Append a track unless one with the same location is present.

        Returns:
            True if the track was added, False for a duplicate.
        """
        if any(t.location == track.location for t in self.tracks):
            return False
        self.tracks.append(track)
        return True

    def remove_tracks(self, ids: Iterable[str]) -> None:
        """Drop every track whose id is in ids, keeping the rest in order."""
        ids = set(ids)
        self.tracks = [t for t in self.tracks if t.id not in ids]

    def index_of(self, track_id: str) -> Optional[int]:
        for i, track in enumerate(self.tracks):
            if track.id == track_id:
                return i
        return None

    def contains(self, track_id: str) -> bool:
        return self.index_of(track_id) is not None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'tracks': [t.to_dict() for t in self.tracks],
            'is_shuffling': self.is_shuffling,
            'is_looping': self.is_looping,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Playlist':
        return cls(
            id=data['id'],
            name=data['name'],
            tracks=[Track.from_dict(t) for t in data.get('tracks', [])],
            is_shuffling=bool(data.get('is_shuffling', False)),
            is_looping=bool(data.get('is_looping', False)),
        )
