"""Tests for quadplay.importer: copying into the library."""

from pathlib import Path
from unittest.mock import patch

import pytest

from quadplay.importer import LibraryImporter, is_audio_file


class TestIsAudioFile:

    @pytest.mark.parametrize('name', ['a.mp3', 'b.FLAC', 'c.m4a', 'd.wav'])
    def test_audio_extensions(self, name):
        assert is_audio_file(Path(name)) is True

    @pytest.mark.parametrize('name', ['a.txt', 'b.jpg', 'noext'])
    def test_other_extensions(self, name):
        assert is_audio_file(Path(name)) is False


class TestLibraryImporter:

    def test_copy_creates_library(self, tmp_path, source_files):
        importer = LibraryImporter(tmp_path / 'library')
        destination = importer.copy_into_library(source_files[0])
        assert destination == importer.library_dir / 'Alpha.mp3'
        assert destination.read_bytes() == source_files[0].read_bytes()
        assert source_files[0].exists()

    def test_same_name_replaces_copy(self, tmp_path):
        importer = LibraryImporter(tmp_path / 'library')
        first = tmp_path / 'a' / 'song.mp3'
        second = tmp_path / 'b' / 'song.mp3'
        for path, data in ((first, b'one'), (second, b'two')):
            path.parent.mkdir()
            path.write_bytes(data)

        importer.copy_into_library(first)
        destination = importer.copy_into_library(second)

        assert destination.read_bytes() == b'two'

    def test_failed_copy_keeps_existing_copy(self, tmp_path):
        importer = LibraryImporter(tmp_path / 'library')
        first = tmp_path / 'a' / 'song.mp3'
        second = tmp_path / 'b' / 'song.mp3'
        for path, data in ((first, b'one'), (second, b'two')):
            path.parent.mkdir()
            path.write_bytes(data)
        destination = importer.copy_into_library(first)

        with patch("quadplay.importer.shutil.copy2", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                importer.copy_into_library(second)

        assert destination.read_bytes() == b'one'
        assert [p.name for p in importer.library_dir.iterdir()] == ['song.mp3']

    def test_file_already_in_library_is_kept(self, tmp_path):
        importer = LibraryImporter(tmp_path / 'library')
        importer.library_dir.mkdir()
        inside = importer.library_dir / 'song.mp3'
        inside.write_bytes(b'data')
        assert importer.copy_into_library(inside) == inside
        assert inside.read_bytes() == b'data'

    def test_missing_source_raises(self, tmp_path):
        importer = LibraryImporter(tmp_path / 'library')
        with pytest.raises(OSError):
            importer.copy_into_library(tmp_path / 'missing.mp3')

    def test_list_importable(self, tmp_path, source_files):
        folder = source_files[0].parent
        (folder / 'cover.jpg').write_bytes(b'')
        (folder / 'sub').mkdir()
        importer = LibraryImporter(tmp_path / 'library')
        assert [p.name for p in importer.list_importable(folder)] == [
            'Alpha.mp3', 'Bravo.flac', 'Charlie.m4a'
        ]

    def test_list_importable_missing_dir(self, tmp_path):
        importer = LibraryImporter(tmp_path / 'library')
        assert importer.list_importable(tmp_path / 'nowhere') == []
