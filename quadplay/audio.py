"""Audio playback through mpv, one track at a time."""

import itertools
import json
import logging
import os
import socket
import subprocess
import tempfile
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future
from pathlib import Path
from typing import Any, List, Optional

LOGGER = logging.getLogger(__name__)


class PlaybackError(Exception):
    """Audio could not be loaded or controlled."""


class TrackNotFoundError(PlaybackError):
    """The track's file does not exist."""


class TrackNotPlayableError(PlaybackError):
    """The track's file has no decodable audio."""


class AudioHandle:
    """A loaded track owned by exactly one backend.

    `finished` resolves once: True when playback reached the end of the
    track, False when it was stopped or the player died.
    """

    def __init__(self, location: str, duration: float = 0.0):
        self.location = location
        self.duration = duration
        self.finished: Future = Future()
        self.start_at = 0.0
        self.stopped = False
        self.process: Optional[subprocess.Popen] = None
        self.ipc: Optional['MpvIpc'] = None

    @property
    def is_started(self) -> bool:
        return self.process is not None

    def finish(self, completed: bool) -> None:
        if not self.finished.done():
            self.finished.set_result(completed)


class AudioBackend(ABC):
    """Interface the playback controller drives."""

    @abstractmethod
    def load(self, location: str) -> AudioHandle:
        """Prepare a track for playback.

        Raises:
            TrackNotFoundError: the file is missing.
            TrackNotPlayableError: the file cannot be decoded.
        """
        raise NotImplementedError

    @abstractmethod
    def play(self, handle: AudioHandle) -> None:
        raise NotImplementedError

    @abstractmethod
    def pause(self, handle: AudioHandle) -> None:
        raise NotImplementedError

    @abstractmethod
    def stop(self, handle: AudioHandle) -> None:
        raise NotImplementedError

    @abstractmethod
    def elapsed(self, handle: AudioHandle) -> float:
        raise NotImplementedError

    @abstractmethod
    def seek(self, handle: AudioHandle, seconds: float) -> None:
        raise NotImplementedError

    def duration(self, handle: AudioHandle) -> float:
        return handle.duration


class MpvIpc:
    """Request/response client for mpv's JSON IPC unix socket."""

    def __init__(self, path: str, timeout: float = 1.0):
        self.path = path
        self.timeout = timeout
        self._sock: Optional[socket.socket] = None
        self._buffer = b''
        self._request_ids = itertools.count(1)
        self._lock = threading.Lock()

    def connect(self, timeout: float = 3.0) -> None:
        """Connect, retrying while mpv creates the socket."""
        deadline = time.monotonic() + timeout
        last_err: Optional[Exception] = None
        while time.monotonic() < deadline:
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            try:
                sock.connect(self.path)
            except OSError as e:
                sock.close()
                last_err = e
                time.sleep(0.05)
                continue
            sock.settimeout(self.timeout)
            self._sock = sock
            return
        raise OSError(f"Failed to connect to mpv socket {self.path}: {last_err}")

    def close(self) -> None:
        if self._sock is None:
            return
        try:
            self._sock.close()
        except OSError as e:
            LOGGER.debug("Error closing mpv socket: %s", e)
        self._sock = None

    def request(self, *command: Any) -> Any:
        """Send a command and wait for its reply.

        Returns:
            The reply's data field.
        """
        with self._lock:
            if self._sock is None:
                raise PlaybackError("mpv is not connected")
            request_id = next(self._request_ids)
            payload = {'command': list(command), 'request_id': request_id}
            try:
                self._sock.sendall((json.dumps(payload) + '\n').encode('utf-8'))
                while True:
                    reply = self._read_message()
                    if reply.get('request_id') == request_id:
                        break
            except (OSError, ValueError) as e:
                raise PlaybackError(f"mpv command {command[0]} failed: {e}") from e

        if reply.get('error') != 'success':
            raise PlaybackError(f"mpv command {command[0]} failed: {reply.get('error')}")
        return reply.get('data')

    def _read_message(self) -> dict:
        while b'\n' not in self._buffer:
            chunk = self._sock.recv(4096)
            if not chunk:
                raise OSError("mpv closed the connection")
            self._buffer += chunk
        line, self._buffer = self._buffer.split(b'\n', 1)
        if not line.strip():
            return {}
        message = json.loads(line.decode('utf-8', errors='replace'))
        return message if isinstance(message, dict) else {}


class AudioPlayer(AudioBackend):
    """Plays tracks with an mpv subprocess controlled over IPC."""

    MPV_CMD = 'mpv'
    FFPROBE_CMD = 'ffprobe'

    def __init__(self, mpv_cmd: Optional[str] = None, ipc_dir: Optional[str] = None):
        self.mpv_cmd = mpv_cmd or self.MPV_CMD
        self.ipc_dir = ipc_dir or tempfile.gettempdir()
        self._active: Optional[AudioHandle] = None
        self._socket_ids = itertools.count(1)

    def load(self, location: str) -> AudioHandle:
        path = Path(location)
        if not path.is_file():
            raise TrackNotFoundError(f"File does not exist: {location}")

        duration = self.probe(path)

        # Only one track may be loaded at a time
        if self._active is not None:
            self.stop(self._active)

        handle = AudioHandle(str(path), duration)
        self._active = handle
        LOGGER.debug("Loaded %s (%.1fs)", path, duration)
        return handle

    def probe(self, path: Path) -> float:
        """Check the file has an audio stream and return its duration.

        Raises:
            TrackNotPlayableError: ffprobe found no audio stream.
        """
        try:
            result = subprocess.run(
                [
                    self.FFPROBE_CMD,
                    '-v', 'error',
                    '-hide_banner',
                    '-show_entries', 'stream=codec_type:format=duration',
                    '-of', 'json',
                    str(path),
                ],
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                check=False,
                timeout=10
            )
        except FileNotFoundError:
            LOGGER.warning("%s not found, skipping playability check", self.FFPROBE_CMD)
            return 0.0
        except subprocess.TimeoutExpired:
            raise TrackNotPlayableError(f"Timed out probing {path}")

        if result.returncode != 0:
            raise TrackNotPlayableError(f"Cannot decode {path}")

        try:
            info = json.loads(result.stdout or '{}')
        except json.JSONDecodeError:
            raise TrackNotPlayableError(f"Unreadable probe output for {path}")

        streams = info.get('streams') or []
        if not any(s.get('codec_type') == 'audio' for s in streams):
            raise TrackNotPlayableError(f"No audio stream in {path}")

        try:
            return float(info.get('format', {}).get('duration', 0.0))
        except (TypeError, ValueError):
            return 0.0

    def play(self, handle: AudioHandle) -> None:
        if handle.stopped:
            raise PlaybackError(f"Track was stopped: {handle.location}")
        if not handle.is_started:
            self._spawn(handle)
        else:
            self._request(handle, 'set_property', 'pause', False)

    def pause(self, handle: AudioHandle) -> None:
        if handle.is_started:
            self._request(handle, 'set_property', 'pause', True)

    def stop(self, handle: AudioHandle) -> None:
        handle.stopped = True
        if self._active is handle:
            self._active = None

        if not handle.is_started:
            handle.finish(False)
            return

        proc = handle.process
        if proc.poll() is None:
            proc.terminate()
            try:
                proc.wait(timeout=5)
            except subprocess.TimeoutExpired:
                LOGGER.warning("mpv did not terminate, killing.")
                proc.kill()
                proc.wait()
        LOGGER.debug("Stopped %s", handle.location)

    def elapsed(self, handle: AudioHandle) -> float:
        if not handle.is_started or handle.ipc is None:
            return handle.start_at
        try:
            value = handle.ipc.request('get_property', 'time-pos')
        except PlaybackError as e:
            LOGGER.debug("Could not read position: %s", e)
            return handle.start_at
        if value is None:
            return handle.start_at
        handle.start_at = float(value)
        return handle.start_at

    def seek(self, handle: AudioHandle, seconds: float) -> None:
        seconds = max(0.0, float(seconds))
        if not handle.is_started:
            handle.start_at = seconds
            return
        self._request(handle, 'seek', seconds, 'absolute')
        handle.start_at = seconds

    def _request(self, handle: AudioHandle, *command: Any) -> Any:
        if handle.ipc is None:
            raise PlaybackError("mpv is not connected")
        return handle.ipc.request(*command)

    def _build_command(self, handle: AudioHandle, socket_path: str) -> List[str]:
        return [
            self.mpv_cmd,
            '--no-video',
            '--audio-display=no',
            '--terminal=no',
            '--keep-open=no',
            f'--input-ipc-server={socket_path}',
            f'--start={handle.start_at:.3f}',
            handle.location,
        ]

    def _spawn(self, handle: AudioHandle) -> None:
        socket_path = os.path.join(
            self.ipc_dir, f'quadplay-mpv-{os.getpid()}-{next(self._socket_ids)}.sock'
        )
        try:
            os.remove(socket_path)
        except FileNotFoundError:
            pass

        cmd = self._build_command(handle, socket_path)
        try:
            handle.process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL
            )
        except OSError as e:
            raise PlaybackError(f"Failed to start {self.mpv_cmd}: {e}") from e
        LOGGER.info("Started process: %s", ' '.join(cmd))

        ipc = MpvIpc(socket_path)
        try:
            ipc.connect()
        except OSError as e:
            handle.process.terminate()
            handle.process.wait()
            handle.process = None
            raise PlaybackError(str(e)) from e
        handle.ipc = ipc

        threading.Thread(
            target=self._watch, args=(handle, socket_path), name='mpv-watch', daemon=True
        ).start()

    @staticmethod
    def _watch(handle: AudioHandle, socket_path: str) -> None:
        """Wait for mpv to exit and resolve the handle's completion."""
        returncode = handle.process.wait()
        if handle.ipc is not None:
            handle.ipc.close()
        try:
            os.remove(socket_path)
        except OSError:
            pass
        completed = not handle.stopped and returncode == 0
        LOGGER.info("mpv exited with %s for %s", returncode, handle.location)
        handle.finish(completed)
