# player.py
import shutil
import subprocess
from typing import Any, Optional, Protocol, Sequence

from errors import PlaybackError
from log import logger
from models import PlaybackState

RELEASE_TIMEOUT_SECONDS = 2.0


class PlaybackBackend(Protocol):
    """The audio capability the preview player drives."""
    def open_and_play(self, url: str) -> Any: ...

    def stop(self, handle: Any) -> None: ...

    def release(self, handle: Any) -> None: ...

    def is_active(self, handle: Any) -> bool: ...

    def exit_status(self, handle: Any) -> Optional[int]: ...


class CommandPlaybackBackend:
    """Plays previews by spawning an external player command per URL."""
    def __init__(self, command: str, args: Sequence[str] = ()):
        self.command_name = command
        self.command_path = shutil.which(command)
        self.args = list(args)

    @property
    def is_available(self) -> bool:
        return self.command_path is not None

    def open_and_play(self, url: str) -> subprocess.Popen:
        if not self.is_available:
            raise PlaybackError(f"Command '{self.command_name}' not found.")
        try:
            process = subprocess.Popen(
                [self.command_path, *self.args, url],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise PlaybackError(f"Could not start '{self.command_name}': {e}") from e

        returncode = process.poll()
        if returncode is not None and returncode != 0:
            self.release(process)
            raise PlaybackError(f"'{self.command_name}' exited with status {returncode} for {url}")
        return process

    def stop(self, handle: subprocess.Popen) -> None:
        if handle.poll() is None:
            handle.terminate()

    def release(self, handle: subprocess.Popen) -> None:
        try:
            handle.wait(timeout=RELEASE_TIMEOUT_SECONDS)
        except subprocess.TimeoutExpired:
            handle.kill()
            handle.wait()

    def is_active(self, handle: subprocess.Popen) -> bool:
        return handle.poll() is None

    def exit_status(self, handle: subprocess.Popen) -> Optional[int]:
        return handle.poll()


class PreviewPlayer:
    """Holds at most one playing preview.

    Playing the active URL again stops it. Any held resource is released by
    `dispose()`, which also runs when the player is used as a context manager.
    """
    def __init__(self, backend: PlaybackBackend):
        self.backend = backend
        self._state = PlaybackState()
        self.last_error: Optional[PlaybackError] = None

    def __enter__(self) -> "PreviewPlayer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def active_url(self) -> Optional[str]:
        return self._state.active_url

    def is_playing(self, url: str) -> bool:
        return bool(url) and self._state.active_url == url

    def play(self, url: str) -> None:
        if not url:
            logger.info("preview.no_url")
            return
        self.last_error = None
        if self._state.active_url == url:
            self.stop()
            return

        self.stop()
        try:
            handle = self.backend.open_and_play(url)
        except PlaybackError as e:
            logger.error("preview.acquisition_failed", url=url, reason=e.reason)
            self.last_error = e
            return
        self._state = PlaybackState(active_url=url, handle=handle)
        logger.info("preview.started", url=url)

    def stop(self) -> None:
        handle = self._state.handle
        if handle is None:
            return
        url = self._state.active_url
        self._state = PlaybackState()
        try:
            self.backend.stop(handle)
        except Exception as e:
            logger.error("preview.stop_failed", url=url, error=repr(e))
        self._release(handle, url)
        logger.info("preview.stopped", url=url)

    def poll(self) -> bool:
        """Releases a preview that finished on its own. Returns True if the state changed.

        A non-zero exit status is recorded in `last_error`.
        """
        handle = self._state.handle
        if handle is None or self.backend.is_active(handle):
            return False
        url = self._state.active_url
        status = self.backend.exit_status(handle)
        self._state = PlaybackState()
        self._release(handle, url)
        if status:
            self.last_error = PlaybackError(f"Player exited with status {status} for {url}")
            logger.error("preview.playback_failed", url=url, status=status)
        else:
            logger.info("preview.finished", url=url)
        return True

    def dispose(self) -> None:
        self.stop()

    def _release(self, handle: Any, url: Optional[str]) -> None:
        try:
            self.backend.release(handle)
        except Exception as e:
            logger.error("preview.release_failed", url=url, error=repr(e))
