"""
Capability handling for the shared backing file.

A Capability is the session's exclusive, user-granted right to read and
write one JSON file. It cannot be persisted: the only thing that outlives a
session is the marker recorded by MarkerStore, which merely tells the next
session to ask the user to pick the file again.
"""

import logging
import os
import secrets
from pathlib import Path
from typing import Callable, Optional, Union

from lanshare.errors import InvalidCapability, SelectionCancelled, SelectionFailed
from lanshare.storage.atomic import atomic_write_text
from lanshare.storage.marker import MarkerStore

logger = logging.getLogger(__name__)

ACCEPTED_SUFFIXES = (".json",)

PathLike = Union[str, os.PathLike]
Picker = Callable[[], Optional[PathLike]]


class Capability:
    """Read/write access to one backing file for the lifetime of a session."""

    def __init__(self, path: Path):
        self._path = Path(path)
        self._token = secrets.token_hex(8)
        self._released = False

    def __repr__(self) -> str:
        state = "released" if self._released else "active"
        return f"<Capability {self._path.name} {state}>"

    def __reduce__(self):
        raise TypeError("Capability cannot be persisted; ask the user to pick the file again")

    def __enter__(self) -> "Capability":
        return self

    def __exit__(self, *exc) -> None:
        self.release()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def token(self) -> str:
        return self._token

    @property
    def is_valid(self) -> bool:
        return not self._released

    def release(self) -> None:
        if not self._released:
            logger.debug("Released capability for %s", self._path)
        self._released = True

    def ensure_valid(self) -> None:
        if self._released:
            raise InvalidCapability(f"Capability for {self._path} has been released")

    def read_text(self) -> str:
        self.ensure_valid()
        return self._path.read_text(encoding="utf-8")

    def write_text(self, text: str) -> None:
        self.ensure_valid()
        atomic_write_text(self._path, text)


def prompt_for_path() -> Optional[str]:
    """Ask on the terminal for the shared JSON file. A blank answer cancels."""
    resp = input("Path to the shared JSON file (blank to cancel): ").strip()
    return resp or None


class CapabilityBroker:
    def __init__(self, picker: Picker = prompt_for_path, marker_store: Optional[MarkerStore] = None):
        self._picker = picker
        self._markers = marker_store

    def acquire(self) -> Capability:
        """
        Ask the user to choose the backing file and return a Capability for it.

        Raises SelectionCancelled when the user aborts the prompt and
        SelectionFailed for anything else that prevents access. Does not
        touch the marker; call mark_granted() for that.
        """
        try:
            chosen = self._picker()
        except (KeyboardInterrupt, EOFError) as exc:
            raise SelectionCancelled() from exc
        except Exception as exc:
            logger.error("File pick error: %s", exc)
            raise SelectionFailed(f"File picker failed: {exc}") from exc

        if chosen is None:
            raise SelectionCancelled()

        path = Path(chosen).expanduser()
        if path.suffix.lower() not in ACCEPTED_SUFFIXES:
            raise SelectionFailed(f"Not a JSON file: {path}")
        if not path.is_file():
            raise SelectionFailed(f"No such file: {path}")
        if not os.access(path, os.R_OK | os.W_OK):
            raise SelectionFailed(f"File is not readable and writable: {path}")
        # appends replace the file through a sibling temp file
        if not os.access(path.parent, os.W_OK | os.X_OK):
            raise SelectionFailed(f"Folder is not writable: {path.parent}")

        capability = Capability(path.resolve())
        logger.info("Capability granted for %s", capability.path)
        return capability

    def mark_granted(self) -> bool:
        if self._markers is None:
            return False
        return self._markers.mark_granted()

    def has_prior_grant_marker(self) -> bool:
        if self._markers is None:
            return False
        return self._markers.has_prior_grant_marker()
