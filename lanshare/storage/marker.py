import json
import logging
from pathlib import Path

from lanshare.storage.atomic import atomic_write_text

logger = logging.getLogger(__name__)

MARKER_KEY = "shared_json_file_handle_v1"


class MarkerStore:
    """
    Local key-value state file holding the "a file was granted before" flag.

    The flag only tells a new session to prompt for the file again; it carries
    nothing that could restore access by itself.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def mark_granted(self) -> bool:
        state = self._read()
        state[MARKER_KEY] = True
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write_text(self.path, json.dumps(state, indent=2))
        except OSError as e:
            logger.warning("Could not persist capability marker to %s: %s", self.path, e)
            return False
        return True

    def has_prior_grant_marker(self) -> bool:
        return self._read().get(MARKER_KEY) is True
