import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from lanshare.errors import ConfigError

DEFAULT_HOME = Path.home() / ".lanshare"
DEFAULT_RELAY_URL = "http://localhost:3000/api/submit"
DEFAULT_RELAY_TIMEOUT = 10.0


class Settings(BaseModel):
    home: Path = DEFAULT_HOME
    relay_url: str = DEFAULT_RELAY_URL
    relay_timeout: Optional[float] = DEFAULT_RELAY_TIMEOUT
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def state_file(self) -> Path:
        return self.home / "state.json"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """
        Build settings from LANSHARE_* environment variables.

        Unset variables fall back to the defaults above.
        """
        env = os.environ if environ is None else environ

        home = env.get("LANSHARE_HOME")
        return cls(
            home=Path(home).expanduser() if home else DEFAULT_HOME,
            relay_url=env.get("LANSHARE_RELAY_URL") or DEFAULT_RELAY_URL,
            relay_timeout=_parse_timeout(env.get("LANSHARE_RELAY_TIMEOUT")),
            log_level=(env.get("LANSHARE_LOG_LEVEL") or "INFO").upper(),
            log_file=env.get("LANSHARE_LOG_FILE") or None,
        )


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw.strip() == "":
        return DEFAULT_RELAY_TIMEOUT
    if raw.strip().lower() == "none":
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid LANSHARE_RELAY_TIMEOUT (must be a number): {raw!r}") from exc
    if value < 0:
        raise ConfigError("Invalid LANSHARE_RELAY_TIMEOUT (must be >= 0)")
    # 0 disables the transport timeout
    return value or None
