import logging
from typing import Optional, Union

import httpx

from lanshare.models import ConnectivityState, Record, RelayOutcome

logger = logging.getLogger(__name__)


def _as_state(state: Union[ConnectivityState, bool, str]) -> ConnectivityState:
    if isinstance(state, bool):
        return ConnectivityState.from_bool(state)
    return ConnectivityState(state)


class SyncForwarder:
    """
    Best-effort relay of committed records to the remote aggregator.

    One POST per call, never retried, never raising. Nothing here touches
    the local Database. An owned client gets no timeout unless one is given.
    """

    def __init__(self, url: str, client: Optional[httpx.Client] = None,
                 timeout: Optional[float] = None):
        self.url = url
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def relay(self, record: Record, state: Union[ConnectivityState, bool]) -> RelayOutcome:
        try:
            current = _as_state(state)
        except ValueError:
            logger.warning("Unknown connectivity state %r; relay not attempted", state)
            return RelayOutcome.FAILED

        if current is ConnectivityState.OFFLINE:
            logger.debug("Offline; relay skipped")
            return RelayOutcome.SKIPPED_OFFLINE

        try:
            response = self._client.post(
                self.url,
                content=record.model_dump_json(),
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("Relay rejected by %s: HTTP %s", self.url, e.response.status_code)
            return RelayOutcome.FAILED
        except Exception as e:  # noqa: BLE001 - relay failure must never escape
            logger.warning("Relay to %s failed: %s", self.url, e)
            return RelayOutcome.FAILED

        logger.info("Relayed record to %s", self.url)
        return RelayOutcome.RELAYED

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
