"""
Session controller for the shared-file form.

A UI layer owns one FormSession: it calls startup() once, pick() when the
user asks to choose the shared file, and submit() with validated form
values. Each submission is committed to the backing file before its relay
attempt starts, and the relay result only ever changes the status text.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Optional

from lanshare.capability import Capability, CapabilityBroker, Picker, prompt_for_path
from lanshare.config import Settings
from lanshare.connectivity import ConnectivitySensor, ReachabilityProbe
from lanshare.errors import (
    InvalidCapability,
    InvalidRecord,
    SelectionCancelled,
    SelectionFailed,
    SessionBusy,
    WriteFailure,
)
from lanshare.logging_utils import configure_logging
from lanshare.models import ConnectivityState, Database, Record, RelayOutcome, SubmissionState
from lanshare.relay import SyncForwarder
from lanshare.storage.marker import MarkerStore
from lanshare.storage.records import RecordStore, coerce_record

logger = logging.getLogger(__name__)

STATUS_IDLE = "Idle"
STATUS_REPICK = "Re-select previously used shared JSON file"
STATUS_LOADED = "Loaded shared file"
STATUS_CANCELLED = "Cancelled selection"
STATUS_PICK_FAILED = "File selection failed"
STATUS_NO_FILE = "Pick the shared JSON file first."
STATUS_INVALID = "Submission rejected: invalid record"
STATUS_WRITE_FAILED = "Write failure"
STATUS_BACK_ONLINE = "Back online"
STATUS_OFFLINE = "Offline mode: writes go to shared file"

RELAY_STATUS = {
    RelayOutcome.SKIPPED_OFFLINE: "Saved locally (offline)",
    RelayOutcome.RELAYED: "Saved locally + sent",
    RelayOutcome.FAILED: "Saved locally; send failed",
}


@dataclass(frozen=True)
class SubmissionResult:
    record: Record
    state: SubmissionState
    relay: RelayOutcome
    status: str


class FormSession:
    def __init__(
        self,
        broker: CapabilityBroker,
        store: RecordStore,
        forwarder: SyncForwarder,
        sensor: ConnectivitySensor,
        probe: Optional[ReachabilityProbe] = None,
    ):
        self._broker = broker
        self._store = store
        self._forwarder = forwarder
        self._sensor = sensor
        self._probe = probe
        self._capability: Optional[Capability] = None
        self._db: Database = ()
        self._status = STATUS_IDLE
        self._busy = False
        self._subscription = sensor.on_change(self._on_connectivity)

    def __enter__(self) -> "FormSession":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # --- read-only view ---

    @property
    def database(self) -> Database:
        return self._db

    @property
    def status(self) -> str:
        return self._status

    @property
    def online(self) -> bool:
        return self._sensor.online

    @property
    def has_capability(self) -> bool:
        return self._capability is not None and self._capability.is_valid

    @property
    def busy(self) -> bool:
        return self._busy

    # --- operations ---

    def startup(self) -> str:
        # A previous grant cannot be restored silently; ask for the file again.
        if self._broker.has_prior_grant_marker():
            self._status = STATUS_REPICK
        return self._status

    @contextmanager
    def _exclusive(self):
        if self._busy:
            raise SessionBusy("Another pick or submit is still in progress")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def pick(self) -> str:
        with self._exclusive():
            try:
                capability = self._broker.acquire()
            except SelectionCancelled:
                self._status = STATUS_CANCELLED
                return self._status
            except SelectionFailed as e:
                logger.error("File selection failed: %s", e)
                self._status = STATUS_PICK_FAILED
                return self._status

            if self._capability is not None:
                self._capability.release()
            self._capability = capability
            self._broker.mark_granted()
            self._db = self._store.load(capability)
            self._status = STATUS_LOADED
            return self._status

    def submit(self, values: Any) -> SubmissionResult:
        """
        Commit one record to the shared file, then try to relay it.

        Raises InvalidCapability, InvalidRecord or WriteFailure when nothing
        was committed; the Database is unchanged in those cases.
        """
        with self._exclusive():
            if not self.has_capability:
                self._status = STATUS_NO_FILE
                raise InvalidCapability(STATUS_NO_FILE)
            try:
                record = coerce_record(values)
            except InvalidRecord:
                self._status = STATUS_INVALID
                raise
            logger.debug("Submission %s", SubmissionState.VALIDATED.value)

            try:
                self._db = self._store.append(self._capability, self._db, record)
            except WriteFailure:
                self._status = STATUS_WRITE_FAILED
                raise

            logger.debug("Submission %s", SubmissionState.LOCALLY_COMMITTED.value)
            outcome = self._forwarder.relay(record, self._sensor.current_state())
            self._status = RELAY_STATUS[outcome]
            return SubmissionResult(
                record=record,
                state=SubmissionState.after_relay(outcome),
                relay=outcome,
                status=self._status,
            )

    def refresh_connectivity(self) -> ConnectivityState:
        """Poll the reachability probe, if any, and return the current reading."""
        if self._probe is not None:
            self._probe.poll(self._sensor)
        return self._sensor.current_state()

    def _on_connectivity(self, state: ConnectivityState) -> None:
        self._status = STATUS_BACK_ONLINE if state is ConnectivityState.ONLINE else STATUS_OFFLINE

    def close(self) -> None:
        self._subscription.unsubscribe()
        if self._capability is not None:
            self._capability.release()
            self._capability = None
        self._forwarder.close()


def open_session(settings: Optional[Settings] = None, picker: Picker = prompt_for_path) -> FormSession:
    """Wire a FormSession from Settings (LANSHARE_* environment by default)."""
    settings = settings or Settings.from_env()
    configure_logging(settings)

    broker = CapabilityBroker(picker, MarkerStore(settings.state_file))
    forwarder = SyncForwarder(settings.relay_url, timeout=settings.relay_timeout)
    probe = ReachabilityProbe.for_url(settings.relay_url)
    sensor = ConnectivitySensor(ConnectivityState.from_bool(probe.check()))
    return FormSession(broker, RecordStore(), forwarder, sensor, probe=probe)
